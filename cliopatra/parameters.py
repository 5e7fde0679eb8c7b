r"""
Cliopatra parameter declarations.

Overview
- Record: the passive state every parameter carries (key, names, prefixes,
  suffixes, required-ness, value, default sources, help). Exactly one record
  backs one parameter and is never shared.
- Kind: explicit tag (FLAG, OPTION, ARGUMENT) the matching engine dispatches on.
- Parameter kinds, one capability set over one record:
  • Flag: presence-only boolean, static default only.
  • Option: named, value-bearing; resolves command line → config/environment → default.
  • Argument: positional, value-bearing; same resolution chain, no matchable names.

Capability set (all kinds)
- get_value, get_flag, get_int, get_uint, get_number
- get_name, get_prefix, get_help
- set_name, set_key, set_prefix, set_suffix, set_default, set_required,
  set_value, set_help, set_flag, reset
- Option/Argument only: set_env_default, set_config_default, set_config_preferred

Boolean coercion
- Always utils.truthy(): "1", "true", "yes", case-insensitive; everything else is false.

Default resolution (Option/Argument)
- A value set on the command line always wins.
- Otherwise the preferred of config/environment (config when 'preferred' is set,
  environment otherwise), then the other one, then the static default.
- Config and environment values that are empty strings count as absent.
- The first successful resolution is materialized into the record (source is
  kept) so repeated queries are stable.

Quick example:
    >>> out = Option("o", "output", prefixes=("-", "--"), default="a.out")
    >>> out.set_env_default("APP_OUTPUT")
    >>> out.get_value()
    'a.out'
"""
import logging
import os
import re
from enum import Enum
from types import MappingProxyType
from typing import final

from .faults import *
from .utils import *

logger = logging.getLogger(__name__)

COMMAND_LINE = "command-line"
CONFIG = "config"
ENVIRONMENT = "environment"
DEFAULT = "default"


class Kind(Enum):
    """
    tag of the closed set of parameter kinds.
    """
    FLAG = "flag"
    OPTION = "option"
    ARGUMENT = "argument"


class Record:
    """
    Shared, behavior-free state of one parameter.

    Fields
    - key: lookup key inside the owning command set (Unset until assigned).
    - names: accepted spellings without prefix, in declaration order.
    - prefixes / suffixes: allowed token prefixes and value delimiters.
    - required: absence from the command line is an error for validate().
    - value / source: resolved string and where it came from (Unset when not set).
    - default / env / config / preferred: the three default sources and the
      config-over-environment preference.
    - help / description / metavar: presentation metadata.
    - index: 1-based token index the parameter matched at (0 when never matched).
    - attached: an option matched its name but received no value.
    """

    __slots__ = (
        "key",
        "names",
        "prefixes",
        "suffixes",
        "required",
        "value",
        "source",
        "default",
        "env",
        "config",
        "preferred",
        "help",
        "description",
        "metavar",
        "index",
        "attached",
    )

    def __init__(self):
        self.key = Unset
        self.names = ()
        self.prefixes = ()
        self.suffixes = ()
        self.required = False
        self.value = Unset
        self.source = Unset
        self.default = Unset
        self.env = Unset
        self.config = Unset
        self.preferred = False
        self.help = ""
        self.description = Unset
        self.metavar = Unset
        self.index = 0
        self.attached = False

    def __rich_repr__(self):
        for name in self.__slots__:
            yield name, getattr(self, name)

    def __repr__(self):
        return "record(%s)" % ", ".join("%s=%r" % item for item in self.__rich_repr__())


class ParameterType(type):
    """
    Metaclass wiring read-only introspection onto parameter kinds.

    Responsibilities
    - __typename__ derived from the class name ("Flag" → "flag").
    - one mirrored, read-only property per name in __introspectable__, read
      from the backing record.
    - stable __repr__/__rich_repr__ limited to __displayable__.
    """
    __introspectable__ = ()
    __displayable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        introspectable = namespace.get("__introspectable__", ())
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name, "record") for name in introspectable
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return "%s(%s)" % (
                type(self).__typename__,
                ", ".join("%s=%r" % item for item in self.__rich_repr__())
            )
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__displayable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_names(parameter, names, /):
    if isinstance(names, str):
        names = (names,)
    sanitized = []
    for name in names:
        if not isinstance(name, str):
            raise TypeError(f"{parameter.__typename__} names must be strings")
        elif not (name := name.strip()):
            raise InvalidNameError(
                "the parameter name length must be greater than zero",
                code=FaultCode.INVALID_NAME,
                title="invalid parameter name",
                hint="give every name at least one non-blank character",
                key=parameter.key,
            )
        sanitized.append(name)
    return tuple(sanitized)


def _sanitize_affixes(parameter, affixes, label, /):
    if isinstance(affixes, str):
        affixes = (affixes,)
    sanitized = []
    for affix in affixes:
        if not isinstance(affix, str):
            raise TypeError(f"{parameter.__typename__} {label} must be strings")
        if affix not in sanitized:
            sanitized.append(affix)
    return tuple(sanitized)


def _literal(text, kind, /):
    # No surrounding blanks and no '_' digit grouping.
    if text != text.strip() or "_" in text:
        raise ValueError(f"invalid literal for {kind}: {text!r}")
    return text


class Parameter(metaclass=ParameterType):
    """
    Base of the three parameter kinds; not instantiable on its own.

    Owns one Record and the lookup mappings used for default resolution
    (os.environ and an empty config until a command set binds its own).
    Each kind supplies set_default, get_value and missing.
    """

    __kind__ = Unset

    __introspectable__ = (
        "key",
        "names",
        "prefixes",
        "suffixes",
        "required",
        "value",
        "source",
        "default",
        "help",
        "description",
        "metavar",
        "index",
    )
    __displayable__ = (
        "key",
        "names",
        "prefixes",
        "required",
        "help",
    )

    def __new__(cls, *args, **kwargs):
        if cls.__kind__ is Unset:
            raise TypeError(f"type {cls.__name__!r} cannot be instantiated directly")
        return super().__new__(cls)

    def __init__(
            self,
            *names,
            key=Unset,
            prefixes=Unset,
            suffixes=Unset,
            default=Unset,
            required=False,
            help=Unset,
            description=Unset,
            metavar=Unset,
    ):
        self._record = Record()
        self._environ = os.environ
        self._config = MappingProxyType({})

        if names:
            self.set_name(names)
        if key is not Unset:
            self.set_key(key)
        if prefixes is not Unset:
            self.set_prefix(prefixes)
        if suffixes is not Unset:
            self.set_suffix(suffixes)
        if default is not Unset:
            self.set_default(default)
        if help is not Unset:
            self.set_help(help)
        self.set_required(required)
        self._record.description = description
        self._record.metavar = metavar

    @property
    def kind(self):
        return self.__kind__

    @property
    def value_set(self):
        """
        True once a value came from the command line or was materialized from a default.
        """
        return self._record.source is not Unset

    @property
    def matched(self):
        """
        True when the value was set by the command line.
        """
        return self._record.source == COMMAND_LINE

    def _bind(self, environ, config, /):
        # Called by the owning command set on registration.
        self._environ = environ
        self._config = config

    # --- declaration ---

    def set_name(self, names, /):
        """
        Replace the accepted spellings; fails with InvalidNameError, leaving the
        current names untouched, when any entry is blank.
        """
        self._record.names = _sanitize_names(self, names)

    def set_key(self, key, /):
        """
        Set the lookup key. The owning command set must be re-keyed as well
        (see CommandSet.rekey).
        """
        if not isinstance(key, str):
            raise TypeError(f"{self.__typename__} key must be a string")
        if not key:
            raise EmptyKeyError(
                "the key length must be greater than zero",
                code=FaultCode.EMPTY_KEY,
                title="empty key",
                hint="use a non-empty key to reference the parameter in code",
            )
        self._record.key = key

    def set_prefix(self, prefixes, /, append=False):
        """
        Union (append=True) or replace the allowed prefixes.
        """
        prefixes = _sanitize_affixes(self, prefixes, "prefixes")
        if append:
            prefixes = _sanitize_affixes(self, self._record.prefixes + prefixes, "prefixes")
        self._record.prefixes = prefixes

    def set_suffix(self, suffixes, /, append=False):
        suffixes = _sanitize_affixes(self, suffixes, "suffixes")
        if append:
            suffixes = _sanitize_affixes(self, self._record.suffixes + suffixes, "suffixes")
        self._record.suffixes = suffixes

    def set_required(self, required, /):
        self._record.required = bool(required)

    def set_help(self, help, /):
        if not isinstance(help, str):
            raise TypeError(f"{self.__typename__} help must be a string")
        self._record.help = help.strip()

    # --- command line ---

    def set_value(self, value, /):
        """
        Store a command-line value and mark it set.
        """
        if not isinstance(value, str):
            raise TypeError(f"{self.__typename__} value must be a string")
        logger.debug("%s %r | set_value(%r)", self.__typename__, self.key, value)
        self._record.value = value
        self._record.source = COMMAND_LINE
        self._record.attached = False

    def set_flag(self):
        raise TypeError(f"set_flag() use not appropriate for {self.__typename__} parameters")

    def mark(self, index, /):
        """
        Remember the 1-based token index the parameter matched at.
        """
        self._record.index = index

    def reset(self):
        """
        Forget everything the command line (or a materialized default) set.
        """
        self._record.value = Unset
        self._record.source = Unset
        self._record.index = 0
        self._record.attached = False

    # --- queries ---

    def get_name(self):
        return self._record.names

    def get_prefix(self):
        return self._record.prefixes

    def get_suffix(self):
        return self._record.suffixes

    def get_help(self):
        return self._record.help

    def get_flag(self):
        try:
            return truthy(self.get_value())
        except MissingValueError:
            return False

    def get_int(self):
        return int(_literal(self.get_value(), "int"))

    def get_uint(self):
        text = _literal(self.get_value(), "unsigned int")
        if text.startswith(("+", "-")):
            raise ValueError(f"invalid literal for unsigned int: {text!r}")
        return int(text)

    def get_number(self):
        return float(_literal(self.get_value(), "number"))


@final
class Flag(Parameter):
    """
    Boolean presence parameter.

    A flag is true from the moment the matching engine sees one of its
    spellings, independently of the following token. Its only default source is
    a static truthy string; environment and config defaults do not apply.
    """

    __kind__ = Kind.FLAG
    __displayable__ = Parameter.__displayable__ + ("state",)

    def __init__(self, *names, default=False, **options):
        self._fallback = False
        self._state = False
        super().__init__(*names, default=default, **options)

    @property
    def state(self):
        return self._state

    def set_default(self, default, /):
        """
        Seed the boolean default from a truthy string (bools are accepted too).
        """
        if isinstance(default, bool):
            default = "true" if default else "false"
        if not isinstance(default, str):
            raise TypeError("flag default must be a string or a boolean")
        self._record.default = default
        self._fallback = truthy(default)
        if not self.matched:
            self._state = self._fallback

    def set_flag(self):
        """
        Mark the flag as used on the command line.
        """
        logger.debug("flag %r | set_flag()", self.key)
        self._state = True
        self._record.value = "true"
        self._record.source = COMMAND_LINE

    def set_value(self, value, /):
        super().set_value(value)
        self._state = truthy(value)

    def reset(self):
        super().reset()
        self._state = self._fallback

    def missing(self):
        return FlagMissingError(
            "the flag was not set",
            code=FaultCode.FLAG_MISSING,
            title="flag missing",
            hint="pass the flag on the command line",
            key=self.key,
        )

    def get_value(self):
        return "true" if self._state else "false"

    def get_flag(self):
        return self._state

    def get_int(self):
        return 1 if self._state else 0

    def get_uint(self):
        return 1 if self._state else 0

    def get_number(self):
        return 1.0 if self._state else 0.0


class _Valued(Parameter):
    """
    Shared resolution chain of Option and Argument.
    """

    __introspectable__ = Parameter.__introspectable__ + (
        "env",
        "config",
        "preferred",
    )

    def __init__(self, *names, env=Unset, config=Unset, preferred=False, **options):
        super().__init__(*names, **options)
        if env is not Unset:
            self.set_env_default(env)
        if config is not Unset:
            self.set_config_default(config)
        self.set_config_preferred(preferred)

    def set_default(self, default, /):
        """
        Store the static fallback value verbatim.
        """
        if not isinstance(default, str):
            raise TypeError(f"{self.__typename__} default must be a string")
        self._record.default = default

    def set_env_default(self, name, /):
        """
        Name the environment variable used as a default source.
        """
        if not isinstance(name, str):
            raise TypeError(f"{self.__typename__} environment default name must be a string")
        if not name.strip():
            raise EmptyEnvDefaultNameError(
                "the environment variable default name must not be empty (zero length or all whitespace)",
                code=FaultCode.EMPTY_ENV_DEFAULT_NAME,
                title="empty environment default name",
                hint="name an environment variable, e.g. APP_OUTPUT",
                key=self.key,
            )
        self._record.env = name.strip()

    def set_config_default(self, name, /, preferred=Unset):
        """
        Name the configuration key used as a default source; optionally set
        whether it is preferred over the environment.
        """
        if not isinstance(name, str):
            raise TypeError(f"{self.__typename__} config default name must be a string")
        if not name.strip():
            raise EmptyConfigDefaultNameError(
                "the config default name must not be empty (zero length or all whitespace)",
                code=FaultCode.EMPTY_CONFIG_DEFAULT_NAME,
                title="empty config default name",
                hint="name a configuration key, e.g. output.path",
                key=self.key,
            )
        self._record.config = name.strip()
        if preferred is not Unset:
            self.set_config_preferred(preferred)

    def set_config_preferred(self, preferred, /):
        self._record.preferred = bool(preferred)

    def _resolve(self):
        record = self._record
        sources = [
            (CONFIG, record.config, self._config),
            (ENVIRONMENT, record.env, self._environ),
        ]
        if not record.preferred:
            sources.reverse()
        for source, name, mapping in sources:
            if name is not Unset and mapping.get(name):
                return source, mapping[name]
        if record.default is not Unset:
            return DEFAULT, record.default
        return Unset, Unset

    def get_value(self):
        """
        Return the resolved value or raise the kind's missing error.
        """
        record = self._record
        if record.source is Unset:
            source, value = self._resolve()
            if source is Unset:
                raise self.missing()
            logger.debug("%s %r | resolved from %s", self.__typename__, self.key, source)
            record.value, record.source = value, source
        return record.value


@final
class Option(_Valued):
    """
    Named parameter carrying a value.

    Values attach as '<prefix><name><suffix><value>' (e.g. --output=a.out), as
    the next token, or (POSIX convention) glued to a short spelling (-oa.out).
    """

    __kind__ = Kind.OPTION
    __introspectable__ = _Valued.__introspectable__ + ("attached",)

    def missing(self):
        if self._record.attached:
            return OptionValueMissingError(
                "the option's value was not set",
                code=FaultCode.OPTION_VALUE_MISSING,
                title="option value missing",
                hint="pass a value after the option (for example: --name=value)",
                key=self.key,
                index=self._record.index,
            )
        return OptionMissingError(
            "the option was not set",
            code=FaultCode.OPTION_MISSING,
            title="option missing",
            hint="pass the option on the command line or give it a default",
            key=self.key,
        )

    def mark_attached(self, index, /):
        """
        Record that the option's name matched at 'index' without a value.
        """
        logger.debug("option %r | seen without value at %d", self.key, index)
        self._record.index = index
        self._record.attached = True


@final
class Argument(_Valued):
    """
    Positional parameter, assigned by order rather than by name.

    Names given to an argument only label it in help; get_name() is always empty
    so the matching engine never tries to match it by spelling.
    """

    __kind__ = Kind.ARGUMENT

    def get_name(self):
        return ()

    def missing(self):
        return ArgumentMissingError(
            "argument not set",
            code=FaultCode.ARGUMENT_MISSING,
            title="argument missing",
            hint="pass the argument on the command line or give it a default",
            key=self.key,
        )


__all__ = (
    "Kind",
    "Record",
    "Parameter",
    "Flag",
    "Option",
    "Argument",
)

# The metaclass is an implementation detail.
del ParameterType
