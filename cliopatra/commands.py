"""
Cliopatra command sets: declare, match, validate and describe parameters.

What this module provides
- CommandSet: an ordered key → parameter mapping plus the command-level
  conventions every parameter inherits:
  • default prefixes ("-") and suffixes ("=") for parameters that declare none;
  • naming-convention toggles (posix, gnu, multics, runeimp, posix_groups)
    consulted by the matching engine;
  • the environment/config mappings used by option and argument defaults.

Lifecycle
1. build the set, register parameters (add_flag/add_option/add_argument/add);
2. match the tokens once (match);
3. report problems (validate) and query values by key ([key].get_value()).

Notes
- Keys are unique by mapping semantics: registering a key again replaces the
  previous parameter; nothing detects duplicates.
- Convention toggles are plain state; they only change behavior when the
  matching engine runs.
- validate() is the only place unknown tokens and missing required parameters
  turn into faults; the engine itself never fails.

Quick start
    from cliopatra import CommandSet

    cs = CommandSet("tool")
    cs.add_flag("verbose", ["v", "verbose"], ["-", "--"], "print more")
    cs.add_option("out", ["o", "output"], ["-", "--"], "output file", default="a.out")
    cs.add_argument("source", help="input file")
    items = cs.match(["-v", "--output=b.out", "main.c"])
    cs.validate(items)
    cs["out"].get_value()  # "b.out"
"""
import difflib
import logging
import os
from collections.abc import Mapping

from rich.box import ROUNDED
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from . import matching
from .faults import *
from .parameters import Kind, Flag, Option, Argument, Parameter
from .utils import *

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "-"
DEFAULT_SUFFIX = "="


def _affixes(cls, affixes, default, label, /):
    if affixes is Unset:
        return (default,)
    if isinstance(affixes, str):
        affixes = (affixes,)
    affixes = tuple(dict.fromkeys(affixes))
    if not all(isinstance(affix, str) for affix in affixes):
        raise TypeError(f"{cls.__name__} {label} must be strings")
    return affixes or (default,)


def _mapping(cls, mapping, default, label, /):
    mapping = coalesce(mapping, default)
    if not isinstance(mapping, Mapping):
        raise TypeError(f"{cls.__name__} {label} must be a mapping")
    return mapping


def _names(names, /):
    if isinstance(names, str):
        return (names,)
    return tuple(coalesce(names, ()))


class CommandSet(Mapping):
    """
    Ordered collection of parameters and the conventions they share.

    Parameters
    - name: Unset | str
      Label used in help and fault headers.
    - prefixes / suffixes: Unset | str | Iterable[str]
      Defaults applied to parameters registered without their own; ("-",) and
      ("=",) when omitted or empty.
    - config: Mapping[str, str]
      Already-resolved configuration values, looked up by config default names.
    - environ: Mapping[str, str]
      Environment used for environment defaults (os.environ by default).
    - posix, gnu, multics, runeimp, posix_groups: bool
      Naming conventions (see set_posix & co.).
    - shell, fancy, colorful: bool
      Fault presentation: shell prints faults with rich and exits instead of
      raising; fancy draws panels; colorful enables styles.
    """

    name = mirror("name")
    help = mirror("help")
    summary = mirror("summary")
    description = mirror("description")
    prefixes = mirror("prefixes")
    suffixes = mirror("suffixes")
    config = mirror("config")
    posix = mirror("posix")
    gnu = mirror("gnu")
    multics = mirror("multics")
    runeimp = mirror("runeimp")
    posix_groups = mirror("posix_groups")
    shell = mirror("shell")
    fancy = mirror("fancy")
    colorful = mirror("colorful")

    def __init__(
            self,
            name=Unset,
            /,
            *,
            help=Unset,
            summary=Unset,
            description=Unset,
            prefixes=Unset,
            suffixes=Unset,
            config=Unset,
            environ=Unset,
            posix=False,
            gnu=False,
            multics=False,
            runeimp=False,
            posix_groups=False,
            shell=False,
            fancy=False,
            colorful=True,
    ):
        for label, object in (("name", name), ("help", help), ("summary", summary), ("description", description)):
            if not isinstance(object, str | Unset):
                raise TypeError(f"{type(self).__name__} {label!r} must be a string")

        self._name = coalesce(name, "")
        self._help = coalesce(help, "")
        self._summary = coalesce(summary, "")
        self._description = coalesce(description, "")
        self._prefixes = _affixes(type(self), prefixes, DEFAULT_PREFIX, "prefixes")
        self._suffixes = _affixes(type(self), suffixes, DEFAULT_SUFFIX, "suffixes")
        self._config = _mapping(type(self), config, {}, "config")
        self._environ = _mapping(type(self), environ, os.environ, "environ")
        self._parameters = {}

        self._posix = False
        self._gnu = False
        self._multics = False
        self._runeimp = False
        self._posix_groups = False
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)

        self.set_posix(posix)
        self.set_gnu(gnu)
        self.set_multics(multics)
        self.set_runeimp(runeimp)
        self.set_posix_groups(posix_groups)

    # --- mapping protocol ---

    def __getitem__(self, key):
        return self._parameters[key]

    def __iter__(self):
        return iter(self._parameters)

    def __len__(self):
        return len(self._parameters)

    def __rich_repr__(self):
        yield "name", self.name
        yield "prefixes", self.prefixes
        yield "parameters", dict(self._parameters)

    def __repr__(self):
        return "command-set(%s)" % ", ".join("%s=%r" % item for item in self.__rich_repr__())

    def _options(self):
        return {
            "shell": self.shell,
            "fancy": self.fancy,
            "colorful": self.colorful,
            "prog": self.name or "cliopatra",
        }

    # --- registration ---

    def add(self, key, parameter, /):
        """
        Register a prebuilt parameter under 'key' (replacing any previous one).

        Parameters without prefixes/suffixes inherit the set's; the parameter is
        bound to the set's environment and config mappings.
        """
        if not isinstance(parameter, Parameter):
            raise TypeError(f"{type(self).__name__}.add() argument must be a parameter")
        parameter.set_key(key)
        if not parameter.get_prefix():
            parameter.set_prefix(self._prefixes)
        if not parameter.get_suffix():
            parameter.set_suffix(self._suffixes)
        parameter._bind(self._environ, self._config)
        logger.debug("%s | add %s %r", self.name, parameter.__typename__, key)
        self._parameters[key] = parameter
        return parameter

    def add_flag(self, key, names, prefixes=Unset, help=Unset, **options):
        """
        Declare a flag; 'options' are forwarded to Flag (default, required, ...).
        """
        return self.add(key, Flag(*_names(names), prefixes=coalesce(prefixes, ()), help=help, **options))

    def add_option(self, key, names, prefixes=Unset, help=Unset, **options):
        """
        Declare an option; 'options' are forwarded to Option (default, env,
        config, preferred, required, ...).
        """
        return self.add(key, Option(*_names(names), prefixes=coalesce(prefixes, ()), help=help, **options))

    def add_argument(self, key, names=Unset, prefixes=Unset, help=Unset, **options):
        """
        Declare a positional argument; arguments are assigned in declaration order.
        """
        return self.add(key, Argument(*_names(names), prefixes=coalesce(prefixes, ()), help=help, **options))

    def rekey(self, key, new, /):
        """
        Move the parameter at 'key' to 'new', keeping parameter and mapping in step.
        """
        parameter = self._parameters[key]
        parameter.set_key(new)
        del self._parameters[key]
        self._parameters[new] = parameter
        return parameter

    # --- conventions ---

    def set_posix(self, enabled, /):
        """
        POSIX short options: a single letter name with a single hyphen prefix.
        """
        self._posix = bool(enabled)

    def set_gnu(self, enabled, /):
        """
        GNU long options: word names with a double hyphen prefix; '--' ends options.
        """
        self._gnu = bool(enabled)

    def set_multics(self, enabled, /):
        """
        Multics options: word names with a single hyphen prefix, hyphen or
        underscore word separation. Should not be combined with POSIX groups.
        """
        self._multics = bool(enabled)
        if self._multics and self._posix_groups:
            self._overlap("multics")

    def set_runeimp(self, enabled, /):
        """
        RuneImp options: Multics plus groups of single letter flags behind a
        double hyphen ('--abc'). Can not be combined with POSIX groups.
        """
        if enabled and self._posix_groups:
            self._conflict("runeimp", "posix groups")
        self._runeimp = bool(enabled)

    def set_posix_groups(self, enabled, /):
        """
        POSIX groups: '-abc' is expanded into '-a -b -c'.
        """
        if enabled and self._runeimp:
            self._conflict("posix groups", "runeimp")
        self._posix_groups = bool(enabled)
        if self._posix_groups and self._multics:
            self._overlap("posix groups")

    def _conflict(self, enabling, enabled, /):
        raise ConventionConflictError(
            "%s cannot be combined with %s" % (enabling, enabled),
            code=FaultCode.CONVENTION_CONFLICT,
            title="conflicting conventions",
            hint="disable %s first" % enabled,
        )

    def _overlap(self, enabling, /):
        trigger(ConventionWarning(
            "%s overlaps multics names: a declared '-abc' word wins and shadows the group" % enabling,
            code=FaultCode.CONVENTION_OVERLAP,
            title="overlapping conventions",
            hint="prefer gnu long options when posix groups are enabled",
        ), **self._options())

    # --- matching ---

    def reset(self):
        """
        Clear every parameter's command-line state for a fresh match pass.
        """
        for parameter in self._parameters.values():
            parameter.reset()

    def match(self, tokens, /, *, reset=True):
        """
        Run the matching engine over 'tokens' (argv without the program name).

        Returns the list of MatchItem; parameters are reset first unless
        reset=False.
        """
        if reset:
            self.reset()
        return matching.match(self, tokens)

    def validate(self, items, /):
        """
        Turn unmatched tokens and absent required parameters into faults.

        All faults are bundled in one CommandExit, surfaced through trigger():
        raised normally, printed and exiting in shell mode.
        """
        faults = []
        known = [spelling.text for spelling in matching.spellings(self)]

        for item in matching.unmatched(items):
            suggestions = difflib.get_close_matches(item.token, known, 3)
            if suggestions:
                hint = "did you mean %r?" % suggestions[0]
            else:
                hint = "remove it or declare a parameter for it"
            faults.append(UnmatchedTokenError(
                "unknown parameter %r at %s position" % (item.token, ordinal(item.index)),
                code=FaultCode.UNMATCHED_TOKEN,
                title="unknown parameter",
                hint=hint,
                token=item.token,
                index=item.index,
                suggestions=suggestions,
            ))

        # Required means present on the command line; defaults do not count.
        for parameter in self._parameters.values():
            if parameter.matched:
                continue
            if parameter.required or parameter.kind is Kind.OPTION and parameter.attached:
                faults.append(parameter.missing())

        if faults:
            trigger(CommandExit(faults), **self._options())

    # --- help ---

    def _spelled(self, parameter, /):
        return [spelling.text for spelling in matching.spellings(self) if spelling.parameter is parameter]

    def _rows(self):
        for key, parameter in self._parameters.items():
            if parameter.kind is Kind.ARGUMENT:
                label = coalesce(parameter.metavar, None) or key.upper()
                yield "arguments", label, parameter.get_help(), key
            else:
                yield "options", " | ".join(self._spelled(parameter)), parameter.get_help(), key

    def get_help(self):
        """
        Plain-text usage: every spelling of every parameter with its help and key.
        """
        help = self.name
        if self.summary:
            help += " - " + self.summary
        sections = {"options": [], "arguments": []}
        for section, label, text, key in self._rows():
            sections[section].append("  %-20s  %s\n" % (label, (text + " (" + key + ")").strip()))
        for section, lines in sections.items():
            if lines:
                help += "\n\n%s:\n" % section.upper() + "".join(lines)
        return help

    def __rich__(self):
        table = Table(box=ROUNDED, show_header=True, expand=False)
        table.add_column("parameter", style="bold cyan" if self.colorful else "")
        table.add_column("help")
        table.add_column("key", style="dim" if self.colorful else "")
        for section, label, text, key in self._rows():
            table.add_row(label, text, key)
        title = Text(self.name or "cliopatra", "bold" if self.colorful else "")
        if self.description:
            return Panel(table, title=title, subtitle=self.description, title_align="left")
        return Panel(table, title=title, title_align="left")


__all__ = (
    "CommandSet",
)
