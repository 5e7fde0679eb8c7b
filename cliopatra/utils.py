"""
Cliopatra utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the parameter, command and matching layers.

Overview
- UnsetType / Unset
  • Singleton sentinel for “value not provided”, distinct from None and "".
  • Falsey, printable as "Unset", non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, keep every other value (None/""/0 included).

- @rename("name")
  • Stable __name__/__qualname__ for generated accessors.

- mirror(name, source=Unset)
  • Read-only property exposing a private backing field as a frozen snapshot.

- truthy(text)
  • The one boolean coercion rule of the package: "1", "true", "yes" (any case).

- ordinal(number)
  • "first", "second", ... for position-first diagnostics.
"""
import functools
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final

TRUTHY = frozenset(("1", "true", "yes"))


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and "".
    - Printable: repr(Unset) -> "Unset".
    - Singleton per process: UnsetType() always yields the same instance.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in isinstance checks (e.g., str | Unset).
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Falsey values like None, 0 or "" are preserved; only Unset is replaced.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce("", "fallback")     -> ""
    """
    return object if object is not Unset else default


def rename(name, /):
    """
    Decorator giving a generated accessor a stable __name__/__qualname__, so
    mirrored properties and metaclass-built reprs read well in tracebacks.
    """
    if not isinstance(name, str):
        raise TypeError("@rename() argument must be a string")

    def decorate(function):
        if not callable(function):
            raise TypeError("@rename() must decorate a function")
        function.__name__ = function.__qualname__ = name
        return function

    return decorate


def _freeze(object):
    """
    Shallow read-only snapshot of a container.

    - Sequence (non-string) → tuple
    - Mapping → MappingProxyType
    - Set → frozenset
    - anything else → as-is (Unset becomes None)
    """
    if isinstance(object, Sequence) and not isinstance(object, (str, bytes, bytearray)):
        return tuple(object)
    elif isinstance(object, Mapping):
        return MappingProxyType(dict(object))
    elif isinstance(object, Set):
        return frozenset(object)
    return coalesce(object)


def mirror(name, /, source=Unset):
    """
    Define a read-only property that mirrors a private backing attribute.

    Without a source the property reads self._{name}; with a source it reads
    the attribute {name} of the object stored in self._{source}. Containers
    come back frozen so callers cannot mutate declarations behind the
    owner's back.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    if source is Unset:
        @rename(name)
        def getter(self):
            return _freeze(getattr(self, "_" + name))
    else:
        @rename(name)
        def getter(self):
            return _freeze(getattr(getattr(self, "_" + source), name))

    return property(getter)


def truthy(text, /):
    """
    Evaluate a string with the package-wide boolean rule.

    Case-insensitive equality against exactly "1", "true" and "yes"; every other
    value, including the empty string and surrounding whitespace, is false.
    """
    if not isinstance(text, str):
        raise TypeError("truthy() argument must be a string")
    return text.lower() in TRUTHY


@functools.cache
def ordinal(number, /):
    """
    Return a human-friendly ordinal label for a 1-based position.
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    # 11th, 12th, 13th (and 111th, 112th, ...)
    if 10 < number % 100 < 20:
        return f"{number}th"

    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


__all__ = (
    "UnsetType",
    "Unset",
    "coalesce",
    "rename",
    "mirror",
    "truthy",
    "ordinal",
)
