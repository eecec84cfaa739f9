"""
spt utilities shared by the schema records, the parser and the fault layer.

- Unset: the "no value supplied" sentinel, distinct from None (a flag may
  legitimately resolve to None, a default rule may not have fired).
- coalesce(): Unset → fallback, everything else untouched.
- rename(): give generated callables readable names in tracebacks and reprs.
- mirror(): read-only property over a private field, freezing containers.
- ordinal(): "first", "second", ... "11th" for token positions in messages.

    >>> coalesce(Unset, "%f %s %t - %a")
    '%f %s %t - %a'
    >>> ordinal(2)
    'second'
"""
import builtins
import functools
from collections.abc import Mapping, Sequence, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Type of the Unset sentinel.

    One instance per process, falsy, and usable in PEP 604 unions so that
    `isinstance(value, str | Unset)` reads naturally.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __or__(self, other, /):
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("UnsetType cannot be subclassed")


def coalesce(object, default=None, /):
    """
    return `object`, or `default` when it is Unset.

    falsy values (None, 0, "") are kept: only the sentinel is replaced.
    """
    return default if object is Unset else object


def rename(*parameters):
    """
    rename(callable, name) renames in place and returns the callable;
    rename(name) returns a decorator doing the same.
    """
    match parameters:
        case (callable, str() as name):
            if not builtins.callable(callable):
                raise TypeError("rename() expects a callable")
            try:
                callable.__name__ = callable.__qualname__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() cannot rename %r" % callable) from None
            return callable
        case (str() as name,):
            def decorator(callable, /):
                return rename(callable, name)
            return decorator
        case _:
            raise TypeError("rename() expects (callable, name) or (name,)")


def _freeze(object):
    if isinstance(object, Mapping):
        return MappingProxyType(object)
    if isinstance(object, Set):
        return frozenset(object)
    if isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(object)
    return object


def mirror(name, /):
    """
    property reading `self._<name>`, exposing containers as frozen views.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() expects an attribute name")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


_WORDS = ("first", "second", "third", "fourth", "fifth", "sixth", "seventh", "eighth", "ninth", "tenth")


@functools.cache
def ordinal(number, /):
    """
    ordinal label of a 1-based token position.
    """
    if 1 <= number <= len(_WORDS):
        return _WORDS[number - 1]
    if 10 < number % 100 < 20:
        return f"{number}th"
    return "%d%s" % (number, {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th"))


Unset = UnsetType()


__all__ = (
    "coalesce",
    "rename",
    "mirror",
    "ordinal",
    "UnsetType",
    "Unset",
)
