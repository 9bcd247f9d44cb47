"""
Helpers shared by the parser, the coercion registry, the resolver and the help renderer.

- Unset: "not provided" marker for options where None is a real value (debug, handlers).
- coalesce(value, default): Unset → default; every other value, falsy ones included, kept.
- rename(callable, name) / @rename(name): readable names on generated coercers.
- identity(value): coercer for the untyped names.
- split_once(text, separator, trim=False): first-separator split; a 1-tuple when absent.
- truncate(text, limit): description → one-line summary, cut on a word boundary.
- ordinal(number): "first", "second", …, "11th" for token positions in messages.

    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> split_once("a=b=c", "=")
    ('a', 'b=c')
    >>> split_once("a", "=")
    ('a',)
"""
import builtins
import functools
import re
from typing import final


@final
class UnsetType:
    """
    type of the Unset marker.

    one instance per process, falsy, repr "Unset", sealed against subclassing. it
    supports the | operator so annotations like `str | Unset` work in isinstance checks.
    """

    def __or__(self, other, /):
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

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    return object if object is not Unset else default


def rename(*parameters):
    """
    give a callable a fixed __name__/__qualname__.

    rename(callable, name) renames in place and returns the callable; rename(name)
    returns a decorator. builtins that refuse the assignment raise TypeError.
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def identity(object, /):
    return object


def split_once(text, separator, /, trim=False):
    """
    Split text on the first occurrence of separator.

    returns
    - (left, right) when the separator is present; right keeps any further separators.
    - (text,) when it is absent (a 1-tuple, so callers can tell “no value” from “empty value”).

    trim strips both halves (or the single part) of surrounding whitespace.
    """
    if not isinstance(separator, str) or not separator:
        raise ValueError("split_once() separator must be a non-empty string")
    left, found, right = text.partition(separator)
    if not found:
        return (text.strip(),) if trim else (text,)
    if trim:
        return left.strip(), right.strip()
    return left, right


def truncate(text, limit, /):
    """
    Shorten text to at most limit characters, cutting on a word boundary.

    The cut drops the trailing partial word (and any punctuation before it) and
    appends an ellipsis; text that already fits is returned unchanged.
    """
    if len(text) <= limit:
        return text
    truncated = re.sub(r"\W*\s+\S*$", "", text[:limit - 1]).strip()
    return truncated + "…"


@functools.cache
def ordinal(number, /):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first"…"tenth").
    - Other numbers use numeric ordinals with correct English suffixes.
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

    # 11th, 12th, 13th (and 111th, 112th, 113th, …)
    if 10 < number % 100 < 20:
        return f"{number}th"

    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


Unset = UnsetType()


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "identity",
    "split_once",
    "truncate",
    "ordinal",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
