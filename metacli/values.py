"""
Value coercion: turn argument text into typed values by declared type name.

What this module provides
- CoercionRegistry: a mapping from base type names to text → value coercers, seeded
  with built-ins and extensible by the caller, plus recursive decoding of array-like
  and record-like generic types (see metacli.typenames).
- boolean(text): the yes/no vocabulary shared by the registry and the DEBUG switch.

Built-in coercers
- string   → str
- number   → int for integral text, float otherwise
- bigint   → int
- boolean  → True for yes/1/on/true, False for no/0/off/false (any case)
- date     → datetime.datetime (ISO 8601)
- undefined, unknown, any → text unchanged

Collections
- array-like text is split on array_separator; each piece is coerced with the element
  type. Array → list, ReadonlyArray → tuple, Set → set, ReadonlySet → frozenset.
- record-like text is split on entry_separator, then each entry once on
  pair_separator: key → key type, value → value type; an entry without the pair
  separator maps its key to None (never coerced). Record/Map → dict,
  ReadonlyMap → read-only mapping. Duplicate keys: last write wins.

Quick example:
    >>> registry = CoercionRegistry()
    >>> registry.coerce("number[]", "1,2,3")
    [1, 2, 3]
    >>> registry.coerce("Record<string, number>", "a=1,b=2")
    {'a': 1, 'b': 2}
"""
import datetime
import math
from types import MappingProxyType

from .faults import *
from .typenames import parse, is_array_like, is_record_like
from .utils import identity, rename, split_once

FLAG_NO_VALUES = ("no", "0", "off", "false")
FLAG_YES_VALUES = ("yes", "1", "on", "true")

_HASHABLE = ("ReadonlyArray", "ReadonlySet")

_CONTAINERS = {
    "Array": list,
    "ReadonlyArray": tuple,
    "Set": set,
    "ReadonlySet": frozenset,
    "Record": dict,
    "Map": dict,
    "ReadonlyMap": lambda entries: MappingProxyType(dict(entries)),
}


def boolean(text, /):
    """
    read a yes/no word into a bool.

    accepts (case-insensitive) yes/1/on/true and no/0/off/false; anything else
    raises BooleanValueError (a ConfigurationError).
    """
    lower = text.strip().lower()
    if lower in FLAG_NO_VALUES:
        return False
    if lower in FLAG_YES_VALUES:
        return True
    raise BooleanValueError(
        "illegal boolean value %r" % text,
        title="illegal boolean value",
        code=FaultCode.INVALID_BOOLEAN,
        hint="expected one of %s" % ", ".join(FLAG_YES_VALUES + FLAG_NO_VALUES),
        docs=getdoc(FaultCode.INVALID_BOOLEAN),
        value=text,
    )


def number(text, /):
    """
    int for integral text, float otherwise.

    digit separators ('1_000') and non-finite values (nan, inf) are rejected.
    """
    if "_" in text:
        raise ValueError("digit separators are not allowed: %r" % text)
    try:
        return int(text)
    except ValueError:
        value = float(text)
    if not math.isfinite(value):
        raise ValueError("non-finite number: %r" % text)
    return value


def date(text, /):
    return datetime.datetime.fromisoformat(text.strip())


class CoercionRegistry:
    """
    type-name directed coercion of argument text.

    parameters
    - coercers: Mapping[str, Callable[[str], Any]] | None
      extra or overriding coercers keyed by base type name.
    - array_separator, entry_separator, pair_separator: str (keyword-only)
      separators used when decoding arrays and records.
    """

    def __init__(self, coercers=None, /, *, array_separator=",", entry_separator=",", pair_separator="="):
        for name, separator in (
                ("array_separator", array_separator),
                ("entry_separator", entry_separator),
                ("pair_separator", pair_separator),
        ):
            if not isinstance(separator, str) or not separator:
                raise ValueError(f"coercion registry {name!r} must be a non-empty string")
        self._coercers = {
            "string": str,
            "number": number,
            "bigint": int,
            "boolean": boolean,
            "date": date,
            "undefined": identity,
            "unknown": identity,
            "any": identity,
        } | dict(coercers or {})
        self.array_separator = array_separator
        self.entry_separator = entry_separator
        self.pair_separator = pair_separator

    def __contains__(self, name):
        return name in self._coercers

    def register(self, name, coercer, /):
        """
        add or replace the coercer for a base type name; returns the coercer so it
        can be used as a decorator factory target: registry.register("path", Path).
        """
        if not isinstance(name, str) or not name:
            raise TypeError("register() first argument must be a non-empty string")
        if not callable(coercer):
            raise TypeError("register() second argument must be callable")
        self._coercers[name] = coercer
        return coercer

    def supports(self, name, /):
        """
        whether coerce(name, ...) can resolve a coercer for the type name.

        malformed names and generics over unregistered types are unsupported.
        """
        if name in self._coercers:
            return True
        try:
            self._coercer(parse(name), trim=False, strict=False)
        except (GrammarError, CoercionError):
            return False
        return True

    def coerce(self, name, text, /, *, trim=False, strict=False):
        """
        coerce text according to the type name.

        resolution order
        1. a coercer registered under exactly 'name' is applied to text;
        2. otherwise the name is parsed; array-like and record-like generics are
           decoded element by element (recursively for nested generics);
        3. anything else raises MissingCoercerError.

        options
        - trim: strip whitespace around every split segment.
        - strict: require the pair separator in every record entry
          (MalformedEntryError otherwise).
        """
        if name in self._coercers:
            return self._apply(name, self._coercers[name], text)
        return self._coercer(parse(name), trim=trim, strict=strict)(text)

    def _apply(self, name, coercer, text):
        try:
            return coercer(text)
        except ValueError as exception:
            raise InvalidValueError(
                "cannot read %r as %s" % (text, name),
                title="invalid value",
                code=FaultCode.INVALID_VALUE,
                hint="pass a value of type %s" % name,
                docs=getdoc(FaultCode.INVALID_VALUE),
                type=name,
                value=text,
            ) from exception

    def _coercer(self, descriptor, *, trim, strict):
        name = str(descriptor)
        if name in self._coercers:
            return rename(lambda text: self._apply(name, self._coercers[name], text), name)

        if is_array_like(descriptor):
            element, = self._arity(descriptor, 1)
            if descriptor.name in ("Set", "ReadonlySet") and (
                    is_record_like(element) or (is_array_like(element) and element.name not in _HASHABLE)
            ):
                raise MissingCoercerError(
                    "set elements must be hashable, got %s" % element,
                    title="unsupported set element",
                    code=FaultCode.MISSING_COERCER,
                    hint="use a scalar, ReadonlyArray<T> or ReadonlySet<T> element type",
                    docs=getdoc(FaultCode.MISSING_COERCER),
                    type=name,
                )
            coercer = self._coercer(element, trim=trim, strict=strict)
            container = _CONTAINERS[descriptor.name]

            def array(text):
                pieces = text.split(self.array_separator)
                values = [coercer(piece.strip() if trim else piece) for piece in pieces]
                try:
                    return container(values)
                except TypeError as exception:
                    raise InvalidValueError(
                        "cannot collect %r into %s: %s" % (text, name, exception),
                        title="invalid value",
                        code=FaultCode.INVALID_VALUE,
                        hint="set elements must be hashable values",
                        docs=getdoc(FaultCode.INVALID_VALUE),
                        type=name,
                        value=text,
                    ) from exception

            return rename(array, name)

        if is_record_like(descriptor):
            key, value = self._arity(descriptor, 2)
            if str(key) not in ("string", "number"):
                raise MissingCoercerError(
                    "record keys must be string or number, got %s" % key,
                    title="unsupported record key",
                    code=FaultCode.MISSING_COERCER,
                    hint="declare the record as Record<string, V> or Record<number, V>",
                    docs=getdoc(FaultCode.MISSING_COERCER),
                    type=name,
                )
            keys = self._coercer(key, trim=trim, strict=strict)
            values = self._coercer(value, trim=trim, strict=strict)
            container = _CONTAINERS[descriptor.name]

            def record(text):
                entries = []
                for entry in text.split(self.entry_separator):
                    match split_once(entry, self.pair_separator, trim=trim):
                        case (left, right):
                            entries.append((keys(left), values(right)))
                        case (left,):
                            if strict:
                                raise MalformedEntryError(
                                    "expected exactly one %r in record entry %r" % (self.pair_separator, entry),
                                    title="malformed record entry",
                                    code=FaultCode.MALFORMED_ENTRY,
                                    hint="write entries as key%svalue" % self.pair_separator,
                                    docs=getdoc(FaultCode.MALFORMED_ENTRY),
                                    entry=entry,
                                )
                            entries.append((keys(left), None))
                return container(entries)

            return rename(record, name)

        raise MissingCoercerError(
            "no coercer for type %s" % name,
            title="no coercer for type",
            code=FaultCode.MISSING_COERCER,
            hint="register a coercer for %r or declare a supported type" % descriptor.name,
            docs=getdoc(FaultCode.MISSING_COERCER),
            type=name,
        )

    @staticmethod
    def _arity(descriptor, count):
        if len(descriptor.parameters) != count:
            raise MalformedEntryError(
                "%s expects %d type parameter%s, got %d" % (
                    descriptor.name, count, "s" * (count > 1), len(descriptor.parameters)
                ),
                title="malformed generic type",
                code=FaultCode.MALFORMED_ENTRY,
                hint="write %s<%s>" % (descriptor.name, "T" if count == 1 else "K, V"),
                docs=getdoc(FaultCode.MALFORMED_ENTRY),
                type=str(descriptor),
            )
        return descriptor.parameters


__all__ = (
    "CoercionRegistry",
    "FLAG_NO_VALUES",
    "FLAG_YES_VALUES",
    "boolean",
)
