r"""
Generic type-name expressions: grammar, descriptor and recursive-descent parser.

Grammar (identifiers are case-sensitive)

    TypeExpr   := Identifier ('[' ']')?
                | Identifier ('<' TypeExpr (',' TypeExpr)* '>')?
    Identifier := [A-Za-z_$][A-Za-z0-9_$]*

- whitespace may separate any two tokens; inside a name it ends the name.
- the array shorthand T[] desugars to Array<T>.
- anything outside identifier/space/'<'/','/'>' (and the '[]' suffix) is a grammar
  error reported with its position.

Classification
- array-like bases take exactly one parameter (the element type):
  Array, ReadonlyArray, Set, ReadonlySet.
- record-like bases take exactly two parameters (key, then value):
  Record, Map, ReadonlyMap.

Quick example:
    >>> parse("Record<string, number[]>")
    TypeDescriptor(name='Record', parameters=(TypeDescriptor(name='string', parameters=()), TypeDescriptor(name='Array', parameters=(TypeDescriptor(name='number', parameters=()),))))
    >>> str(parse("string[]"))
    'Array<string>'
"""
from dataclasses import dataclass

from .faults import ParseError, FaultCode, getdoc
from .utils import ordinal

ARRAY_BASE_NAMES = ("Array", "ReadonlyArray", "Set", "ReadonlySet")
RECORD_BASE_NAMES = ("Record", "Map", "ReadonlyMap")


@dataclass(frozen=True, slots=True)
class TypeDescriptor:
    """
    structured form of a type-name expression.

    parameters is empty for non-generic names and keeps the left-to-right order of
    the type arguments otherwise. str() renders the canonical generic spelling,
    which parses back to an equal descriptor.
    """
    name: str
    parameters: tuple = ()

    def __str__(self):
        if not self.parameters:
            return self.name
        return "%s<%s>" % (self.name, ", ".join(map(str, self.parameters)))


def is_array_like(descriptor, /):
    return descriptor.name in ARRAY_BASE_NAMES


def is_record_like(descriptor, /):
    return descriptor.name in RECORD_BASE_NAMES


def _is_identifier(char, position):
    if "a" <= char <= "z" or "A" <= char <= "Z" or char in "_$":
        return True
    return position > 0 and "0" <= char <= "9"


class _Cursor:
    """
    character cursor over the type-name text.

    one production per method; each method leaves the cursor on the first
    character it did not consume.
    """

    def __init__(self, text):
        self.text = text
        self.position = 0

    def peek(self):
        try:
            return self.text[self.position]
        except IndexError:
            return None

    def skip(self):
        while self.peek() is not None and self.peek().isspace():
            self.position += 1

    def fail(self, expected):
        char = self.peek()
        if char is None:
            message = "unexpected end of type name %r, expected %s" % (self.text, expected)
        else:
            message = "unexpected character %r at %s position of type name %r, expected %s" % (
                char, ordinal(self.position + 1), self.text, expected
            )
        raise ParseError(
            message,
            title="malformed type name",
            code=FaultCode.MALFORMED_TYPE_NAME,
            hint="use forms like 'number', 'string[]', 'Array<T>' or 'Record<K, V>'",
            docs=getdoc(FaultCode.MALFORMED_TYPE_NAME),
            text=self.text,
            position=self.position,
            character=char,
        )

    def identifier(self):
        start = self.position
        while (char := self.peek()) is not None and _is_identifier(char, self.position - start):
            self.position += 1
        if self.position == start:
            self.fail("a type name")
        return self.text[start:self.position]

    def expression(self):
        self.skip()
        name = self.identifier()
        self.skip()
        match self.peek():
            case "[":
                self.position += 1
                self.skip()
                if self.peek() != "]":
                    self.fail("']'")
                self.position += 1
                return TypeDescriptor("Array", (TypeDescriptor(name),))
            case "<":
                self.position += 1
                parameters = [self.expression()]
                while True:
                    self.skip()
                    match self.peek():
                        case ",":
                            self.position += 1
                            parameters.append(self.expression())
                        case ">":
                            self.position += 1
                            return TypeDescriptor(name, tuple(parameters))
                        case _:
                            self.fail("',' or '>'")
            case _:
                return TypeDescriptor(name)


def parse(text, /):
    """
    parse a type-name expression into a TypeDescriptor.

    errors
    - TypeError when text is not a string.
    - ParseError (a GrammarError) on any unexpected character, an empty name, an
      unclosed generic or trailing input; the error carries 'position' (0-based)
      and 'character' options.
    """
    if not isinstance(text, str):
        raise TypeError("parse() argument must be a string")
    cursor = _Cursor(text)
    descriptor = cursor.expression()
    cursor.skip()
    if cursor.peek() is not None:
        cursor.fail("end of type name")
    return descriptor


__all__ = (
    "TypeDescriptor",
    "ARRAY_BASE_NAMES",
    "RECORD_BASE_NAMES",
    "is_array_like",
    "is_record_like",
    "parse",
)
