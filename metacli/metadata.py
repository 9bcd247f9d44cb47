"""
Metadata model: the declarative description of a program's callable surface.

Shapes
- Types
  • scalar types are plain strings: "bigint", "boolean", "number", "string".
  • ObjectType(members, name, description): a composite with named members.
  • ArrayType(value): homogeneous collection of value.
  • RecordType(key, value): key is "string" or "number".
  • TypeRef(type, nullable): a reference to any of the above.
  • "unknown" / "void" stand for untyped parameters and return values.
- Members (tagged variants, all sharing name/description/summary/aliases/...)
  • ObjectProperty: a nested group (or a collection-valued leaf).
  • ScalarProperty: a value-returning leaf.
  • Method: a callable leaf with ordered parameters and a return type.
- Parameter(name, data_type, description, summary)
- Interface(members, package, description): the root, with its PackageInfo.

Loading
- load(mapping), loads(text) and load_file(path) read the JSON document produced by
  the external analyzer (camelCase keys). Only the fields needed to drive dispatch are
  checked; a missing or ill-typed field raises MalformedMetadataError naming its path.

Helpers
- summarize(item, limit=60), human_readable_type(ref), is_nullable(ref),
  type_name(ref), is_group(member).
"""
import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType

from .faults import MalformedMetadataError, FaultCode, getdoc
from .utils import truncate

SCALAR_TYPES = ("bigint", "boolean", "number", "string")
UNKNOWN = "unknown"
VOID = "void"


@dataclass(frozen=True, slots=True)
class TypeRef:
    type: object
    nullable: bool = False


@dataclass(frozen=True, slots=True)
class ArrayType:
    value: TypeRef


@dataclass(frozen=True, slots=True)
class RecordType:
    key: str
    value: TypeRef


@dataclass(frozen=True, slots=True)
class ObjectType:
    members: Mapping = field(default_factory=lambda: MappingProxyType({}))
    name: str | None = None
    description: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class Member:
    name: str
    description: str | None = None
    summary: str | None = None
    see_also: str | None = None
    aliases: tuple = ()
    default: str | None = None
    example: str | None = None
    ignore: bool = False
    access: str | None = None

    @property
    def hidden(self):
        return self.ignore or self.access not in (None, "public")


@dataclass(frozen=True, slots=True, kw_only=True)
class ObjectProperty(Member):
    data_type: TypeRef


@dataclass(frozen=True, slots=True, kw_only=True)
class ScalarProperty(Member):
    data_type: TypeRef


@dataclass(frozen=True, slots=True, kw_only=True)
class Parameter:
    name: str
    data_type: object = UNKNOWN
    description: str | None = None
    summary: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class Method(Member):
    parameters: tuple = ()
    return_type: object = UNKNOWN


@dataclass(frozen=True, slots=True)
class PackageInfo:
    name: str | None = None
    version: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class Interface:
    members: Mapping = field(default_factory=lambda: MappingProxyType({}))
    package: PackageInfo = field(default_factory=PackageInfo)
    description: str | None = None


# --- loading ---

def _malformed(path, expected):
    return MalformedMetadataError(
        "malformed metadata at %s, expected %s" % (path, expected),
        title="malformed metadata",
        code=FaultCode.MALFORMED_METADATA,
        hint="regenerate the metadata document for the current program interface",
        docs=getdoc(FaultCode.MALFORMED_METADATA),
        path=path,
    )


def _field(object, key, path, kind, *, required=True):
    if key not in object:
        if required:
            raise _malformed(f"{path}.{key}", kind.__name__)
        return None
    value = object[key]
    if value is None and not required:
        return None
    if not isinstance(value, kind):
        raise _malformed(f"{path}.{key}", kind.__name__)
    return value


def _type(object, path):
    if isinstance(object, str):
        return object
    if not isinstance(object, Mapping):
        raise _malformed(path, "a type name or a type object")
    kind = object.get("kind")
    if kind == "objectType" or (kind is None and "members" in object):
        return ObjectType(
            _members(_field(object, "members", path, Mapping), f"{path}.members"),
            _field(object, "name", path, str, required=False),
            _field(object, "description", path, str, required=False),
        )
    if kind == "recordType" or (kind is None and "keyDataType" in object):
        key = _field(object, "keyDataType", path, str)
        if key not in ("string", "number"):
            raise _malformed(f"{path}.keyDataType", "'string' or 'number'")
        return RecordType(key, _type_ref(object.get("valueDataType"), f"{path}.valueDataType"))
    if kind == "arrayType" or (kind is None and "valueDataType" in object):
        return ArrayType(_type_ref(object.get("valueDataType"), f"{path}.valueDataType"))
    raise _malformed(f"{path}.kind", "'objectType', 'arrayType' or 'recordType'")


def _type_ref(object, path, *, untyped=()):
    if isinstance(object, str) and object in untyped:
        return object
    if not isinstance(object, Mapping) or "type" not in object:
        raise _malformed(path, "a type reference")
    return TypeRef(_type(object["type"], f"{path}.type"), bool(object.get("nullable", False)))


def _tags(object, path):
    aliases = object.get("aliases") or ()
    if isinstance(aliases, str) or not isinstance(aliases, Sequence):
        raise _malformed(f"{path}.aliases", "a list of names")
    return {
        "description": _field(object, "description", path, str, required=False),
        "summary": _field(object, "summary", path, str, required=False),
        "see_also": _field(object, "seeAlso", path, str, required=False),
        "aliases": tuple(map(str, aliases)),
        "default": _field(object, "default", path, str, required=False),
        "example": _field(object, "example", path, str, required=False),
        "ignore": bool(object.get("ignore", False)),
        "access": _field(object, "access", path, str, required=False),
    }


def _parameter(object, path):
    if not isinstance(object, Mapping):
        raise _malformed(path, "a parameter object")
    return Parameter(
        name=_field(object, "name", path, str),
        data_type=_type_ref(object.get("dataType", UNKNOWN), f"{path}.dataType", untyped=(UNKNOWN,)),
        description=_field(object, "description", path, str, required=False),
        summary=_field(object, "summary", path, str, required=False),
    )


def _member(name, object, path):
    if not isinstance(object, Mapping):
        raise _malformed(path, "a member object")
    name = object.get("name", name)
    if not isinstance(name, str) or not name:
        raise _malformed(f"{path}.name", "a non-empty string")
    match object.get("kind"):
        case "objectProperty":
            return ObjectProperty(
                name=name,
                data_type=_type_ref(object.get("dataType"), f"{path}.dataType"),
                **_tags(object, path),
            )
        case "scalarProperty":
            return ScalarProperty(
                name=name,
                data_type=_type_ref(object.get("dataType"), f"{path}.dataType"),
                **_tags(object, path),
            )
        case "method":
            parameters = _field(object, "parameters", path, Sequence, required=False) or ()
            return Method(
                name=name,
                parameters=tuple(
                    _parameter(parameter, f"{path}.parameters[{index}]")
                    for index, parameter in enumerate(parameters)
                ),
                return_type=_type_ref(
                    object.get("returnDataType", UNKNOWN), f"{path}.returnDataType", untyped=(UNKNOWN, VOID)
                ),
                **_tags(object, path),
            )
        case _:
            raise _malformed(f"{path}.kind", "'objectProperty', 'scalarProperty' or 'method'")


def _members(object, path):
    return MappingProxyType({
        key: _member(key, value, f"{path}.{key}") for key, value in object.items()
    })


def load(object, /):
    """
    build an Interface from the deserialized metadata document.

    required: a 'members' mapping. optional: 'description' and a 'package' mapping
    (only its 'name' and 'version' are kept).
    """
    if isinstance(object, Interface):
        return object
    if not isinstance(object, Mapping):
        raise _malformed("$", "a metadata object")
    package = object.get("package") or {}
    if not isinstance(package, Mapping):
        raise _malformed("$.package", "a package object")
    return Interface(
        members=_members(_field(object, "members", "$", Mapping), "$.members"),
        package=PackageInfo(
            _field(package, "name", "$.package", str, required=False),
            _field(package, "version", "$.package", str, required=False),
        ),
        description=_field(object, "description", "$", str, required=False),
    )


def loads(text, /):
    return load(json.loads(text))


def load_file(path, /):
    with open(path, encoding="utf-8") as file:
        return load(json.load(file))


# --- helpers ---

def summarize(item, /, limit=60):
    """
    one-line summary of a member, parameter or type: the explicit summary when
    present, else the description, truncated to 'limit' characters; None otherwise.
    """
    if summary := getattr(item, "summary", None):
        return truncate(summary, limit)
    if description := getattr(item, "description", None):
        return truncate(description, limit)
    return None


def human_readable_type(type, /):
    match type:
        case str():
            return type
        case TypeRef():
            return human_readable_type(type.type)
        case RecordType():
            return "Map<%s, %s>" % (type.key, human_readable_type(type.value))
        case ArrayType():
            return human_readable_type(type.value) + "[]"
        case ObjectType():
            return type.name or UNKNOWN
        case _:
            raise TypeError("human_readable_type() argument must be a metadata type")


def type_name(type, /):
    """
    type-name expression for a metadata type, in the grammar of metacli.typenames.

    collections always use the generic spelling so nested types stay parseable:
    Array<Array<number>>, Record<string, Array<boolean>>.
    """
    match type:
        case str():
            return type
        case TypeRef():
            return type_name(type.type)
        case RecordType():
            return "Record<%s, %s>" % (type.key, type_name(type.value))
        case ArrayType():
            return "Array<%s>" % type_name(type.value)
        case ObjectType():
            return type.name or UNKNOWN
        case _:
            raise TypeError("type_name() argument must be a metadata type")


def is_nullable(type, /):
    return isinstance(type, TypeRef) and type.nullable


def is_group(member, /):
    return isinstance(member, ObjectProperty) and isinstance(member.data_type.type, ObjectType)


__all__ = (
    "SCALAR_TYPES",
    "UNKNOWN",
    "VOID",
    "TypeRef",
    "ArrayType",
    "RecordType",
    "ObjectType",
    "Member",
    "ObjectProperty",
    "ScalarProperty",
    "Method",
    "Parameter",
    "PackageInfo",
    "Interface",
    "load",
    "loads",
    "load_file",
    "summarize",
    "human_readable_type",
    "type_name",
    "is_nullable",
    "is_group",
)
