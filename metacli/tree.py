"""
Command tree: metadata members paired with the live values they describe.

The tree is built once, when a Cli is bound, by walking the metadata and the live
program in lockstep. Every reachable member becomes one tagged node:

- GroupNode: an ObjectProperty whose data type is an object type (or the root
  interface); its children are keyed by member name and by alias.
- ScalarNode: a ScalarProperty, or an ObjectProperty holding a collection.
- MethodNode: a Method whose live counterpart is callable.

Live values are never stored on nodes; CommandTree.live(node) is the explicit
node → value table. A member whose live counterpart is missing (or None, or not
callable for a method) is left out of the tree, so a lookup through it reports the
usual unknown-command fault instead of crashing.

Live composites may be mappings (looked up by key) or plain objects (looked up
by attribute).
"""
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from .metadata import Interface, Method, ScalarProperty, ObjectProperty, is_group
from .utils import Unset


@dataclass(frozen=True, eq=False, slots=True)
class GroupNode:
    name: str
    member: object
    type: object
    path: tuple = ()
    children: Mapping = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True, eq=False, slots=True)
class ScalarNode:
    name: str
    member: object
    path: tuple = ()


@dataclass(frozen=True, eq=False, slots=True)
class MethodNode:
    name: str
    member: Method
    path: tuple = ()


def _lookup(live, name):
    if isinstance(live, Mapping):
        return live.get(name, Unset)
    return getattr(live, name, Unset)


class CommandTree:
    """
    tagged node tree plus the node → live value table.

    parameters
    - interface: metacli.metadata.Interface (the root of the metadata tree).
    - program: the live root (mapping or object) mirroring the interface members.
    """

    def __init__(self, interface, program, /):
        if not isinstance(interface, Interface):
            raise TypeError("command tree 'interface' must be an interface")
        self._live = {}
        self.root = self._group("", None, interface, program, ())

    def live(self, node, /):
        return self._live[node]

    def _group(self, name, member, type, live, path):
        children = {}
        for key, child in type.members.items():
            value = _lookup(live, key)
            if value is Unset or value is None:
                continue
            if (node := self._node(key, child, value, path + (key,))) is None:
                continue
            children[key] = node
        for node in list(children.values()):
            for alias in node.member.aliases:
                children.setdefault(alias, node)

        node = GroupNode(name, member, type, path, MappingProxyType(children))
        self._live[node] = live
        return node

    def _node(self, name, member, value, path):
        match member:
            case ObjectProperty() if is_group(member):
                return self._group(name, member, member.data_type.type, value, path)
            case ObjectProperty() | ScalarProperty():
                node = ScalarNode(name, member, path)
            case Method() if callable(value):
                node = MethodNode(name, member, path)
            case _:
                return None
        self._live[node] = value
        return node


__all__ = (
    "GroupNode",
    "ScalarNode",
    "MethodNode",
    "CommandTree",
)
