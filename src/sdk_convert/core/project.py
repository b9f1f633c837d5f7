"""In-memory model of an MSBuild project descriptor."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, TypeAlias


class ConversionError(Exception):
    """Base exception for conversion failures."""


class InconsistentStateError(ConversionError):
    """Raised when the tree violates an invariant upstream should guarantee."""


class Property:
    """A single `<Name>value</Name>` entry inside a property group."""

    def __init__(self, name: str, value: str = "", condition: str | None = None):
        self.name = name
        self.value = value
        self.condition = condition
        self.parent: PropertyGroup | None = None

    def matches(self, other: Property) -> bool:
        """Return True when both properties share name and value.

        Args:
            other (Property): Property to compare against.

        Returns:
            bool: Whether the two properties are structurally equal.
        """
        return self.name.casefold() == other.name.casefold() and self.value == other.value

    def __repr__(self) -> str:
        return f"Property({self.name!r}, {self.value!r})"


class Item:
    """An item declaration such as `<Compile Include="Program.cs" />`.

    An item either declares a fresh path (`include`) or refines an item that
    the SDK already globbed in (`update`), never both.
    """

    def __init__(
        self,
        item_type: str,
        include: str | None = None,
        *,
        update: str | None = None,
        remove: str | None = None,
        exclude: str | None = None,
        condition: str | None = None,
        metadata: Mapping[str, str] | Iterable[tuple[str, str]] | None = None,
    ) -> None:
        if include is not None and update is not None:
            raise InconsistentStateError(
                f"{item_type} item declares both Include={include!r} "
                f"and Update={update!r}"
            )
        self.item_type = item_type
        self._include = include
        self._update = update
        self.remove = remove
        self.exclude = exclude
        self.condition = condition
        self.metadata: dict[str, str] = {}
        self.parent: ItemGroup | None = None
        pairs = metadata.items() if isinstance(metadata, Mapping) else metadata or ()
        for key, value in pairs:
            self.set_metadata(key, value)

    @property
    def include(self) -> str | None:
        return self._include

    @include.setter
    def include(self, value: str | None) -> None:
        if value is not None and self._update is not None:
            raise InconsistentStateError(
                f"Cannot set Include on {self.item_type} item with Update={self._update!r}"
            )
        self._include = value

    @property
    def update(self) -> str | None:
        return self._update

    @update.setter
    def update(self, value: str | None) -> None:
        if value is not None and self._include is not None:
            raise InconsistentStateError(
                f"Cannot set Update on {self.item_type} item with Include={self._include!r}"
            )
        self._update = value

    @property
    def has_metadata(self) -> bool:
        return bool(self.metadata)

    def get_metadata(self, key: str) -> str | None:
        """Return a metadata value by case-insensitive key.

        Args:
            key (str): Metadata name.

        Returns:
            str | None: The stored value or `None` when absent.
        """
        for name, value in self.metadata.items():
            if name.casefold() == key.casefold():
                return value
        return None

    def set_metadata(self, key: str, value: str) -> None:
        """Set a metadata value, replacing any entry with the same key.

        Args:
            key (str): Metadata name.
            value (str): Metadata value.
        """
        for name in list(self.metadata):
            if name.casefold() == key.casefold():
                del self.metadata[name]
        self.metadata[key] = value

    def clear_metadata(self) -> None:
        """Drop every metadata entry."""
        self.metadata.clear()

    def convert_to_update(self) -> None:
        """Turn an include declaration into an update of the implicit item."""
        path = self._include
        if path is None:
            raise InconsistentStateError(
                f"{self.item_type} item has no Include path to convert"
            )
        self._include = None
        self._update = path

    def is_type(self, item_type: str) -> bool:
        return self.item_type.casefold() == item_type.casefold()

    def __repr__(self) -> str:
        path = f"Include={self._include!r}" if self._update is None else f"Update={self._update!r}"
        return f"Item({self.item_type!r}, {path})"


class _Group:
    """Shared behaviour of property and item groups."""

    def __init__(self, condition: str | None = None, label: str | None = None):
        self.condition = condition
        self.label = label
        self.parent: ProjectRoot | None = None

    @property
    def is_unconditioned(self) -> bool:
        return not (self.condition or "").strip()


class PropertyGroup(_Group):
    """A `<PropertyGroup>` and its ordered properties."""

    def __init__(self, condition: str | None = None, label: str | None = None):
        super().__init__(condition, label)
        self._properties: list[Property] = []

    @property
    def properties(self) -> list[Property]:
        """Return a snapshot of the group's properties.

        Returns:
            list[Property]: Properties in document order.
        """
        return list(self._properties)

    def __len__(self) -> int:
        return len(self._properties)

    def _adopt(self, prop: Property) -> None:
        if prop.parent is not None:
            raise InconsistentStateError(
                f"Property {prop.name!r} already belongs to another group"
            )
        prop.parent = self

    def append(self, prop: Property) -> Property:
        self._adopt(prop)
        self._properties.append(prop)
        return prop

    def prepend(self, prop: Property) -> Property:
        self._adopt(prop)
        self._properties.insert(0, prop)
        return prop

    def remove(self, prop: Property) -> None:
        """Detach `prop` from this group.

        Args:
            prop (Property): A property owned by this group.
        """
        self._properties.remove(prop)
        prop.parent = None

    def find(self, name: str) -> Property | None:
        """Return the first property called `name`, if any."""
        for prop in self._properties:
            if prop.name.casefold() == name.casefold():
                return prop
        return None


class ItemGroup(_Group):
    """An `<ItemGroup>` and its ordered items."""

    def __init__(self, condition: str | None = None, label: str | None = None):
        super().__init__(condition, label)
        self._items: list[Item] = []

    @property
    def items(self) -> list[Item]:
        """Return a snapshot of the group's items.

        Returns:
            list[Item]: Items in document order.
        """
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def append(self, item: Item) -> Item:
        if item.parent is not None:
            raise InconsistentStateError(f"{item!r} already belongs to another group")
        item.parent = self
        self._items.append(item)
        return item

    def add_item(
        self,
        item_type: str,
        include: str,
        metadata: Mapping[str, str] | Iterable[tuple[str, str]] | None = None,
    ) -> Item:
        """Create and append a new include item.

        Args:
            item_type (str): Item type tag, e.g. `PackageReference`.
            include (str): Include path.
            metadata (Mapping[str, str] | Iterable[tuple[str, str]] | None):
                Metadata to attach.

        Returns:
            Item: The appended item.
        """
        return self.append(Item(item_type, include, metadata=metadata))

    def remove(self, item: Item) -> None:
        self._items.remove(item)
        item.parent = None


class Import:
    """An `<Import Project="..." />` declaration."""

    def __init__(
        self,
        project: str,
        condition: str | None = None,
        label: str | None = None,
    ) -> None:
        self.project = project
        self.condition = condition
        self.label = label
        self.parent: ProjectRoot | None = None

    def __repr__(self) -> str:
        return f"Import({self.project!r})"


class RawNode:
    """An element the conversion never inspects (targets, comments, `Choose`)."""

    def __init__(self, element: Any, tag: str | None = None) -> None:
        self.element = element
        self.tag = tag
        self.parent: ProjectRoot | None = None


Node: TypeAlias = PropertyGroup | ItemGroup | Import | RawNode


class ProjectRoot:
    """The `<Project>` element: root attributes plus ordered child nodes."""

    def __init__(
        self,
        full_path: str = "",
        *,
        sdk: str | None = None,
        tools_version: str | None = None,
        default_targets: str | None = None,
        attributes: Mapping[str, str] | None = None,
    ) -> None:
        self.full_path = full_path
        self.sdk = sdk
        self.tools_version = tools_version
        self.default_targets = default_targets
        self.attributes: dict[str, str] = dict(attributes or {})
        self._children: list[Node] = []

    @property
    def children(self) -> list[Node]:
        return list(self._children)

    @property
    def property_groups(self) -> list[PropertyGroup]:
        return [c for c in self._children if isinstance(c, PropertyGroup)]

    @property
    def item_groups(self) -> list[ItemGroup]:
        return [c for c in self._children if isinstance(c, ItemGroup)]

    @property
    def imports(self) -> list[Import]:
        return [c for c in self._children if isinstance(c, Import)]

    @property
    def raw_nodes(self) -> list[RawNode]:
        return [c for c in self._children if isinstance(c, RawNode)]

    @property
    def directory_path(self) -> Path:
        """Directory holding the project file; both separator styles are accepted."""
        return Path(self.full_path.replace("\\", "/")).parent

    @property
    def project_name(self) -> str:
        """Base name of the project file without its extension."""
        return Path(self.full_path.replace("\\", "/")).stem

    def append_child(self, node: Node) -> Node:
        node.parent = self
        self._children.append(node)
        return node

    def insert_child(self, index: int, node: Node) -> Node:
        node.parent = self
        self._children.insert(index, node)
        return node

    def remove_child(self, node: Node) -> None:
        """Detach `node` from the project.

        Args:
            node (Node): A direct child of the project.
        """
        self._children.remove(node)
        node.parent = None

    def _index_after_last(self, kind: type) -> int | None:
        indices = [i for i, c in enumerate(self._children) if isinstance(c, kind)]
        return indices[-1] + 1 if indices else None

    def add_property_group(self, *, first: bool = False) -> PropertyGroup:
        """Create an unconditioned property group.

        Args:
            first (bool): Insert at the very top of the project instead of
                after the last existing property group.

        Returns:
            PropertyGroup: The new, empty group.
        """
        group = PropertyGroup()
        index = 0 if first else self._index_after_last(PropertyGroup)
        return self.insert_child(index or 0, group)

    def add_item_group(self) -> ItemGroup:
        """Create an unconditioned item group after the existing groups.

        Returns:
            ItemGroup: The new, empty group.
        """
        group = ItemGroup()
        index = self._index_after_last(ItemGroup)
        if index is None:
            index = self._index_after_last(PropertyGroup)
        if index is None:
            return self.append_child(group)
        return self.insert_child(index, group)

    def iter_items(self) -> Iterable[Item]:
        for group in self.item_groups:
            yield from group.items
