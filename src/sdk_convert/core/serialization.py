"""Loading and saving project trees as MSBuild XML."""

import copy
from logging import getLogger
from pathlib import Path

from lxml import etree

from sdk_convert.core.project import (
    ConversionError,
    Import,
    Item,
    ItemGroup,
    ProjectRoot,
    Property,
    PropertyGroup,
    RawNode,
)

log = getLogger(__name__)

MSBUILD_NAMESPACE = "http://schemas.microsoft.com/developer/msbuild/2003"

_ITEM_ATTRIBUTES = frozenset({"include", "update", "remove", "exclude", "condition"})
_ROOT_ATTRIBUTES = frozenset({"sdk", "toolsversion", "defaulttargets"})


class ProjectLoadError(ConversionError):
    """Raised when a project file cannot be read or is not an MSBuild project."""


def _localname(element: etree._Element) -> str:
    return etree.QName(element).localname


def _attr(element: etree._Element, name: str) -> str | None:
    """Return an attribute by case-insensitive name."""
    for key, value in element.attrib.items():
        if etree.QName(key).localname.casefold() == name.casefold():
            return value
    return None


def _strip_namespaces(element: etree._Element) -> etree._Element:
    """Return a copy of `element` with every tag moved out of its namespace."""
    clone = copy.deepcopy(element)
    for node in clone.iter(etree.Element):
        node.tag = etree.QName(node).localname
    etree.cleanup_namespaces(clone)
    return clone


def _parse_property_group(element: etree._Element) -> PropertyGroup:
    group = PropertyGroup(_attr(element, "Condition"), _attr(element, "Label"))
    for child in element.iterchildren(etree.Element):
        group.append(
            Property(
                _localname(child),
                (child.text or "").strip(),
                _attr(child, "Condition"),
            )
        )
    return group


def _parse_item(element: etree._Element) -> Item:
    metadata: list[tuple[str, str]] = [
        (etree.QName(key).localname, value)
        for key, value in element.attrib.items()
        if etree.QName(key).localname.casefold() not in _ITEM_ATTRIBUTES
    ]
    metadata.extend(
        (_localname(child), (child.text or "").strip())
        for child in element.iterchildren(etree.Element)
    )
    return Item(
        _localname(element),
        _attr(element, "Include"),
        update=_attr(element, "Update"),
        remove=_attr(element, "Remove"),
        exclude=_attr(element, "Exclude"),
        condition=_attr(element, "Condition"),
        metadata=metadata,
    )


def _parse_item_group(element: etree._Element) -> ItemGroup:
    group = ItemGroup(_attr(element, "Condition"), _attr(element, "Label"))
    for child in element.iterchildren(etree.Element):
        group.append(_parse_item(child))
    return group


def parse_project(xml: bytes | str, full_path: str = "") -> ProjectRoot:
    """Build a project tree from MSBuild XML.

    Args:
        xml (bytes | str): Document contents.
        full_path (str): Path the document was read from.

    Returns:
        ProjectRoot: The parsed tree.

    Raises:
        ProjectLoadError: If the document is not well-formed or not a project.
    """
    if isinstance(xml, str):
        xml = xml.encode("utf-8")
    parser = etree.XMLParser(
        resolve_entities=False, no_network=True, remove_blank_text=True
    )
    try:
        element = etree.fromstring(xml, parser=parser)
    except etree.XMLSyntaxError as exc:
        raise ProjectLoadError(f"Invalid project XML '{full_path}': {exc}") from exc
    if _localname(element) != "Project":
        raise ProjectLoadError(
            f"Expected <Project> root in '{full_path}', got <{_localname(element)}>"
        )

    root = ProjectRoot(
        full_path,
        sdk=_attr(element, "Sdk"),
        tools_version=_attr(element, "ToolsVersion"),
        default_targets=_attr(element, "DefaultTargets"),
        attributes={
            etree.QName(key).localname: value
            for key, value in element.attrib.items()
            if etree.QName(key).localname.casefold() not in _ROOT_ATTRIBUTES
        },
    )
    for child in element.iterchildren():
        if not isinstance(child.tag, str):
            root.append_child(RawNode(copy.deepcopy(child)))
            continue
        name = _localname(child)
        if name == "PropertyGroup":
            root.append_child(_parse_property_group(child))
        elif name == "ItemGroup":
            root.append_child(_parse_item_group(child))
        elif name == "Import":
            root.append_child(
                Import(
                    _attr(child, "Project") or "",
                    _attr(child, "Condition"),
                    _attr(child, "Label"),
                )
            )
        else:
            root.append_child(RawNode(_strip_namespaces(child), name))
    return root


def load_project(path: Path | str) -> ProjectRoot:
    """Read a project file from disk.

    Args:
        path (Path | str): Location of the project file.

    Returns:
        ProjectRoot: The parsed tree.
    """
    path = Path(path)
    try:
        xml = path.read_bytes()
    except OSError as exc:
        raise ProjectLoadError(f"Failed to read project file '{path}': {exc}") from exc
    root = parse_project(xml, str(path))
    log.debug("Loaded %s with %d top-level node(s)", path, len(root.children))
    return root


def _set_optional(element: etree._Element, name: str, value: str | None) -> None:
    if value is not None:
        element.set(name, value)


def _build_property_group(group: PropertyGroup) -> etree._Element:
    element = etree.Element("PropertyGroup")
    _set_optional(element, "Condition", group.condition)
    _set_optional(element, "Label", group.label)
    for prop in group.properties:
        child = etree.SubElement(element, prop.name)
        _set_optional(child, "Condition", prop.condition)
        child.text = prop.value
    return element


def _build_item_group(group: ItemGroup) -> etree._Element:
    element = etree.Element("ItemGroup")
    _set_optional(element, "Condition", group.condition)
    _set_optional(element, "Label", group.label)
    for item in group.items:
        child = etree.SubElement(element, item.item_type)
        _set_optional(child, "Include", item.include)
        _set_optional(child, "Update", item.update)
        _set_optional(child, "Remove", item.remove)
        _set_optional(child, "Exclude", item.exclude)
        _set_optional(child, "Condition", item.condition)
        for key, value in item.metadata.items():
            etree.SubElement(child, key).text = value
    return element


def build_element(root: ProjectRoot) -> etree._Element:
    """Render a project tree into a namespace-free `<Project>` element.

    Args:
        root (ProjectRoot): Tree to render.

    Returns:
        etree._Element: The document element.
    """
    element = etree.Element("Project")
    _set_optional(element, "Sdk", root.sdk)
    _set_optional(element, "ToolsVersion", root.tools_version)
    _set_optional(element, "DefaultTargets", root.default_targets)
    for key, value in root.attributes.items():
        element.set(key, value)

    for node in root.children:
        if isinstance(node, PropertyGroup):
            element.append(_build_property_group(node))
        elif isinstance(node, ItemGroup):
            element.append(_build_item_group(node))
        elif isinstance(node, Import):
            child = etree.SubElement(element, "Import", Project=node.project)
            _set_optional(child, "Condition", node.condition)
            _set_optional(child, "Label", node.label)
        else:
            element.append(copy.deepcopy(node.element))
    return element


def serialize_project(root: ProjectRoot) -> str:
    """Render a project tree as indented XML text."""
    element = build_element(root)
    etree.indent(element, space="  ")
    return etree.tostring(element, encoding="unicode") + "\n"


def save_project(root: ProjectRoot, path: Path | str) -> None:
    """Write a project tree to `path` as UTF-8.

    Args:
        root (ProjectRoot): Tree to write.
        path (Path | str): Destination file.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(serialize_project(root), encoding="utf-8")
    log.debug("Wrote %s", path)
