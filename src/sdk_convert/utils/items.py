"""Predicates classifying items that the SDK conventions make redundant."""

from sdk_convert.core import facts
from sdk_convert.core.evaluation import ProjectStyle
from sdk_convert.core.project import Item
from sdk_convert.utils.msbuild import framework_has_a_value_tuple, simple_assembly_name


def _include(item: Item) -> str:
    return (item.include or "").casefold()


def _include_key(item: Item) -> str:
    """Return the comparison key: simple assembly names for references."""
    if item.is_type(facts.REFERENCE_ITEM_TYPE):
        return simple_assembly_name(item.include)
    return _include(item)


def _path_segments(path: str) -> list[str]:
    return [part for part in path.replace("/", "\\").casefold().split("\\") if part]


def is_package_reference(item: Item) -> bool:
    return item.is_type(facts.PACKAGE_REFERENCE_ITEM_TYPE)


def can_item_metadata_be_removed(item: Item) -> bool:
    """Return True when every metadata entry is inferable from context.

    Args:
        item (Item): Item to inspect.

    Returns:
        bool: Whether all metadata can be stripped.
    """
    if not item.has_metadata:
        return False
    for key, value in item.metadata.items():
        allowed = facts.REDUNDANT_ITEM_METADATA.get(key.casefold())
        if allowed is None or value.strip().casefold() not in allowed:
            return False
    return True


def is_unnecessary_include(item: Item) -> bool:
    return _include_key(item) in facts.UNNECESSARY_ITEM_INCLUDES


def is_explicit_value_tuple_reference_that_can_be_removed(
    item: Item, tfm: str | None
) -> bool:
    """Return True for a `System.ValueTuple` reference the moniker makes redundant."""
    return (
        item.is_type(facts.REFERENCE_ITEM_TYPE)
        and _include_key(item) == facts.SYSTEM_VALUE_TUPLE_NAME.casefold()
        and framework_has_a_value_tuple(tfm)
    )


def package_equivalent(item: Item) -> tuple[str, str] | None:
    """Return the `(package, version)` replacing a framework reference.

    Args:
        item (Item): Item to inspect.

    Returns:
        tuple[str, str] | None: Package identifier and version, or `None`.
    """
    if not item.is_type(facts.REFERENCE_ITEM_TYPE):
        return None
    key = _include_key(item)
    for name, version in facts.DEFAULT_ITEMS_THAT_HAVE_PACKAGE_EQUIVALENTS.items():
        if name.casefold() == key:
            return name, version
    return None


def is_legacy_xaml_designer_item(item: Item) -> bool:
    """Return True for XAML pages carrying the legacy designer generator."""
    generator = item.get_metadata("Generator") or ""
    sub_type = item.get_metadata("SubType") or ""
    return (
        item.item_type.casefold() in facts.DESKTOP_GLOBBED_ITEM_TYPES
        and _include(item).endswith(facts.XAML_EXTENSION)
        and generator.casefold() == facts.XAML_DESIGNER_GENERATOR.casefold()
        and sub_type.casefold() in ("", "designer")
    )


def is_dependent_upon_xaml_designer_item(item: Item) -> bool:
    """Return True for code-behind files linked to a XAML page."""
    dependent_upon = item.get_metadata("DependentUpon") or ""
    return item.is_type(facts.COMPILE_ITEM_TYPE) and dependent_upon.casefold().endswith(
        facts.XAML_EXTENSION
    )


def is_designer_file(item: Item) -> bool:
    return item.is_type(facts.COMPILE_ITEM_TYPE) and _include(item).endswith(
        facts.DESIGNER_FILE_SUFFIXES
    )


def is_settings_file(item: Item) -> bool:
    return item.is_type(facts.NONE_ITEM_TYPE) and _include(item).endswith(
        facts.SETTINGS_EXTENSION
    )


def is_resx_file(item: Item) -> bool:
    return item.is_type(facts.EMBEDDED_RESOURCE_ITEM_TYPE) and _include(item).endswith(
        facts.RESX_EXTENSION
    )


def desktop_reference_needs_removal(item: Item) -> bool:
    return (
        item.is_type(facts.REFERENCE_ITEM_TYPE)
        and _include_key(item) in facts.DESKTOP_REFERENCES_THAT_NEED_REMOVAL
    )


def is_desktop_removable_globbed_item(style: ProjectStyle, item: Item) -> bool:
    """Return True for metadata-free XAML items the desktop SDK globs in."""
    return (
        style is ProjectStyle.WINDOWS_DESKTOP
        and item.item_type.casefold() in facts.DESKTOP_GLOBBED_ITEM_TYPES
        and _include(item).endswith(facts.XAML_EXTENSION)
        and not item.has_metadata
    )


def is_desktop_removable_item(style: ProjectStyle, item: Item) -> bool:
    """Return True for designer artifacts obsolete under the desktop SDK.

    Args:
        style (ProjectStyle): Project style of the conversion.
        item (Item): Item to inspect.

    Returns:
        bool: Whether the item can be dropped for desktop projects.
    """
    return style is ProjectStyle.WINDOWS_DESKTOP and (
        is_legacy_xaml_designer_item(item)
        or is_dependent_upon_xaml_designer_item(item)
        or is_designer_file(item)
        or is_settings_file(item)
        or is_resx_file(item)
        or desktop_reference_needs_removal(item)
        or is_desktop_removable_globbed_item(style, item)
    )


def is_item_with_unnecessary_metadata(item: Item) -> bool:
    """Return True for references whose metadata only pins restored packages.

    A reference qualifies when all of its metadata is bookkeeping
    (`HintPath`, `Private`, `SpecificVersion`, `RequiredTargetFramework`) and
    its `HintPath`, if any, points into a `packages` folder.

    Args:
        item (Item): Item to inspect.

    Returns:
        bool: Whether the whole item can be removed.
    """
    if not item.is_type(facts.REFERENCE_ITEM_TYPE) or not item.has_metadata:
        return False
    keys = {key.casefold() for key in item.metadata}
    if not keys <= facts.UNNECESSARY_REFERENCE_METADATA:
        return False
    hint_path = item.get_metadata("HintPath")
    if hint_path is None:
        return keys == {"requiredtargetframework"}
    return facts.PACKAGES_FOLDER_NAME in _path_segments(hint_path)
