"""Shared helpers for reading MSBuild conventions off a project tree."""

import re

from sdk_convert.core import facts
from sdk_convert.core.project import (
    InconsistentStateError,
    Item,
    ItemGroup,
    ProjectRoot,
    Property,
    PropertyGroup,
)

# '$(Configuration)|$(Platform)' == 'Debug|AnyCPU'
_DIMENSION_CONDITION = re.compile(
    r"^\s*'(?P<dims>[^']*)'\s*==\s*'(?P<values>[^']*)'\s*$",
)
_DIMENSION_REF = re.compile(r"^\$\((?P<name>[A-Za-z_][\w.-]*)\)$")
_DIMENSION_MENTION = re.compile(
    r"\$\(\s*(?:configuration|platform)\b", re.IGNORECASE
)
_AND_OUTSIDE_QUOTES = re.compile(
    r"\s+and\s+(?=(?:[^']*'[^']*')*[^']*$)", re.IGNORECASE
)
_DOTTED_FRAMEWORK_TFM = re.compile(r"^net(?P<major>\d)(?:\.\d+)+$", re.IGNORECASE)
_FRAMEWORK_TFM = re.compile(r"^net(?P<version>\d+)$", re.IGNORECASE)
_MODERN_TFM = re.compile(r"^net(?P<major>\d+)\.\d+(?:-.+)?$", re.IGNORECASE)
_VERSIONED_TFM = re.compile(
    r"^(?P<prelude>netcoreapp|netstandard)(?P<major>\d+)(?:\.(?P<minor>\d+))?$",
    re.IGNORECASE,
)
_FRAMEWORK_VERSION = re.compile(r"^v?(?P<version>\d+(?:\.\d+)*)$", re.IGNORECASE)


def _parse_equality(term: str) -> dict[str, str] | None:
    """Parse one `'$(A)|$(B)' == 'x|y'` test, or return `None`."""
    term = term.strip()
    if term.startswith("(") and term.endswith(")"):
        term = term[1:-1]
    match = _DIMENSION_CONDITION.match(term)
    if match is None:
        return None

    names = [part.strip() for part in match.group("dims").split("|")]
    values = [part.strip() for part in match.group("values").split("|")]
    if len(names) != len(values):
        return None

    dimensions: dict[str, str] = {}
    for name, value in zip(names, values, strict=True):
        ref = _DIMENSION_REF.match(name)
        if ref is None or ref.group("name").casefold() not in facts.DIMENSION_NAMES:
            return None
        dimensions[ref.group("name").casefold()] = value
    return dimensions


def get_condition_dimensions(condition: str | None) -> dict[str, str]:
    """Extract configuration dimension values from a group condition.

    Equality tests over `$(Configuration)`/`$(Platform)`, alone or joined
    with `And`, are understood. Conditions that never mention a dimension
    (`Exists(...)`, `$(OS)` tests) yield no dimensions.

    Args:
        condition (str | None): Raw MSBuild condition.

    Returns:
        dict[str, str]: Dimension name (casefolded) to value, configuration
            first, then platform.

    Raises:
        InconsistentStateError: If the condition mentions a dimension in a
            form that cannot be mapped to a single configuration.
    """
    if not condition or not condition.strip():
        return {}
    if _DIMENSION_MENTION.search(condition) is None:
        return {}

    dimensions: dict[str, str] = {}
    for term in _AND_OUTSIDE_QUOTES.split(condition):
        parsed = _parse_equality(term)
        if parsed is None:
            raise InconsistentStateError(
                f"Unsupported configuration condition {condition!r}"
            )
        for name, value in parsed.items():
            if dimensions.get(name, value).casefold() != value.casefold():
                raise InconsistentStateError(
                    f"Condition {condition!r} tests {name} against two values"
                )
            dimensions[name] = value
    return {name: dimensions[name] for name in facts.DIMENSION_NAMES if name in dimensions}


def get_configuration_name(condition: str | None) -> str:
    """Map a group condition to its configuration identifier.

    Args:
        condition (str | None): Raw MSBuild condition.

    Returns:
        str: `|`-joined dimension values, or `""` when the condition does
            not depend on the configuration.
    """
    return "|".join(get_condition_dimensions(condition).values())


def _has_flag(root: ProjectRoot, name: str) -> bool:
    for group in root.property_groups:
        prop = group.find(name)
        if prop is not None and prop.value.strip().casefold() == "true":
            return True
    return False


def is_winforms(root: ProjectRoot) -> bool:
    """Return True when the project references or enables Windows Forms."""
    if _has_flag(root, facts.USE_WINFORMS_NAME):
        return True
    return any(
        item.is_type(facts.REFERENCE_ITEM_TYPE)
        and simple_assembly_name(item.include) in facts.WINFORMS_REFERENCES
        for item in root.iter_items()
    )


def is_wpf(root: ProjectRoot) -> bool:
    """Return True when the project references, enables or is typed as WPF."""
    if _has_flag(root, facts.USE_WPF_NAME):
        return True
    for item in root.iter_items():
        if (
            item.is_type(facts.REFERENCE_ITEM_TYPE)
            and simple_assembly_name(item.include) in facts.WPF_REFERENCES
        ):
            return True
    for group in root.property_groups:
        guids = group.find(facts.PROJECT_TYPE_GUIDS_NAME)
        if guids is not None and facts.WPF_PROJECT_TYPE_GUID in guids.value.casefold():
            return True
    return False


def simple_assembly_name(include: str | None) -> str:
    """Reduce a strong-named reference include to its casefolded simple name.

    Args:
        include (str | None): e.g. `System.Management, Version=4.0.0.0`.

    Returns:
        str: e.g. `system.management`.
    """
    if not include:
        return ""
    return include.split(",", 1)[0].strip().casefold()


def is_not_net_framework(tfm: str) -> bool:
    """Return True for monikers outside the .NET Core / .NET Standard families."""
    lowered = tfm.casefold()
    return (
        facts.NETCOREAPP_PRELUDE not in lowered
        and facts.NETSTANDARD_PRELUDE not in lowered
    )


def normalize_target_framework(tfm: str) -> str:
    """Compact a dotted .NET Framework moniker such as `net4.7.2`.

    Modern monikers (`net5.0`, `netcoreapp3.1`, `netstandard2.0`) are returned
    unchanged.

    Args:
        tfm (str): Evaluated target framework moniker.

    Returns:
        str: The normalized moniker.
    """
    if not is_not_net_framework(tfm):
        return tfm
    match = _DOTTED_FRAMEWORK_TFM.match(tfm)
    if match is None or int(match.group("major")) >= 5:
        return tfm
    return tfm.replace(".", "")


def tfm_from_framework_version(version: str | None) -> str | None:
    """Translate a legacy `TargetFrameworkVersion` (`v4.7.2`) to `net472`.

    Args:
        version (str | None): Raw property value.

    Returns:
        str | None: The moniker, or `None` when the value is unusable.
    """
    if not version:
        return None
    match = _FRAMEWORK_VERSION.match(version.strip())
    if match is None:
        return None
    return f"{facts.NETFRAMEWORK_PRELUDE}{match.group('version').replace('.', '')}"


def framework_has_a_value_tuple(tfm: str | None) -> bool:
    """Return True when `tfm` ships `System.ValueTuple` in-box.

    Args:
        tfm (str | None): Target framework moniker.

    Returns:
        bool: Whether an explicit ValueTuple reference is redundant.
    """
    if not tfm:
        return False
    tfm = tfm.strip()

    versioned = _VERSIONED_TFM.match(tfm)
    if versioned is not None:
        if versioned.group("prelude").casefold() == facts.NETCOREAPP_PRELUDE:
            return True
        return int(versioned.group("major")) >= 2

    modern = _MODERN_TFM.match(tfm)
    if modern is not None and int(modern.group("major")) >= 5:
        return True

    framework = _FRAMEWORK_TFM.match(normalize_target_framework(tfm))
    if framework is None:
        return False
    digits = framework.group("version")
    # net47, net471, net472, net48 ...
    return int(digits[:2]) >= 47


def get_packages_config_item_group(root: ProjectRoot) -> ItemGroup | None:
    """Return the first item group that lists a `packages.config` file."""
    for group in root.item_groups:
        if get_packages_config_item(group) is not None:
            return group
    return None


def get_packages_config_item(group: ItemGroup) -> Item | None:
    """Return the `packages.config` item of `group`, if any."""
    for item in group.items:
        if item.include and _file_name(item.include) == facts.PACKAGES_CONFIG_NAME:
            return item
    return None


def _file_name(path: str) -> str:
    return path.replace("/", "\\").rsplit("\\", 1)[-1].casefold()


def find_target_framework_property(root: ProjectRoot) -> Property | None:
    """Return the unconditioned `TargetFramework` property, if declared."""
    for group in root.property_groups:
        if not group.is_unconditioned:
            continue
        prop = group.find(facts.TARGET_FRAMEWORK_NAME)
        if prop is not None and not (prop.condition or "").strip():
            return prop
    return None


def get_or_create_top_level_property_group_with_tfm(root: ProjectRoot) -> PropertyGroup:
    """Return the group holding `TargetFramework`, creating one when absent.

    Args:
        root (ProjectRoot): Project tree.

    Returns:
        PropertyGroup: An unconditioned property group.
    """
    prop = find_target_framework_property(root)
    if prop is not None and prop.parent is not None:
        return prop.parent
    for group in root.property_groups:
        if group.is_unconditioned:
            return group
    return root.add_property_group(first=True)


def get_or_create_package_references_item_group(root: ProjectRoot) -> ItemGroup:
    """Return an unconditioned group holding only package references.

    Args:
        root (ProjectRoot): Project tree.

    Returns:
        ItemGroup: Existing or freshly created group.
    """
    for group in root.item_groups:
        items = group.items
        if (
            group.is_unconditioned
            and items
            and all(item.is_type(facts.PACKAGE_REFERENCE_ITEM_TYPE) for item in items)
        ):
            return group
    return root.add_item_group()


def are_property_groups_identical(a: PropertyGroup, b: PropertyGroup) -> bool:
    """Return True when both groups hold the same (name, value) set.

    Order is ignored; empty groups are never considered identical.

    Args:
        a (PropertyGroup): First group.
        b (PropertyGroup): Second group.

    Returns:
        bool: Whether the property sets match.
    """
    props_a, props_b = a.properties, b.properties
    if not props_a or len(props_a) != len(props_b):
        return False
    return all(any(pa.matches(pb) for pb in props_b) for pa in props_a) and all(
        any(pb.matches(pa) for pa in props_a) for pb in props_b
    )
