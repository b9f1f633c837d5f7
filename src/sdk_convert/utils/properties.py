"""Predicates recognising properties whose value the SDK already implies."""

from sdk_convert.core import facts
from sdk_convert.core.project import Property
from sdk_convert.utils.msbuild import get_condition_dimensions

_ANY_CPU = frozenset({"anycpu", "any cpu"})


def _is_named(prop: Property, name: str) -> bool:
    return prop.name.casefold() == name.casefold()


def _dimensions(prop: Property) -> dict[str, str]:
    condition = prop.parent.condition if prop.parent is not None else None
    return get_condition_dimensions(condition)


def _normalize_path(value: str) -> str:
    normalized = value.strip().replace("/", "\\").casefold()
    return normalized if normalized.endswith("\\") else normalized + "\\"


def is_define_constants_default(prop: Property) -> bool:
    """Return True for `DefineConstants` holding only the configuration defaults.

    `DEBUG;TRACE` is implied for Debug and `TRACE` for Release; the symbol order
    and empty segments do not matter.
    """
    if not _is_named(prop, facts.DEFINE_CONSTANTS_NAME):
        return False
    configuration = _dimensions(prop).get("configuration")
    if configuration is None:
        return False
    defaults = facts.DEFAULT_DEFINE_CONSTANTS.get(configuration.casefold())
    if defaults is None:
        return False
    symbols = {part.strip() for part in prop.value.split(";") if part.strip()}
    return symbols == defaults


def is_debug_type_default(prop: Property) -> bool:
    """Return True for a `DebugType` matching its configuration's default."""
    if not _is_named(prop, facts.DEBUG_TYPE_NAME):
        return False
    configuration = (_dimensions(prop).get("configuration") or "").casefold()
    defaults = facts.DEFAULT_DEBUG_TYPES.get(configuration, frozenset({"portable"}))
    return prop.value.strip().casefold() in defaults


def is_output_path_default(prop: Property) -> bool:
    r"""Return True for `OutputPath` equal to `bin\<Configuration>\`.

    Platform-specific builds default to `bin\<Platform>\<Configuration>\`.
    """
    if not _is_named(prop, facts.OUTPUT_PATH_NAME):
        return False
    dimensions = _dimensions(prop)
    configuration = dimensions.get("configuration")
    if configuration is None:
        return False

    candidates = {_normalize_path(f"bin\\{configuration}")}
    platform = dimensions.get("platform")
    if platform and platform.casefold() not in _ANY_CPU:
        candidates.add(_normalize_path(f"bin\\{platform}\\{configuration}"))
    return _normalize_path(prop.value) in candidates


def is_platform_target_default(prop: Property) -> bool:
    return (
        _is_named(prop, facts.PLATFORM_TARGET_NAME)
        and prop.value.strip().casefold() == facts.DEFAULT_PLATFORM_TARGET.casefold()
    )


def is_name_default(prop: Property, project_name: str) -> bool:
    """Return True for `RootNamespace`/`AssemblyName` equal to the file name."""
    return (
        _is_named(prop, facts.ROOT_NAMESPACE_NAME)
        or _is_named(prop, facts.ASSEMBLY_NAME_NAME)
    ) and prop.value == project_name


def is_documentation_file_default(prop: Property, project_name: str = "") -> bool:
    r"""Return True for `DocumentationFile` at `bin\<Configuration>\<Assembly>.xml`."""
    if not _is_named(prop, facts.DOCUMENTATION_FILE_NAME):
        return False
    configurations = ["$(Configuration)"]
    configuration = _dimensions(prop).get("configuration")
    if configuration:
        configurations.append(configuration)
    names = ["$(AssemblyName)"]
    if project_name:
        names.append(project_name)

    value = prop.value.strip().replace("/", "\\").casefold()
    return any(
        value == f"bin\\{config}\\{name}.xml".casefold()
        for config in configurations
        for name in names
    )
