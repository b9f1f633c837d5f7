"""Evaluated project state consumed by the differ and the converter."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol, runtime_checkable

from sdk_convert.core import facts
from sdk_convert.core.project import ProjectRoot
from sdk_convert.utils.msbuild import is_winforms, is_wpf


class ProjectStyle(StrEnum):
    """Closed set of project shapes the converter distinguishes."""

    DEFAULT = "Default"
    DEFAULT_WITH_CUSTOM_TARGETS = "DefaultWithCustomTargets"
    WINDOWS_DESKTOP = "WindowsDesktop"
    CUSTOM = "Custom"

    @property
    def supports_sdk_imports(self) -> bool:
        """Whether explicit imports can be replaced by an SDK attribute."""
        return self in (ProjectStyle.DEFAULT, ProjectStyle.WINDOWS_DESKTOP)


@dataclass(frozen=True, slots=True)
class EvaluatedProperty:
    """A property with its evaluated value for one configuration."""

    name: str
    value: str


@dataclass(frozen=True, slots=True)
class EvaluatedItem:
    """An item with its evaluated include for one configuration."""

    item_type: str
    include: str
    metadata: Mapping[str, str] = field(default_factory=dict)

    def same_metadata(self, other: EvaluatedItem) -> bool:
        """Compare metadata with case-insensitive keys and exact values."""
        mine = {key.casefold(): value for key, value in self.metadata.items()}
        theirs = {key.casefold(): value for key, value in other.metadata.items()}
        return mine == theirs


class ConfiguredProject:
    """Evaluated property and item tables of a project in one configuration."""

    def __init__(
        self,
        properties: Mapping[str, str] | Iterable[EvaluatedProperty] = (),
        items: Iterable[EvaluatedItem] = (),
    ) -> None:
        """Index the evaluated tables.

        Args:
            properties (Mapping[str, str] | Iterable[EvaluatedProperty]):
                Property table, either as name/value mapping or as records.
            items (Iterable[EvaluatedItem]): Evaluated items.
        """
        if isinstance(properties, Mapping):
            records = [EvaluatedProperty(k, v) for k, v in properties.items()]
        else:
            records = list(properties)
        self._properties: dict[str, EvaluatedProperty] = {
            prop.name.casefold(): prop for prop in records
        }
        self._items: dict[str, list[EvaluatedItem]] = {}
        for item in items:
            self._items.setdefault(item.item_type.casefold(), []).append(item)

    @property
    def properties(self) -> list[EvaluatedProperty]:
        return list(self._properties.values())

    def get_property(self, name: str) -> EvaluatedProperty | None:
        return self._properties.get(name.casefold())

    def get_property_value(self, name: str) -> str | None:
        prop = self.get_property(name)
        return prop.value if prop is not None else None

    @property
    def item_types(self) -> list[str]:
        """Return item types in first-seen order, with their original casing."""
        return [items[0].item_type for items in self._items.values()]

    def items_of_type(self, item_type: str) -> list[EvaluatedItem]:
        return list(self._items.get(item_type.casefold(), ()))


class UnconfiguredProject:
    """All configured evaluations of one project, keyed by configuration."""

    def __init__(self, configured_projects: Mapping[str, ConfiguredProject]) -> None:
        self._configured = dict(configured_projects)

    @property
    def configured_projects(self) -> dict[str, ConfiguredProject]:
        return dict(self._configured)

    @property
    def first_configured_project(self) -> ConfiguredProject | None:
        """Return the unconditioned evaluation, else the first one declared."""
        for name, project in self._configured.items():
            if name == "":
                return project
        return next(iter(self._configured.values()), None)

    def get(self, configuration: str) -> ConfiguredProject | None:
        """Look up a configuration case-insensitively."""
        for name, project in self._configured.items():
            if name.casefold() == configuration.casefold():
                return project
        return None


class BaselineProject:
    """The SDK baseline evaluation plus the caller's global overrides."""

    def __init__(
        self,
        project: UnconfiguredProject,
        global_properties: Mapping[str, str] | None = None,
        project_style: ProjectStyle = ProjectStyle.DEFAULT,
    ) -> None:
        self.project = project
        self.project_style = project_style
        self._global_properties = {
            name.casefold(): (name, value)
            for name, value in (global_properties or {}).items()
        }

    @property
    def global_properties(self) -> dict[str, str]:
        return dict(self._global_properties.values())

    def has_global_property(self, name: str) -> bool:
        return name.casefold() in self._global_properties

    def get_global_property(self, name: str) -> str | None:
        entry = self._global_properties.get(name.casefold())
        return entry[1] if entry is not None else None


@runtime_checkable
class Evaluator(Protocol):
    """Contract for anything able to evaluate a project tree."""

    def evaluate(self, root: ProjectRoot, configuration: str) -> ConfiguredProject:
        """Return evaluated tables of `root` for `configuration`.

        Args:
            root (ProjectRoot): Project tree to evaluate.
            configuration (str): Configuration identifier, `""` for the default.

        Returns:
            ConfiguredProject: Evaluated property and item tables.
        """
        ...


def detect_project_style(root: ProjectRoot) -> ProjectStyle:
    """Classify a legacy project from its imports, targets and references.

    Args:
        root (ProjectRoot): Legacy project tree.

    Returns:
        ProjectStyle: The detected style.
    """
    for imported in root.imports:
        path = imported.project.replace("/", "\\").casefold()
        if not path.endswith(facts.STANDARD_IMPORT_SUFFIXES):
            return ProjectStyle.CUSTOM
    if any((node.tag or "").casefold() == "target" for node in root.raw_nodes):
        return ProjectStyle.DEFAULT_WITH_CUSTOM_TARGETS
    if is_winforms(root) or is_wpf(root):
        return ProjectStyle.WINDOWS_DESKTOP
    return ProjectStyle.DEFAULT


def evaluate_project(
    evaluator: Evaluator, root: ProjectRoot, configurations: Iterable[str]
) -> UnconfiguredProject:
    """Evaluate `root` once per configuration.

    Args:
        evaluator (Evaluator): Evaluation collaborator.
        root (ProjectRoot): Project tree to evaluate.
        configurations (Iterable[str]): Configuration identifiers.

    Returns:
        UnconfiguredProject: The collected evaluations.
    """
    return UnconfiguredProject(
        {name: evaluator.evaluate(root, name) for name in configurations}
    )
