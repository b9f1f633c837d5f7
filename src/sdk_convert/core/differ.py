"""Per-configuration comparison of legacy and baseline evaluations."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from logging import getLogger
from types import MappingProxyType

from sdk_convert.core.evaluation import (
    ConfiguredProject,
    EvaluatedItem,
    EvaluatedProperty,
    UnconfiguredProject,
)
from sdk_convert.core.project import InconsistentStateError

log = getLogger(__name__)


class UnknownConfigurationError(InconsistentStateError, KeyError):
    """Raised when a condition maps to a configuration with no evaluation."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else super().__str__()


@dataclass(frozen=True, slots=True)
class PropertiesDiff:
    """Properties classified against the baseline."""

    defaulted_properties: tuple[EvaluatedProperty, ...] = ()
    not_defaulted_properties: tuple[EvaluatedProperty, ...] = ()
    changed_properties: tuple[tuple[EvaluatedProperty, EvaluatedProperty], ...] = ()

    def is_defaulted(self, name: str) -> bool:
        key = name.casefold()
        return any(prop.name.casefold() == key for prop in self.defaulted_properties)


@dataclass(frozen=True, slots=True)
class ItemsDiff:
    """Items of one type classified against the baseline."""

    item_type: str
    defaulted_items: tuple[EvaluatedItem, ...] = ()
    not_defaulted_items: tuple[EvaluatedItem, ...] = ()
    introduced_items: tuple[EvaluatedItem, ...] = ()
    changed_items: tuple[EvaluatedItem, ...] = ()

    def is_defaulted(self, include: str | None) -> bool:
        return _contains_include(self.defaulted_items, include)

    def is_changed(self, include: str | None) -> bool:
        return _contains_include(self.changed_items, include)


def _contains_include(items: tuple[EvaluatedItem, ...], include: str | None) -> bool:
    if include is None:
        return False
    key = include.casefold()
    return any(item.include.casefold() == key for item in items)


class Differ:
    """Diff one configuration of the legacy project against its baseline.

    Both diffs are computed once on construction and never change afterwards.
    """

    def __init__(self, project: ConfiguredProject, baseline: ConfiguredProject) -> None:
        """Compute property and item diffs.

        Args:
            project (ConfiguredProject): Legacy evaluation.
            baseline (ConfiguredProject): SDK baseline evaluation.
        """
        self._project = project
        self._baseline = baseline
        self._properties_diff = self._diff_properties()
        self._items_diff = self._diff_items()

    def get_properties_diff(self) -> PropertiesDiff:
        return self._properties_diff

    def get_items_diff(self) -> tuple[ItemsDiff, ...]:
        return self._items_diff

    def items_diff_for(self, item_type: str) -> ItemsDiff | None:
        """Return the diff for `item_type`, matched case-insensitively."""
        key = item_type.casefold()
        for diff in self._items_diff:
            if diff.item_type.casefold() == key:
                return diff
        return None

    def _diff_properties(self) -> PropertiesDiff:
        defaulted: list[EvaluatedProperty] = []
        not_defaulted: list[EvaluatedProperty] = []
        changed: list[tuple[EvaluatedProperty, EvaluatedProperty]] = []

        for prop in self._project.properties:
            in_baseline = self._baseline.get_property(prop.name)
            if in_baseline is None:
                not_defaulted.append(prop)
            elif in_baseline.value == prop.value:
                defaulted.append(prop)
            else:
                changed.append((prop, in_baseline))

        return PropertiesDiff(
            defaulted_properties=tuple(defaulted),
            not_defaulted_properties=tuple(not_defaulted),
            changed_properties=tuple(changed),
        )

    def _diff_items(self) -> tuple[ItemsDiff, ...]:
        diffs: list[ItemsDiff] = []
        for item_type in self._project.item_types:
            legacy_items = self._project.items_of_type(item_type)
            baseline_items = self._baseline.items_of_type(item_type)
            baseline_index = {item.include.casefold(): item for item in baseline_items}
            legacy_includes = {item.include.casefold() for item in legacy_items}

            defaulted: list[EvaluatedItem] = []
            not_defaulted: list[EvaluatedItem] = []
            changed: list[EvaluatedItem] = []
            for item in legacy_items:
                match = baseline_index.get(item.include.casefold())
                if match is None:
                    not_defaulted.append(item)
                elif item.same_metadata(match):
                    defaulted.append(item)
                else:
                    changed.append(item)

            introduced = [
                item
                for item in baseline_items
                if item.include.casefold() not in legacy_includes
            ]
            diffs.append(
                ItemsDiff(
                    item_type=item_type,
                    defaulted_items=tuple(defaulted),
                    not_defaulted_items=tuple(not_defaulted),
                    introduced_items=tuple(introduced),
                    changed_items=tuple(changed),
                )
            )
        return tuple(diffs)

    def generate_report(self) -> list[str]:
        """Render the diff as human-readable lines.

        `=` marks defaulted entries, `~` changed ones, `+` entries only the
        legacy project declares and `-` entries only the baseline introduces.

        Returns:
            list[str]: Report lines without trailing newlines.
        """
        lines = ["Properties:"]
        props = self._properties_diff
        lines.extend(f"  = {p.name}: {p.value}" for p in props.defaulted_properties)
        lines.extend(
            f"  ~ {legacy.name}: {legacy.value} (baseline: {baseline.value})"
            for legacy, baseline in props.changed_properties
        )
        lines.extend(f"  + {p.name}: {p.value}" for p in props.not_defaulted_properties)

        lines.append("Items:")
        for diff in self._items_diff:
            lines.append(f"  {diff.item_type}:")
            lines.extend(f"    = {i.include}" for i in diff.defaulted_items)
            lines.extend(f"    ~ {i.include}" for i in diff.changed_items)
            lines.extend(f"    + {i.include}" for i in diff.not_defaulted_items)
            lines.extend(f"    - {i.include}" for i in diff.introduced_items)
        return lines


def build_differs(
    project: UnconfiguredProject, baseline: UnconfiguredProject
) -> Mapping[str, Differ]:
    """Construct one differ per configuration of the legacy project.

    Args:
        project (UnconfiguredProject): Legacy evaluations.
        baseline (UnconfiguredProject): Baseline evaluations.

    Returns:
        Mapping[str, Differ]: Read-only mapping keyed by configuration.

    Raises:
        UnknownConfigurationError: If the baseline lacks a configuration.
    """
    differs: dict[str, Differ] = {}
    for name, configured in project.configured_projects.items():
        baseline_configured = baseline.get(name)
        if baseline_configured is None:
            raise UnknownConfigurationError(
                f"Baseline has no evaluation for configuration {name!r}"
            )
        differs[name] = Differ(configured, baseline_configured)
        log.debug("Built differ for configuration %r", name)
    return MappingProxyType(differs)


def differ_for(differs: Mapping[str, Differ], configuration: str) -> Differ:
    """Look up the differ of `configuration` case-insensitively.

    Args:
        differs (Mapping[str, Differ]): Differs keyed by configuration.
        configuration (str): Configuration identifier.

    Returns:
        Differ: The matching differ.

    Raises:
        UnknownConfigurationError: If no differ exists for the configuration.
    """
    differ = differs.get(configuration)
    if differ is not None:
        return differ
    key = configuration.casefold()
    for name, candidate in differs.items():
        if name.casefold() == key:
            return candidate
    raise UnknownConfigurationError(
        f"No evaluation for configuration {configuration!r}; "
        f"known: {sorted(differs)}"
    )
