"""Orchestration of the legacy-to-SDK project conversion passes."""

from collections.abc import Mapping
from logging import getLogger
from pathlib import Path

from sdk_convert.core import facts
from sdk_convert.core.differ import Differ, build_differs, differ_for
from sdk_convert.core.evaluation import BaselineProject, ProjectStyle, UnconfiguredProject
from sdk_convert.core.packages import (
    PackageMigrator,
    PackagesConfigReader,
    read_packages_config,
)
from sdk_convert.core.project import Item, ItemGroup, ProjectRoot, Property
from sdk_convert.core.serialization import save_project
from sdk_convert.utils import items as item_rules
from sdk_convert.utils import properties as property_rules
from sdk_convert.utils.msbuild import (
    are_property_groups_identical,
    find_target_framework_property,
    get_configuration_name,
    get_or_create_top_level_property_group_with_tfm,
    is_winforms,
    is_wpf,
    normalize_target_framework,
    tfm_from_framework_version,
)

log = getLogger(__name__)


class Converter:
    """Turn a legacy project tree into its SDK-style equivalent in place.

    Every decision to drop a declaration is taken against the diffs computed
    from the tree's initial evaluation; the diffs are never refreshed while the
    passes run.
    """

    def __init__(
        self,
        project: UnconfiguredProject,
        sdk_baseline_project: BaselineProject,
        project_root: ProjectRoot,
        *,
        packages_reader: PackagesConfigReader = read_packages_config,
    ) -> None:
        """Initialize the converter and diff every configuration.

        Args:
            project (UnconfiguredProject): Evaluations of the legacy project.
            sdk_baseline_project (BaselineProject): Baseline evaluations,
                global overrides and project style.
            project_root (ProjectRoot): The legacy tree; mutated in place.
            packages_reader (PackagesConfigReader): Reader for `packages.config`.

        Raises:
            ValueError: If the project or the tree is missing.
        """
        if project is None:
            raise ValueError("project is required")
        if project_root is None:
            raise ValueError("project_root is required")
        if sdk_baseline_project is None:
            raise ValueError("sdk_baseline_project is required")
        self._project = project
        self._sdk_baseline_project = sdk_baseline_project
        self._root = project_root
        self._differs = self.get_differs()
        self._packages = PackageMigrator(project_root, reader=packages_reader)

    @property
    def differs(self) -> Mapping[str, Differ]:
        return self._differs

    @property
    def _style(self) -> ProjectStyle:
        return self._sdk_baseline_project.project_style

    def get_differs(self) -> Mapping[str, Differ]:
        return build_differs(self._project, self._sdk_baseline_project.project)

    def convert(self, output_path: Path | str) -> None:
        """Run every pass and write the result to `output_path`.

        Args:
            output_path (Path | str): Destination project file.
        """
        self.generate_project_file()
        save_project(self._root, output_path)
        log.info("Wrote converted project to %s", output_path)

    def generate_project_file(self) -> ProjectRoot:
        """Run the passes in their fixed order.

        Returns:
            ProjectRoot: The mutated tree.
        """
        log.info("Converting %s (%s)", self._root.full_path or "<memory>", self._style)
        self.change_imports()

        self.remove_defaulted_properties()
        self.remove_unnecessary_properties_not_in_sdk_by_default()

        tfm = self.add_target_framework_property()
        self.add_desktop_properties()
        self.add_generate_assembly_info()
        self.add_common_properties_to_top_level_property_group()

        self.add_converted_packages(tfm)
        self.remove_or_update_items(tfm)

        self.modify_project_element()
        return self._root

    def change_imports(self) -> None:
        """Replace explicit imports by the matching SDK attribute."""
        if not self._style.supports_sdk_imports:
            log.info("Keeping imports of %s project", self._style)
            return

        for imported in self._root.imports:
            log.debug("Removing import %s", imported.project)
            self._root.remove_child(imported)

        if is_winforms(self._root) or is_wpf(self._root):
            self._root.sdk = facts.DESKTOP_SDK_ATTRIBUTE
        else:
            self._root.sdk = facts.DEFAULT_SDK_ATTRIBUTE

    def remove_defaulted_properties(self) -> None:
        """Drop properties whose value equals the baseline's for their configuration."""
        removed = 0
        for group in self._root.property_groups:
            configuration = get_configuration_name(group.condition)
            diff = differ_for(self._differs, configuration).get_properties_diff()

            for prop in group.properties:
                # Overrides were injected into the baseline; they always survive.
                if self._sdk_baseline_project.has_global_property(prop.name):
                    continue
                if diff.is_defaulted(prop.name):
                    log.debug(
                        "Removing defaulted %s=%s [%s]", prop.name, prop.value, configuration
                    )
                    group.remove(prop)
                    removed += 1

            if not len(group):
                self._root.remove_child(group)
        log.info("Removed %d defaulted properties", removed)

    def remove_unnecessary_properties_not_in_sdk_by_default(self) -> None:
        """Drop properties the SDK makes meaningless or implies by default."""
        project_name = self._root.project_name
        removed = 0
        for group in self._root.property_groups:
            for prop in group.properties:
                if self._is_unnecessary_property(prop, project_name):
                    log.debug("Removing unnecessary %s=%s", prop.name, prop.value)
                    group.remove(prop)
                    removed += 1

            if not len(group):
                self._root.remove_child(group)
        log.info("Removed %d unnecessary properties", removed)

    @staticmethod
    def _is_unnecessary_property(prop: Property, project_name: str) -> bool:
        return (
            prop.name.casefold() in facts.UNNECESSARY_PROPERTIES
            or property_rules.is_define_constants_default(prop)
            or property_rules.is_debug_type_default(prop)
            or property_rules.is_output_path_default(prop)
            or property_rules.is_platform_target_default(prop)
            or property_rules.is_name_default(prop, project_name)
            or property_rules.is_documentation_file_default(prop, project_name)
        )

    def add_target_framework_property(self) -> str | None:
        """Declare the target framework and return it for the later passes.

        Returns:
            str | None: The moniker, or `None` when none can be resolved.
        """
        override = self._sdk_baseline_project.get_global_property(
            facts.TARGET_FRAMEWORK_NAME
        )
        if override is not None:
            log.debug("Using TargetFramework override %s", override)
            return override

        if self._style is ProjectStyle.WINDOWS_DESKTOP:
            tfm: str | None = facts.NETCORE_DESKTOP_TFM
        else:
            raw = self._evaluated_target_framework()
            tfm = normalize_target_framework(raw) if raw else None

        if tfm is None:
            log.warning("Could not resolve a target framework; none declared")
            return None

        existing = find_target_framework_property(self._root)
        if existing is not None:
            existing.value = tfm
        else:
            group = next(
                (g for g in self._root.property_groups if g.is_unconditioned),
                None,
            )
            if group is None:
                group = self._root.add_property_group(first=True)
            group.prepend(Property(facts.TARGET_FRAMEWORK_NAME, tfm))
        log.info("Target framework: %s", tfm)
        return tfm

    def _evaluated_target_framework(self) -> str | None:
        """Read the moniker from the legacy evaluation, falling back to the baseline."""
        projects = (
            self._project.first_configured_project,
            self._sdk_baseline_project.project.first_configured_project,
        )
        for configured in projects:
            if configured is None:
                continue
            value = configured.get_property_value(facts.TARGET_FRAMEWORK_NAME)
            if value:
                return value
        legacy = self._project.first_configured_project
        if legacy is None:
            return None
        return tfm_from_framework_version(
            legacy.get_property_value(facts.TARGET_FRAMEWORK_VERSION_NAME)
        )

    def _append_to_tfm_group(self, name: str, value: str) -> None:
        group = get_or_create_top_level_property_group_with_tfm(self._root)
        if group.find(name) is not None:
            return
        group.append(Property(name, value))
        log.debug("Added %s=%s", name, value)

    def add_desktop_properties(self) -> None:
        """Flag the detected desktop toolkits next to the target framework."""
        if self._style is not ProjectStyle.WINDOWS_DESKTOP:
            return

        baseline = self._sdk_baseline_project
        if not baseline.has_global_property(facts.USE_WINFORMS_NAME) and is_winforms(
            self._root
        ):
            self._append_to_tfm_group(facts.USE_WINFORMS_NAME, "true")

        if not baseline.has_global_property(facts.USE_WPF_NAME) and is_wpf(self._root):
            self._append_to_tfm_group(facts.USE_WPF_NAME, "true")

    def add_generate_assembly_info(self) -> None:
        """Keep the legacy `AssemblyInfo` file authoritative."""
        self._append_to_tfm_group(facts.GENERATE_ASSEMBLY_INFO_NAME, "false")

    def add_common_properties_to_top_level_property_group(self) -> None:
        """Hoist configuration groups that ended up identical into the top level."""
        groups = self._root.property_groups

        # One group is the top level; with two, the other is configuration-specific.
        if len(groups) <= 2:
            return

        top_level = get_or_create_top_level_property_group_with_tfm(self._root)
        consumed: set[int] = set()
        for a, b in zip(groups, groups[1:]):
            if id(a) in consumed or id(b) in consumed:
                continue
            if not are_property_groups_identical(a, b):
                continue

            # The top-level group may be one side of the pair; it is kept.
            for group in (a, b):
                consumed.add(id(group))
                if group is top_level:
                    continue
                for prop in group.properties:
                    group.remove(prop)
                    if not any(p.matches(prop) for p in top_level.properties):
                        top_level.append(prop)
                if group.parent is not None:
                    self._root.remove_child(group)
            log.debug("Hoisted properties shared by %r and %r", a.condition, b.condition)

    def add_converted_packages(self, tfm: str | None) -> None:
        self._packages.convert_packages_config(tfm)

    def add_package(self, package_name: str, package_version: str) -> Item:
        return self._packages.add_package(package_name, package_version)

    def remove_or_update_items(self, tfm: str | None) -> None:
        """Prune, convert or rewrite every non-package item."""
        for group in self._root.item_groups:
            configuration = get_configuration_name(group.condition)

            for item in group.items:
                if item_rules.is_package_reference(item) or item.include is None:
                    continue
                self._reconcile_item(group, item, configuration, tfm)

            if not len(group):
                self._root.remove_child(group)

    def _reconcile_item(
        self, group: ItemGroup, item: Item, configuration: str, tfm: str | None
    ) -> None:
        if item.has_metadata and item_rules.can_item_metadata_be_removed(item):
            item.clear_metadata()

        if item_rules.is_unnecessary_include(item):
            log.debug("Removing implied %r", item)
            group.remove(item)
        elif item_rules.is_explicit_value_tuple_reference_that_can_be_removed(item, tfm):
            log.debug("Removing %r: provided by %s", item, tfm)
            group.remove(item)
        elif (package := item_rules.package_equivalent(item)) is not None:
            name, version = package
            self.add_package(name, version)
            log.debug("Replaced %r with package %s %s", item, name, version)
            group.remove(item)
        elif item_rules.is_desktop_removable_item(self._style, item):
            log.debug("Removing desktop designer artifact %r", item)
            group.remove(item)
        elif item_rules.is_item_with_unnecessary_metadata(item):
            log.debug("Removing %r with unnecessary metadata", item)
            group.remove(item)
        else:
            differ = differ_for(self._differs, configuration)
            self._update_based_on_diff(group, item, differ)

    @staticmethod
    def _update_based_on_diff(group: ItemGroup, item: Item, differ: Differ) -> None:
        diff = differ.items_diff_for(item.item_type)
        if diff is None:
            return
        if diff.is_defaulted(item.include):
            log.debug("Removing %r: globbed in by the SDK", item)
            group.remove(item)
        elif diff.is_changed(item.include):
            log.debug("Converting %r to an update", item)
            item.convert_to_update()

    def modify_project_element(self) -> None:
        """Clear root attributes the SDK supplies implicitly."""
        self._root.tools_version = None
        self._root.default_targets = None
