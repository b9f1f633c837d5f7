"""Migration of `packages.config` entries to `PackageReference` items."""

from collections.abc import Callable
from logging import getLogger
from pathlib import Path
from typing import TypeAlias

from lxml import etree
from pydantic import BaseModel, ConfigDict, ValidationError

from sdk_convert.core import facts
from sdk_convert.core.project import ConversionError, Item, ProjectRoot
from sdk_convert.utils.msbuild import (
    framework_has_a_value_tuple,
    get_or_create_package_references_item_group,
    get_packages_config_item,
    get_packages_config_item_group,
)

log = getLogger(__name__)


class PackagesConfigError(ConversionError):
    """Raised when a `packages.config` file cannot be parsed."""


class PackagesConfigPackage(BaseModel):
    """Data model for a `<package>` entry of `packages.config`."""

    id: str
    version: str

    model_config = ConfigDict(extra="ignore")


PackagesConfigReader: TypeAlias = Callable[[Path], list[PackagesConfigPackage]]


def read_packages_config(path: Path | str) -> list[PackagesConfigPackage]:
    """Parse the packages listed in a `packages.config` file.

    Args:
        path (Path | str): Location of the file.

    Returns:
        list[PackagesConfigPackage]: Packages in file order; empty when the
            file does not exist.

    Raises:
        PackagesConfigError: If the file is not valid XML or an entry lacks
            its id or version.
    """
    path = Path(path)
    if not path.exists():
        log.warning("packages.config not found: %s. Continuing without packages.", path)
        return []

    try:
        parser = etree.XMLParser(resolve_entities=False, no_network=True)
        document = etree.parse(str(path), parser=parser)
    except (OSError, etree.XMLSyntaxError) as exc:
        raise PackagesConfigError(f"Failed to read packages file '{path}': {exc}") from exc

    packages: list[PackagesConfigPackage] = []
    for element in document.getroot().iter(etree.Element):
        if etree.QName(element).localname != "package":
            continue
        try:
            packages.append(PackagesConfigPackage.model_validate(dict(element.attrib)))
        except ValidationError as exc:
            raise PackagesConfigError(
                f"Invalid package entry on line {element.sourceline} of '{path}': {exc}"
            ) from exc
    log.debug("Read %d package(s) from %s", len(packages), path)
    return packages


class PackageMigrator:
    """Emit `PackageReference` items into a project tree."""

    def __init__(
        self,
        root: ProjectRoot,
        *,
        reader: PackagesConfigReader = read_packages_config,
    ) -> None:
        """Bind the migrator to a project tree.

        Args:
            root (ProjectRoot): Project tree to mutate.
            reader (PackagesConfigReader): Collaborator parsing `packages.config`.
        """
        self._root = root
        self._reader = reader

    def add_package(self, name: str, version: str) -> Item:
        """Append a `PackageReference` with `Version` metadata.

        Reuses the first unconditioned group holding only package references.
        Repeated calls for the same package add repeated items.

        Args:
            name (str): Package identifier.
            version (str): Package version.

        Returns:
            Item: The appended item.
        """
        group = get_or_create_package_references_item_group(self._root)
        log.debug("Adding package reference %s %s", name, version)
        return group.add_item(
            facts.PACKAGE_REFERENCE_ITEM_TYPE, name, [("Version", version)]
        )

    def convert_packages_config(self, tfm: str | None) -> list[Item]:
        """Replace the `packages.config` item by equivalent package references.

        Args:
            tfm (str | None): Resolved target framework moniker.

        Returns:
            list[Item]: The package references that were emitted.
        """
        config_group = get_packages_config_item_group(self._root)
        if config_group is None:
            return []
        config_item = get_packages_config_item(config_group)
        if config_item is None or config_item.include is None:
            return []

        path = self._root.directory_path / config_item.include.replace("\\", "/")
        packages = self._reader(path)

        emitted: list[Item] = []
        if packages:
            group = self._root.add_item_group()
            for package in packages:
                if package.id.casefold() == facts.SYSTEM_VALUE_TUPLE_NAME.casefold() and (
                    framework_has_a_value_tuple(tfm)
                ):
                    log.debug("Skipping %s: provided by %s", package.id, tfm)
                    continue
                if package.id.casefold() in facts.UNNECESSARY_ITEM_INCLUDES:
                    log.debug("Skipping %s: implied by the SDK", package.id)
                    continue
                emitted.append(
                    group.add_item(
                        facts.PACKAGE_REFERENCE_ITEM_TYPE,
                        package.id,
                        [("Version", package.version)],
                    )
                )

            if not len(group):
                self._root.remove_child(group)

        config_group.remove(config_item)
        log.info(
            "Converted %d of %d package(s) from %s",
            len(emitted),
            len(packages),
            config_item.include,
        )
        return emitted
