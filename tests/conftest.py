import pytest

from sdk_convert.core.converter import Converter
from sdk_convert.core.evaluation import (
    BaselineProject,
    ConfiguredProject,
    EvaluatedItem,
    UnconfiguredProject,
    detect_project_style,
)
from sdk_convert.core.packages import PackagesConfigPackage
from sdk_convert.core.serialization import parse_project

PROJECT_PATH = "C:\\src\\App\\App.csproj"
DEBUG = "Debug|AnyCPU"
RELEASE = "Release|AnyCPU"
DEBUG_CONDITION = " '$(Configuration)|$(Platform)' == 'Debug|AnyCPU' "
RELEASE_CONDITION = " '$(Configuration)|$(Platform)' == 'Release|AnyCPU' "


def configured(properties=None, items=()):
    """Build a configured evaluation from a property dict and item tuples."""
    return ConfiguredProject(
        properties or {},
        [EvaluatedItem(*item) for item in items],
    )


def package(id, version):
    return PackagesConfigPackage(id=id, version=version)


class RecordingReader:
    """`packages.config` reader returning canned packages and recording paths."""

    def __init__(self, packages=()):
        self.packages = list(packages)
        self.paths = []

    def __call__(self, path):
        self.paths.append(path)
        return list(self.packages)


@pytest.fixture
def make_converter():
    """Factory building a converter over parsed XML and in-memory evaluations."""

    def factory(
        xml,
        legacy,
        baseline,
        *,
        global_properties=None,
        style=None,
        packages=(),
        full_path=PROJECT_PATH,
    ):
        root = parse_project(xml, full_path)
        reader = RecordingReader(packages)
        converter = Converter(
            UnconfiguredProject(legacy),
            BaselineProject(
                UnconfiguredProject(baseline),
                global_properties,
                style or detect_project_style(root),
            ),
            root,
            packages_reader=reader,
        )
        return converter, root, reader

    return factory
