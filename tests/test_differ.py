import pytest

from conftest import DEBUG, RELEASE, configured
from sdk_convert.core.differ import (
    Differ,
    UnknownConfigurationError,
    build_differs,
    differ_for,
)
from sdk_convert.core.evaluation import UnconfiguredProject
from sdk_convert.core.project import InconsistentStateError


@pytest.fixture
def differ():
    legacy = configured(
        {"DebugType": "full", "LangVersion": "7.3", "Optimize": "false"},
        [
            ("Compile", "A.cs"),
            ("Compile", "B.cs", {"SubType": "Form"}),
            ("Compile", "C.cs"),
            ("None", "App.config"),
        ],
    )
    baseline = configured(
        {"debugtype": "full", "Optimize": "true"},
        [
            ("Compile", "a.cs"),
            ("Compile", "B.cs"),
            ("Compile", "D.cs"),
        ],
    )
    return Differ(legacy, baseline)


def test_properties_diff(differ):
    """Properties split into defaulted, changed and legacy-only."""
    diff = differ.get_properties_diff()
    assert [p.name for p in diff.defaulted_properties] == ["DebugType"]
    assert [(a.value, b.value) for a, b in diff.changed_properties] == [("false", "true")]
    assert [p.name for p in diff.not_defaulted_properties] == ["LangVersion"]
    assert diff.is_defaulted("DEBUGTYPE")
    assert not diff.is_defaulted("Optimize")


def test_items_diff(differ):
    """Items split by include, with metadata deciding defaulted versus changed."""
    diff = differ.items_diff_for("compile")
    assert [i.include for i in diff.defaulted_items] == ["A.cs"]
    assert [i.include for i in diff.changed_items] == ["B.cs"]
    assert [i.include for i in diff.not_defaulted_items] == ["C.cs"]
    assert [i.include for i in diff.introduced_items] == ["D.cs"]
    assert diff.is_defaulted("a.CS")
    assert diff.is_changed("B.cs")
    assert not diff.is_defaulted("B.cs")
    assert not diff.is_changed(None)


def test_item_types_follow_legacy_project(differ):
    """Every legacy item type has a diff; unknown types have none."""
    assert [d.item_type for d in differ.get_items_diff()] == ["Compile", "None"]
    assert differ.items_diff_for("None").not_defaulted_items[0].include == "App.config"
    assert differ.items_diff_for("Content") is None


def test_generate_report(differ):
    """The report marks each classification."""
    report = differ.generate_report()
    assert report[0] == "Properties:"
    assert "  = DebugType: full" in report
    assert "  ~ Optimize: false (baseline: true)" in report
    assert "  + LangVersion: 7.3" in report
    assert "Items:" in report
    assert "    - D.cs" in report
    assert "    ~ B.cs" in report


def test_build_differs_is_read_only():
    """Differs are keyed by configuration and cannot be replaced."""
    legacy = UnconfiguredProject({DEBUG: configured(), RELEASE: configured()})
    baseline = UnconfiguredProject({DEBUG: configured(), "release|anycpu": configured()})
    differs = build_differs(legacy, baseline)
    assert list(differs) == [DEBUG, RELEASE]
    with pytest.raises(TypeError):
        differs[DEBUG] = None


def test_build_differs_requires_baseline_configuration():
    """A legacy configuration missing from the baseline is an error."""
    legacy = UnconfiguredProject({DEBUG: configured()})
    with pytest.raises(UnknownConfigurationError) as excinfo:
        build_differs(legacy, UnconfiguredProject({}))
    assert isinstance(excinfo.value, InconsistentStateError)
    assert "Debug|AnyCPU" in str(excinfo.value)


def test_differ_for_is_case_insensitive():
    """Configuration lookups ignore case and fail loudly when unknown."""
    legacy = UnconfiguredProject({DEBUG: configured()})
    differs = build_differs(legacy, legacy)
    assert differ_for(differs, "debug|anycpu") is differs[DEBUG]
    with pytest.raises(UnknownConfigurationError):
        differ_for(differs, "Staging|AnyCPU")
    with pytest.raises(KeyError):
        differ_for(differs, "")
