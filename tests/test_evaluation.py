from conftest import DEBUG, configured
from sdk_convert.core.evaluation import (
    BaselineProject,
    EvaluatedItem,
    Evaluator,
    ProjectStyle,
    UnconfiguredProject,
    detect_project_style,
    evaluate_project,
)
from sdk_convert.core.project import (
    Import,
    ItemGroup,
    ProjectRoot,
    Property,
    PropertyGroup,
    RawNode,
)


def test_configured_project_lookups_ignore_case():
    """Properties and item types are looked up case-insensitively."""
    project = configured(
        {"TargetFramework": "net472"},
        [("Compile", "A.cs"), ("compile", "B.cs"), ("None", "C.txt")],
    )
    assert project.get_property_value("targetframework") == "net472"
    assert project.get_property_value("Missing") is None
    assert project.item_types == ["Compile", "None"]
    assert [i.include for i in project.items_of_type("COMPILE")] == ["A.cs", "B.cs"]


def test_same_metadata_ignores_key_case():
    a = EvaluatedItem("Compile", "A.cs", {"SubType": "Code"})
    b = EvaluatedItem("Compile", "A.cs", {"subtype": "Code"})
    c = EvaluatedItem("Compile", "A.cs", {"SubType": "code"})
    assert a.same_metadata(b)
    assert not a.same_metadata(c)


def test_first_configured_project_prefers_default():
    """The unconditioned evaluation is preferred over declared order."""
    default = configured()
    project = UnconfiguredProject({DEBUG: configured(), "": default})
    assert project.first_configured_project is default
    assert UnconfiguredProject({}).first_configured_project is None


def test_unconfigured_project_get_ignores_case():
    debug = configured()
    project = UnconfiguredProject({DEBUG: debug})
    assert project.get("DEBUG|anycpu") is debug
    assert project.get("Release|AnyCPU") is None


def test_baseline_global_properties():
    """Overrides are matched case-insensitively and keep their spelling."""
    baseline = BaselineProject(
        UnconfiguredProject({}), {"TargetFramework": "net48"}, ProjectStyle.DEFAULT
    )
    assert baseline.has_global_property("targetframework")
    assert baseline.get_global_property("TARGETFRAMEWORK") == "net48"
    assert baseline.get_global_property("LangVersion") is None
    assert baseline.global_properties == {"TargetFramework": "net48"}


def test_project_style_sdk_import_support():
    assert ProjectStyle.DEFAULT.supports_sdk_imports
    assert ProjectStyle.WINDOWS_DESKTOP.supports_sdk_imports
    assert not ProjectStyle.CUSTOM.supports_sdk_imports
    assert not ProjectStyle.DEFAULT_WITH_CUSTOM_TARGETS.supports_sdk_imports


def test_detect_project_style():
    """Styles are detected from imports, targets and toolkit markers."""
    root = ProjectRoot()
    root.append_child(Import("$(MSBuildToolsPath)\\Microsoft.CSharp.targets"))
    assert detect_project_style(root) is ProjectStyle.DEFAULT

    references = root.append_child(ItemGroup())
    references.add_item("Reference", "PresentationFramework")
    assert detect_project_style(root) is ProjectStyle.WINDOWS_DESKTOP

    root.append_child(RawNode(None, "Target"))
    assert detect_project_style(root) is ProjectStyle.DEFAULT_WITH_CUSTOM_TARGETS

    root.append_child(Import("..\\build\\Custom.targets"))
    assert detect_project_style(root) is ProjectStyle.CUSTOM


def test_detect_project_style_from_flag():
    root = ProjectRoot()
    group = root.append_child(PropertyGroup())
    group.append(Property("UseWindowsForms", "true"))
    assert detect_project_style(root) is ProjectStyle.WINDOWS_DESKTOP


class StaticEvaluator:
    def __init__(self):
        self.calls = []

    def evaluate(self, root, configuration):
        self.calls.append(configuration)
        return configured({"Configuration": configuration})


def test_evaluate_project_runs_every_configuration():
    """Each configuration is evaluated exactly once."""
    evaluator = StaticEvaluator()
    assert isinstance(evaluator, Evaluator)
    project = evaluate_project(evaluator, ProjectRoot(), ["", DEBUG])
    assert evaluator.calls == ["", DEBUG]
    assert project.get(DEBUG).get_property_value("Configuration") == DEBUG
