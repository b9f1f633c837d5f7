import pytest

import main

PROJECT = """<?xml version="1.0" encoding="utf-8"?>
<Project ToolsVersion="15.0" xmlns="http://schemas.microsoft.com/developer/msbuild/2003">
  <PropertyGroup>
    <OutputType>Exe</OutputType>
    <TargetFrameworkVersion>v4.7.2</TargetFrameworkVersion>
  </PropertyGroup>
  <ItemGroup>
    <Compile Include="Program.cs" />
  </ItemGroup>
</Project>
"""

SNAPSHOT = """
configurations:
  "":
    legacy:
      properties:
        OutputType: Exe
        TargetFrameworkVersion: v4.7.2
      items:
        - {type: Compile, include: Program.cs}
    baseline:
      properties:
        OutputType: Library
        TargetFramework: net472
      items:
        - {type: Compile, include: Program.cs}
"""


@pytest.fixture
def inputs(tmp_path):
    project = tmp_path / "App.csproj"
    project.write_text(PROJECT, encoding="utf-8")
    snapshot = tmp_path / "App.snapshot.yaml"
    snapshot.write_text(SNAPSHOT, encoding="utf-8")
    return project, snapshot


def test_convert_to_output(inputs, tmp_path):
    """The converted project is written to --out and the input is untouched."""
    project, snapshot = inputs
    output = tmp_path / "converted" / "App.csproj"
    main.main([str(project), "--snapshot", str(snapshot), "--out", str(output)])

    text = output.read_text(encoding="utf-8")
    assert text.startswith('<Project Sdk="Microsoft.NET.Sdk">')
    assert "<TargetFramework>net472</TargetFramework>" in text
    assert "Program.cs" not in text
    assert project.read_text(encoding="utf-8") == PROJECT


def test_convert_in_place(inputs):
    """Without --out the input file is overwritten."""
    project, snapshot = inputs
    main.main([str(project), "--snapshot", str(snapshot)])
    assert "Microsoft.NET.Sdk" in project.read_text(encoding="utf-8")


def test_diff_only_writes_report(inputs, tmp_path):
    """--diff-only writes the report next to the project and converts nothing."""
    project, snapshot = inputs
    main.main([str(project), "--snapshot", str(snapshot), "--diff-only"])

    report = (tmp_path / "App.csproj.diff.txt").read_text(encoding="utf-8")
    assert report.startswith("Configuration: (default)\nProperties:\n")
    assert "  ~ OutputType: Exe (baseline: Library)" in report
    assert "    = Program.cs" in report
    assert project.read_text(encoding="utf-8") == PROJECT


def test_diff_only_custom_report_path(inputs, tmp_path):
    project, snapshot = inputs
    report = tmp_path / "reports" / "diff.txt"
    main.main(
        [str(project), "--snapshot", str(snapshot), "--diff-only", "--report", str(report)]
    )
    assert report.exists()


def test_missing_project_exits_with_error(tmp_path, inputs):
    """Load failures exit with status 1."""
    _, snapshot = inputs
    with pytest.raises(SystemExit) as excinfo:
        main.main([str(tmp_path / "Missing.csproj"), "--snapshot", str(snapshot)])
    assert excinfo.value.code == 1


def test_invalid_snapshot_exits_with_error(inputs):
    project, snapshot = inputs
    snapshot.write_text("configurations: [", encoding="utf-8")
    with pytest.raises(SystemExit) as excinfo:
        main.main([str(project), "--snapshot", str(snapshot)])
    assert excinfo.value.code == 1


def test_invalid_log_level_exits(inputs):
    """An unknown log level exits with status 2."""
    project, snapshot = inputs
    with pytest.raises(SystemExit) as excinfo:
        main.main([str(project), "--snapshot", str(snapshot), "--log-level", "LOUD"])
    assert excinfo.value.code == 2


def test_snapshot_is_required(inputs):
    project, _ = inputs
    with pytest.raises(SystemExit) as excinfo:
        main.main([str(project)])
    assert excinfo.value.code == 2
