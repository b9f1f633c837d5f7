import pytest

from sdk_convert.core.project import Import, ItemGroup, PropertyGroup, RawNode
from sdk_convert.core.serialization import (
    ProjectLoadError,
    load_project,
    parse_project,
    save_project,
    serialize_project,
)

LEGACY = """<?xml version="1.0" encoding="utf-8"?>
<Project ToolsVersion="15.0" DefaultTargets="Build" xmlns="http://schemas.microsoft.com/developer/msbuild/2003">
  <!-- generated -->
  <Import Project="$(MSBuildExtensionsPath)\\$(MSBuildToolsVersion)\\Microsoft.Common.props" Condition="Exists('x')" />
  <PropertyGroup>
    <OutputType>Exe</OutputType>
    <Configuration Condition=" '$(Configuration)' == '' ">Debug</Configuration>
  </PropertyGroup>
  <PropertyGroup Condition=" '$(Configuration)|$(Platform)' == 'Debug|AnyCPU' " Label="Debug">
    <DebugType>full</DebugType>
  </PropertyGroup>
  <ItemGroup>
    <Compile Include="Program.cs">
      <SubType>Code</SubType>
    </Compile>
    <PackageReference Include="Newtonsoft.Json" Version="12.0.1" />
  </ItemGroup>
  <Target Name="AfterBuild">
    <Message Text="done" />
  </Target>
</Project>
"""


def test_parse_project_structure():
    """Children are parsed in order with namespaces stripped."""
    root = parse_project(LEGACY, "App.csproj")
    kinds = [type(node) for node in root.children]
    assert kinds == [RawNode, Import, PropertyGroup, PropertyGroup, ItemGroup, RawNode]
    assert root.tools_version == "15.0"
    assert root.default_targets == "Build"
    assert root.sdk is None

    top, debug = root.property_groups
    assert top.is_unconditioned
    assert top.find("Configuration").condition == " '$(Configuration)' == '' "
    assert debug.label == "Debug"
    assert debug.find("DebugType").value == "full"

    assert root.imports[0].condition == "Exists('x')"
    assert root.raw_nodes[0].tag is None
    assert root.raw_nodes[1].tag == "Target"


def test_item_metadata_from_children_and_attributes():
    """Metadata comes from child elements and non-reserved attributes."""
    compile_item, package = parse_project(LEGACY).item_groups[0].items
    assert compile_item.include == "Program.cs"
    assert compile_item.metadata == {"SubType": "Code"}
    assert package.metadata == {"Version": "12.0.1"}


@pytest.mark.parametrize("xml", ["<Project><PropertyGroup>", "<Solution />"])
def test_parse_rejects_invalid_documents(xml):
    with pytest.raises(ProjectLoadError):
        parse_project(xml, "broken.csproj")


def test_load_missing_project(tmp_path):
    with pytest.raises(ProjectLoadError):
        load_project(tmp_path / "Missing.csproj")


def test_serialize_project_is_namespace_free():
    """Output drops the legacy namespace and keeps untouched nodes."""
    text = serialize_project(parse_project(LEGACY))
    assert "xmlns" not in text
    assert text.startswith('<Project ToolsVersion="15.0" DefaultTargets="Build">\n')
    assert "  <!-- generated -->\n" in text
    assert '  <Target Name="AfterBuild">\n    <Message Text="done"/>\n' in text
    assert "    <Compile Include=\"Program.cs\">\n      <SubType>Code</SubType>\n" in text
    assert text.endswith("</Project>\n")


def test_save_and_load_round_trip(tmp_path):
    """A saved tree loads back with the same shape."""
    path = tmp_path / "out" / "App.csproj"
    original = parse_project(LEGACY)
    original.sdk = "Microsoft.NET.Sdk"
    save_project(original, path)

    loaded = load_project(path)
    assert loaded.sdk == "Microsoft.NET.Sdk"
    assert loaded.project_name == "App"
    assert serialize_project(loaded) == serialize_project(original)
