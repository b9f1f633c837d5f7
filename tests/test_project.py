from pathlib import Path

import pytest

from sdk_convert.core.project import (
    Import,
    InconsistentStateError,
    Item,
    ItemGroup,
    ProjectRoot,
    Property,
    PropertyGroup,
)


def test_item_rejects_include_and_update():
    """An item cannot declare both an include and an update path."""
    with pytest.raises(InconsistentStateError):
        Item("Compile", "A.cs", update="A.cs")


def test_item_setters_keep_paths_exclusive():
    """Setting the other path on an existing item is refused."""
    item = Item("Compile", "A.cs")
    with pytest.raises(InconsistentStateError):
        item.update = "A.cs"

    updated = Item("Compile", update="B.cs")
    with pytest.raises(InconsistentStateError):
        updated.include = "B.cs"


def test_convert_to_update_moves_path():
    """Converting to an update keeps the path and drops the include."""
    item = Item("Compile", "Generated.cs", metadata={"AutoGen": "True"})
    item.convert_to_update()
    assert item.include is None
    assert item.update == "Generated.cs"
    assert item.get_metadata("autogen") == "True"


def test_convert_to_update_without_include_raises():
    """An update-only item has nothing to convert."""
    item = Item("Compile", update="A.cs")
    with pytest.raises(InconsistentStateError):
        item.convert_to_update()


def test_metadata_keys_are_case_insensitive():
    """Setting a differently cased key replaces the existing entry."""
    item = Item("Reference", "Foo", metadata=[("HintPath", "a.dll")])
    item.set_metadata("hintpath", "b.dll")
    assert item.metadata == {"hintpath": "b.dll"}
    assert item.get_metadata("HINTPATH") == "b.dll"
    assert item.get_metadata("Private") is None


def test_property_cannot_belong_to_two_groups():
    """Adopting an owned property raises."""
    prop = Property("LangVersion", "7.3")
    PropertyGroup().append(prop)
    with pytest.raises(InconsistentStateError):
        PropertyGroup().append(prop)


def test_item_cannot_belong_to_two_groups():
    """Adopting an owned item raises."""
    group = ItemGroup()
    item = group.add_item("Compile", "A.cs")
    with pytest.raises(InconsistentStateError):
        ItemGroup().append(item)


def test_removal_while_iterating_snapshot():
    """Removing every property while iterating leaves the group empty."""
    group = PropertyGroup()
    for name in ("A", "B", "C"):
        group.append(Property(name, "1"))
    for prop in group.properties:
        group.remove(prop)
        assert prop.parent is None
    assert len(group) == 0


def test_prepend_and_find():
    """Prepended properties come first; lookup ignores case."""
    group = PropertyGroup()
    group.append(Property("OutputType", "Exe"))
    group.prepend(Property("TargetFramework", "net472"))
    assert [p.name for p in group.properties] == ["TargetFramework", "OutputType"]
    assert group.find("targetframework").value == "net472"
    assert group.find("Missing") is None


def test_add_property_group_placement():
    """New property groups go after the last one, or first when asked."""
    root = ProjectRoot()
    root.append_child(Import("a.props"))
    existing = root.append_child(PropertyGroup())
    root.append_child(ItemGroup())

    added = root.add_property_group()
    assert root.children.index(added) == root.children.index(existing) + 1

    first = root.add_property_group(first=True)
    assert root.children[0] is first


def test_add_item_group_placement():
    """New item groups follow item groups, else property groups, else append."""
    empty = ProjectRoot()
    group = empty.add_item_group()
    assert empty.children == [group]

    root = ProjectRoot()
    props = root.append_child(PropertyGroup())
    root.append_child(Import("a.targets"))
    added = root.add_item_group()
    assert root.children.index(added) == root.children.index(props) + 1

    later = root.add_item_group()
    assert root.children.index(later) == root.children.index(added) + 1


def test_project_name_and_directory_accept_backslashes():
    """Windows style paths resolve to a usable directory and stem."""
    root = ProjectRoot("C:\\src\\App\\App.csproj")
    assert root.project_name == "App"
    assert root.directory_path == Path("C:/src/App")


def test_iter_items_walks_every_group():
    """Items are yielded across groups in document order."""
    root = ProjectRoot()
    first = root.append_child(ItemGroup())
    second = root.append_child(ItemGroup())
    first.add_item("Compile", "A.cs")
    second.add_item("None", "B.txt")
    assert [i.include for i in root.iter_items()] == ["A.cs", "B.txt"]
