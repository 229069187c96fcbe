import pytest

from common.errors import FormatError, WorkspaceNotFoundError
from workspace.files import (
    WORKSPACE_FILE_NAME,
    find_workspace_file,
    load_workspace,
    load_workspace_from_dir,
    save_workspace,
)
from workspace.models import ToolEntry, WorkspaceDescriptor


def test_save_and_load(tmp_path):
    ws = WorkspaceDescriptor(organization_path="./acme-organization-workspace")
    ws.add_product("./products-workspace/alpha-workspace")
    ws.add_tool(ToolEntry(name="example-tool", mode="binary", path="bin/example-tool", version="latest"))
    target = tmp_path / "nested" / WORKSPACE_FILE_NAME

    saved = save_workspace(ws, target)
    assert saved == target.resolve()
    assert ws.source_path == target.resolve()
    assert target.read_text(encoding="utf-8").startswith("nimsforest 1.0\n")

    loaded = load_workspace(target)
    assert loaded == ws
    assert loaded is not ws


def test_loaded_copies_are_independent(tmp_path):
    target = tmp_path / WORKSPACE_FILE_NAME
    target.write_text("nimsforest 1.0\n")
    first, second = load_workspace(target), load_workspace(target)
    first.add_product("./p")
    assert second.products == []


def test_save_defaults_to_source_path(tmp_path):
    target = tmp_path / WORKSPACE_FILE_NAME
    target.write_text("nimsforest 1.0\n")
    ws = load_workspace(target)
    ws.add_product("./p")
    save_workspace(ws)
    assert load_workspace(target).products == ["./p"]


def test_save_without_target_fails():
    with pytest.raises(WorkspaceNotFoundError):
        save_workspace(WorkspaceDescriptor())


def test_load_missing_file(tmp_path):
    with pytest.raises(WorkspaceNotFoundError, match="does not exist"):
        load_workspace(tmp_path / WORKSPACE_FILE_NAME)


def test_load_invalid_file(tmp_path):
    target = tmp_path / WORKSPACE_FILE_NAME
    target.write_text("nimsforest 1.0\nproducts (\n    ./a\n")
    with pytest.raises(FormatError):
        load_workspace(target)


def test_find_walks_up(tmp_path):
    target = tmp_path / WORKSPACE_FILE_NAME
    target.write_text("nimsforest 1.0\n")
    deep = tmp_path / "a" / "b" / "c"
    deep.mkdir(parents=True)
    assert find_workspace_file(deep) == target.resolve()
    assert load_workspace_from_dir(deep).source_path == target.resolve()


def test_find_defaults_to_cwd(tmp_path, monkeypatch):
    target = tmp_path / WORKSPACE_FILE_NAME
    target.write_text("nimsforest 1.0\n")
    monkeypatch.chdir(tmp_path)
    assert find_workspace_file() == target.resolve()


def test_find_nothing(tmp_path):
    with pytest.raises(WorkspaceNotFoundError, match="workspace file not found"):
        find_workspace_file(tmp_path)
