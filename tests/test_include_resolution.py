import pytest

from apiscribe.docs.include import resolve_include
from apiscribe.domain.errors import ConfigError, IncludeReadError


def test_direct_path_with_quotes(tmp_path):
    f = tmp_path / "a.md"
    f.write_text("hello", encoding="utf-8")

    assert resolve_include(f'"{f}"') == "hello"
    assert resolve_include(f"  '{f}' ") == "hello"


def test_project_root_relative(tmp_path):
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "concat.md").write_text("root relative", encoding="utf-8")
    env = {"PROJECT_ROOT": str(tmp_path)}

    assert resolve_include('concat(env("PROJECT_ROOT"), "/docs/concat.md")', environ=env) == "root relative"
    assert resolve_include("concat(env('PROJECT_ROOT'), 'docs/concat.md')", environ=env) == "root relative"


def test_project_root_from_process_env(tmp_path, monkeypatch):
    (tmp_path / "x.txt").write_text("from env", encoding="utf-8")
    monkeypatch.setenv("PROJECT_ROOT", str(tmp_path))

    assert resolve_include('concat(env("PROJECT_ROOT"), "/x.txt")') == "from env"


def test_custom_project_root_var(tmp_path):
    (tmp_path / "x.txt").write_text("custom", encoding="utf-8")

    text = resolve_include(
        'concat(env("DOCS_HOME"), "/x.txt")',
        project_root_var="DOCS_HOME",
        environ={"DOCS_HOME": str(tmp_path)},
    )
    assert text == "custom"


def test_missing_project_root_var_is_config_error():
    with pytest.raises(ConfigError, match="PROJECT_ROOT not found in environment"):
        resolve_include('concat(env("PROJECT_ROOT"), "/x.txt")', environ={})


def test_unreadable_file_is_include_read_error(tmp_path):
    missing = tmp_path / "nope.md"

    with pytest.raises(IncludeReadError) as info:
        resolve_include(f'"{missing}"')

    assert isinstance(info.value, OSError)
    assert info.value.path == str(missing)
    assert "Failed to read include_str file" in str(info.value)
