from apiscribe.config import ExtractSettings


def test_defaults():
    s = ExtractSettings.from_env({})
    assert s.project_root_var == "PROJECT_ROOT"
    assert s.encoding == "utf-8"
    assert s.strict_clauses is True


def test_from_env_overrides():
    s = ExtractSettings.from_env(
        {
            "APISCRIBE_PROJECT_ROOT_VAR": "DOCS_HOME",
            "APISCRIBE_ENCODING": "latin-1",
            "APISCRIBE_STRICT_CLAUSES": "no",
        }
    )
    assert s.project_root_var == "DOCS_HOME"
    assert s.encoding == "latin-1"
    assert s.strict_clauses is False
