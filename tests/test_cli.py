from typer.testing import CliRunner

from apiscribe.cli import app

runner = CliRunner()

APP = '''
@doc("List users.")
@doc("")
@doc("Paged.")
@param('"limit" = int, query, description = "Page size"')
@app.get("/users")
def list_users(limit: int = 10):
    return []
'''


def test_param_command_prints_openapi():
    result = runner.invoke(app, ["param", '"id" = int, query, deprecated'])
    assert result.exit_code == 0, result.output
    assert '"in": "query"' in result.output
    assert '"deprecated": true' in result.output
    assert "Parameter.new('id')" in result.output


def test_param_command_reports_syntax_error():
    result = runner.invoke(app, ["param", '"id", bogus'])
    assert result.exit_code == 1
    assert "unexpected identifier: bogus" in result.output


def test_param_command_lenient():
    result = runner.invoke(app, ["param", '"id", query deprecated', "--lenient"])
    assert result.exit_code == 0, result.output


def test_extract_json(tmp_path):
    (tmp_path / "api.py").write_text(APP, encoding="utf-8")

    result = runner.invoke(app, ["extract", str(tmp_path), "--format", "json"])
    assert result.exit_code == 0, result.output
    assert '"handler": "list_users"' in result.output
    assert '"method": "GET"' in result.output
    assert '"name": "limit"' in result.output


def test_extract_table(tmp_path):
    (tmp_path / "api.py").write_text(APP, encoding="utf-8")

    result = runner.invoke(app, ["extract", str(tmp_path)])
    assert result.exit_code == 0, result.output
    assert "list_users" in result.output
    assert "Annotated files: 1" in result.output


def test_extract_rejects_unknown_format(tmp_path):
    result = runner.invoke(app, ["extract", str(tmp_path), "--format", "xml"])
    assert result.exit_code != 0


def test_docs_command(tmp_path):
    f = tmp_path / "api.py"
    f.write_text(APP, encoding="utf-8")

    result = runner.invoke(app, ["docs", str(f), "list_users"])
    assert result.exit_code == 0, result.output
    assert "List users.\n\nPaged." in result.output


def test_docs_command_unknown_handler(tmp_path):
    f = tmp_path / "api.py"
    f.write_text(APP, encoding="utf-8")

    result = runner.invoke(app, ["docs", str(f), "nope"])
    assert result.exit_code == 1


def test_extract_reports_clause_error_location(tmp_path):
    (tmp_path / "api.py").write_text(
        "\n@param('\"id\", bogus')\ndef h():\n    pass\n", encoding="utf-8"
    )

    result = runner.invoke(app, ["extract", str(tmp_path)])
    assert result.exit_code == 1
    assert "api.py:2:14: h: unexpected identifier: bogus" in result.output
