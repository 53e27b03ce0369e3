import pytest

from apiscribe.domain.errors import ClauseSyntaxError
from apiscribe.domain.models import FileInclude, LiteralDoc, ParameterIn, TypeRef
from apiscribe.extractors.python.annotations import (
    collect_annotations,
    extract_operations_from_file,
    extract_operations_from_source,
)

SRC = '''
from fastapi import APIRouter
from apidocs import doc, param

router = APIRouter()

@doc("    Get a user.")
@doc("")
@doc("      Returns 404 when missing.   ")
@param('"id", path, description = "Users database id"')
@param('"verbose" = bool, query, deprecated')
@router.get("/users/{id}")
def get_user(id: int, verbose: bool = False):
    return {}

@router.get("/items/{item_id}")
async def read_item(item_id: str):
    return {}

def helper():
    pass
'''


def test_operation_from_doc_and_param_decorators():
    ops = extract_operations_from_source(SRC)
    assert [op.handler_name for op in ops] == ["get_user", "read_item"]

    op = ops[0]
    assert op.method == "GET"
    assert op.path == "/users/{id}"
    assert op.description == "Get a user.\n\n  Returns 404 when missing."

    id_param, verbose_param = op.parameters
    assert id_param.name == "id"
    assert id_param.parameter_in == ParameterIn.PATH
    assert id_param.description == "Users database id"
    # type filled in from the signature
    assert id_param.parameter_type == TypeRef(ty="int")

    assert verbose_param.parameter_in == ParameterIn.QUERY
    assert verbose_param.deprecated is True
    assert verbose_param.parameter_type == TypeRef(ty="bool")


def test_path_placeholder_without_clause_is_inferred():
    ops = extract_operations_from_source(SRC)
    op = ops[1]
    assert op.description == ""
    assert len(op.parameters) == 1
    p = op.parameters[0]
    assert p.name == "item_id"
    assert p.parameter_in == ParameterIn.PATH
    assert p.parameter_type == TypeRef(ty="str")


def test_non_textual_doc_forms_are_skipped():
    src = '''
@doc
@doc(hidden=True)
@doc(SOME_CONSTANT)
@doc("kept")
def handler():
    pass
'''
    handlers = collect_annotations(src)
    assert len(handlers) == 1
    assert handlers[0].docs == (LiteralDoc("kept"),)


def test_include_str_becomes_file_include(tmp_path):
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "users.md").write_text("List users.", encoding="utf-8")
    src = '''
@doc(include_str(concat(env("PROJECT_ROOT"), "/docs/users.md")))
def list_users():
    pass
'''
    handlers = collect_annotations(src)
    assert handlers[0].docs == (FileInclude('concat(env("PROJECT_ROOT"), "/docs/users.md")'),)

    ops = extract_operations_from_source(src, environ={"PROJECT_ROOT": str(tmp_path)})
    assert ops[0].description == "List users."


def test_bad_clause_reports_handler():
    src = '''
@param('"id", bogus')
def get_user(id: int):
    pass
'''
    with pytest.raises(ClauseSyntaxError) as info:
        extract_operations_from_source(src)
    # @param(' puts the clause contents at column 8 of line 2
    assert info.value.start == (2, 14)
    assert str(info.value).startswith("2:14: get_user: unexpected identifier: bogus")
    assert info.value.clause == '"id", bogus'


def test_param_requires_string_clause():
    src = '''
@param(CLAUSE)
def get_user():
    pass
'''
    with pytest.raises(ClauseSyntaxError, match="literal string"):
        collect_annotations(src)


def test_invalid_python_raises_syntax_error():
    with pytest.raises(SyntaxError):
        collect_annotations("def broken(:\n")


def test_extract_from_file_sets_file_path(tmp_path):
    f = tmp_path / "api.py"
    f.write_text(SRC, encoding="utf-8")

    ops = extract_operations_from_file(f)
    assert len(ops) == 2
    assert all(op.file_path == str(f.resolve()) for op in ops)


def test_triple_quoted_clause_over_several_lines():
    src = '''
@param("""
    "id" = int,
        query,
    description = "Users database id"
""")
def get_user(id):
    pass
'''
    p = extract_operations_from_source(src)[0].parameters[0]
    assert p.name == "id"
    assert p.parameter_in == ParameterIn.QUERY
    assert p.description == "Users database id"
    assert p.parameter_type == TypeRef(ty="int")


def test_error_in_multiline_clause_points_at_file_line():
    src = '''
@param("""
    "id",
      bogus
""")
def get_user(id):
    pass
'''
    with pytest.raises(ClauseSyntaxError) as info:
        extract_operations_from_source(src)
    assert info.value.start == (4, 6)
    assert info.value.end == (4, 11)


def test_file_errors_carry_the_path(tmp_path):
    f = tmp_path / "api.py"
    f.write_text("@param('\"id\", bogus')\ndef h():\n    pass\n", encoding="utf-8")

    with pytest.raises(ClauseSyntaxError) as info:
        extract_operations_from_file(f)
    assert info.value.path == str(f)
    assert str(info.value).startswith(f"{f}:1:14: h: unexpected identifier: bogus")
