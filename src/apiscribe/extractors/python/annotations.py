from __future__ import annotations

import ast
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping, Optional

from apiscribe.config import ExtractSettings
from apiscribe.docs.extractor import extract_docs
from apiscribe.domain.errors import ClauseSyntaxError, Position
from apiscribe.domain.models import FileInclude, LiteralDoc, Parameter, ParameterIn, RawAnnotation
from apiscribe.params.parser import parse_parameter

logger = logging.getLogger(__name__)

_HTTP_METHOD_ATTRS = {
    "get": "GET",
    "post": "POST",
    "put": "PUT",
    "patch": "PATCH",
    "delete": "DELETE",
    "options": "OPTIONS",
    "head": "HEAD",
}
_PATH_PLACEHOLDER = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)(?::[^}]*)?\}")


@dataclass(frozen=True)
class AnnotatedHandler:
    """Raw annotations collected from one function definition."""

    handler_name: str
    line: int
    docs: tuple[RawAnnotation, ...] = ()
    clauses: tuple[tuple[str, Position], ...] = ()  # (clause text, file position of its first char)
    method: Optional[str] = None
    path: Optional[str] = None
    arg_types: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class OperationDoc:
    handler_name: str
    line: int
    description: str
    parameters: tuple[Parameter, ...]
    method: Optional[str] = None
    path: Optional[str] = None
    file_path: str = ""


def collect_annotations(source: str) -> list[AnnotatedHandler]:
    """
    Collect @doc / @param / route decorators of every function in source:

      @doc("Get user by id.")
      @doc(include_str(concat(env("PROJECT_ROOT"), "/docs/users.md")))
      @param('"id" = int, path, description = "Users database id"')
      @router.get("/users/{id}")
      def get_user(id: int): ...

    Uses ast only; does not import/execute code. Raises SyntaxError for
    unparsable source.
    """
    tree = ast.parse(source)
    out: list[AnnotatedHandler] = []

    for node in _iter_function_defs(tree):
        docs: list[RawAnnotation] = []
        clauses: list[tuple[str, Position]] = []
        method = path = None

        for dec in node.decorator_list:
            name = _decorator_name(dec)
            if name == "doc":
                entry = _doc_entry(dec, source)
                if entry is not None:
                    docs.append(entry)
                else:
                    logger.debug("Skipping non-textual @doc on %s line %s", node.name, dec.lineno)
            elif name == "param":
                clause = _first_str_arg(dec)
                if clause is None:
                    raise ClauseSyntaxError(
                        "@param expects the clause as a literal string",
                        start=(dec.lineno, dec.col_offset),
                    )
                clauses.append((clause, _string_origin(dec.args[0], source)))
            else:
                route = _parse_route_decorator(dec)
                if route is not None and method is None:
                    method, path = route

        if not docs and not clauses and method is None:
            continue

        out.append(
            AnnotatedHandler(
                handler_name=node.name,
                line=node.lineno,
                docs=tuple(docs),
                clauses=tuple(clauses),
                method=method,
                path=path,
                arg_types=_arg_types(node),
            )
        )

    out.sort(key=lambda h: (h.line, h.handler_name))
    return out


def build_operation(
    handler: AnnotatedHandler,
    settings: Optional[ExtractSettings] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> OperationDoc:
    settings = settings or ExtractSettings()
    description = extract_docs(handler.docs, settings=settings, environ=environ)

    parameters: list[Parameter] = []
    for clause, origin in handler.clauses:
        try:
            parameter = parse_parameter(clause, strict=settings.strict_clauses)
        except ClauseSyntaxError as exc:
            raise exc.relocated(
                message=f"{handler.handler_name}: {exc.message}",
                start=_file_position(exc.start, origin),
                end=_file_position(exc.end, origin),
            ) from exc
        if parameter.parameter_type is None and parameter.name in handler.arg_types:
            parameter.update_parameter_type(handler.arg_types[parameter.name])
        parameters.append(parameter)

    # path placeholders with no explicit clause, typed from the signature
    declared = {p.name for p in parameters}
    for name in _path_placeholders(handler.path):
        if name not in declared and name in handler.arg_types:
            parameters.append(Parameter.new(name, handler.arg_types[name], ParameterIn.PATH))

    return OperationDoc(
        handler_name=handler.handler_name,
        line=handler.line,
        description=description.as_formatted_string(),
        parameters=tuple(parameters),
        method=handler.method,
        path=handler.path,
    )


def extract_operations_from_source(
    source: str,
    settings: Optional[ExtractSettings] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> list[OperationDoc]:
    return [build_operation(h, settings, environ) for h in collect_annotations(source)]


def extract_operations_from_file(
    path: Path,
    settings: Optional[ExtractSettings] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> list[OperationDoc]:
    settings = settings or ExtractSettings()
    source = path.read_text(encoding=settings.encoding)
    try:
        ops = extract_operations_from_source(source, settings, environ)
    except ClauseSyntaxError as exc:
        raise exc.relocated(path=str(path)) from exc
    abs_path = str(path.resolve())
    return [OperationDoc(**{**op.__dict__, "file_path": abs_path}) for op in ops]


def _iter_function_defs(tree: ast.AST) -> Iterable[ast.AST]:
    for node in ast.walk(tree):
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            yield node


def _decorator_name(dec: ast.AST) -> Optional[str]:
    # @doc(...), @doc, @api.doc(...)
    target = dec.func if isinstance(dec, ast.Call) else dec
    if isinstance(target, ast.Name):
        return target.id
    if isinstance(target, ast.Attribute):
        return target.attr
    return None


def _doc_entry(dec: ast.AST, source: str) -> Optional[RawAnnotation]:
    if not isinstance(dec, ast.Call) or len(dec.args) != 1:
        return None

    arg = dec.args[0]
    if isinstance(arg, ast.Constant) and isinstance(arg.value, str):
        return LiteralDoc(arg.value)

    if isinstance(arg, ast.Call) and _decorator_name(arg) == "include_str" and len(arg.args) == 1:
        expr = ast.get_source_segment(source, arg.args[0])
        if expr:
            return FileInclude(expr)
    return None


def _first_str_arg(dec: ast.AST) -> Optional[str]:
    if not isinstance(dec, ast.Call) or not dec.args:
        return None
    arg = dec.args[0]
    if isinstance(arg, ast.Constant) and isinstance(arg.value, str):
        return arg.value
    return None


def _parse_route_decorator(dec: ast.AST) -> Optional[tuple[str, str]]:
    """
    Recognize @<anything>.<method>(<path>, ...) with a constant path,
    positional or as path="...". Returns (METHOD, path) or None.
    """
    if not isinstance(dec, ast.Call) or not isinstance(dec.func, ast.Attribute):
        return None

    method = _HTTP_METHOD_ATTRS.get(dec.func.attr)
    if method is None:
        return None

    path_node = dec.args[0] if dec.args else None
    if path_node is None:
        for kw in dec.keywords or []:
            if kw.arg == "path":
                path_node = kw.value
                break

    if isinstance(path_node, ast.Constant) and isinstance(path_node.value, str):
        return method, path_node.value.strip()
    return None


def _arg_types(node: ast.AST) -> dict[str, str]:
    out: dict[str, str] = {}
    args = node.args
    for arg in [*args.posonlyargs, *args.args, *args.kwonlyargs]:
        ann = arg.annotation
        if isinstance(ann, (ast.Name, ast.Attribute)):
            out[arg.arg] = ast.unparse(ann)
    return out


def _path_placeholders(path: Optional[str]) -> list[str]:
    if not path:
        return []
    return _PATH_PLACEHOLDER.findall(path)


_STRING_OPENING = re.compile(r"[rRuU]*('''|\"\"\"|'|\")")


def _string_origin(node: ast.AST, source: str) -> Position:
    """File position (line, char column) of the first character inside a string literal."""
    line_text = source.split("\n")[node.lineno - 1]
    # ast columns are utf-8 byte offsets
    col = len(line_text.encode("utf-8")[: node.col_offset].decode("utf-8", errors="ignore"))
    opening = _STRING_OPENING.match(line_text, col)
    return node.lineno, col + (len(opening.group(0)) if opening else 0)


def _file_position(pos: Optional[Position], origin: Position) -> Position:
    # clause positions are relative to the literal's contents; only line 1 is shifted
    if pos is None:
        return origin
    line, col = pos
    if line == 1:
        return origin[0], origin[1] + col
    return origin[0] + line - 1, col
