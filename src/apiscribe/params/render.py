from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from apiscribe.domain.models import Parameter, ParameterIn, TypeRef

_PRIMITIVES: dict[str, dict[str, str]] = {
    "str": {"type": "string"},
    "String": {"type": "string"},
    "string": {"type": "string"},
    "char": {"type": "string"},
    "int": {"type": "integer"},
    "i8": {"type": "integer", "format": "int32"},
    "i16": {"type": "integer", "format": "int32"},
    "i32": {"type": "integer", "format": "int32"},
    "i64": {"type": "integer", "format": "int64"},
    "u8": {"type": "integer", "format": "int32"},
    "u16": {"type": "integer", "format": "int32"},
    "u32": {"type": "integer", "format": "int32"},
    "u64": {"type": "integer", "format": "int64"},
    "float": {"type": "number", "format": "double"},
    "f32": {"type": "number", "format": "float"},
    "f64": {"type": "number", "format": "double"},
    "Decimal": {"type": "number"},
    "bool": {"type": "boolean"},
    "bytes": {"type": "string", "format": "binary"},
    "datetime": {"type": "string", "format": "date-time"},
    "date": {"type": "string", "format": "date"},
    "UUID": {"type": "string", "format": "uuid"},
    "Uuid": {"type": "string", "format": "uuid"},
}


@dataclass(frozen=True)
class BuilderCall:
    method: str
    args: tuple[Any, ...] = ()


def schema_for(type_ref: TypeRef) -> dict[str, Any]:
    # dotted names resolve by their last segment: datetime.date -> date
    short = type_ref.ty.rsplit(".", 1)[-1]
    if short in _PRIMITIVES:
        item: dict[str, Any] = dict(_PRIMITIVES[short])
    else:
        item = {"$ref": f"#/components/schemas/{short}"}

    if type_ref.is_array:
        return {"type": "array", "items": item}
    return item


def render_builder_calls(parameter: Parameter) -> list[BuilderCall]:
    calls = [
        BuilderCall("new", (parameter.name,)),
        BuilderCall("with_in", (parameter.parameter_in,)),
        BuilderCall("with_deprecated", (parameter.deprecated,)),
    ]
    if parameter.description is not None:
        calls.append(BuilderCall("with_description", (parameter.description,)))

    if parameter.parameter_type is not None:
        calls.append(BuilderCall("with_schema", (schema_for(parameter.parameter_type),)))
        calls.append(BuilderCall("with_required", (not parameter.parameter_type.is_option,)))
    return calls


def render_builder_source(parameter: Parameter) -> str:
    """Render as a call chain, e.g. Parameter.new('id').with_in(ParameterIn.PATH)..."""
    out = []
    for call in render_builder_calls(parameter):
        args = ", ".join(_source_arg(a) for a in call.args)
        out.append(f"{call.method}({args})")
    return "Parameter." + ".".join(out)


def _source_arg(value: Any) -> str:
    if isinstance(value, ParameterIn):
        return f"ParameterIn.{value.name}"
    return repr(value)


def to_openapi(parameter: Parameter) -> dict[str, Any]:
    """OpenAPI 3 parameter object built from the same calls as the builder chain."""
    keys = {
        "new": "name",
        "with_in": "in",
        "with_deprecated": "deprecated",
        "with_description": "description",
        "with_schema": "schema",
        "with_required": "required",
    }
    out: dict[str, Any] = {}
    for call in render_builder_calls(parameter):
        value = call.args[0]
        out[keys[call.method]] = value.value if isinstance(value, ParameterIn) else value
    return out
