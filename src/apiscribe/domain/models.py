from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional, Union

from pydantic import BaseModel, ConfigDict


class ParameterIn(str, Enum):
    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    COOKIE = "cookie"

    @classmethod
    def parse(cls, text: str) -> "ParameterIn":
        try:
            return cls(text)
        except ValueError:
            accepted = ", ".join(m.value for m in cls)
            raise ValueError(f"unexpected str: {text}, expected one of: {accepted}") from None


class TypeRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    ty: str
    is_array: bool = False
    is_option: bool = False


class Parameter(BaseModel):
    """
    Request parameter described by a single clause, e.g.

        "id" = int, path, deprecated, description = "Users database id"

    The `= int` part is optional; the type may be filled in later through
    update_parameter_type() when it is inferred from the handler signature.
    """

    name: str
    parameter_in: ParameterIn = ParameterIn.PATH
    deprecated: bool = False
    description: Optional[str] = None
    parameter_type: Optional[TypeRef] = None

    @classmethod
    def new(cls, name: str, type_ident: str, parameter_in: ParameterIn) -> "Parameter":
        return cls(name=name, parameter_type=TypeRef(ty=type_ident), parameter_in=parameter_in)

    def update_parameter_type(self, type_ident: str) -> None:
        self.parameter_type = TypeRef(ty=type_ident)


@dataclass(frozen=True)
class LiteralDoc:
    text: str


@dataclass(frozen=True)
class FileInclude:
    path_expression: str  # source text of the include_str(...) argument


RawAnnotation = Union[LiteralDoc, FileInclude]


@dataclass(frozen=True)
class CommentAttributes:
    """Resolved doc lines of one declaration, indentation already normalized."""

    lines: tuple[str, ...] = ()

    def is_empty(self) -> bool:
        return not self.lines

    def as_formatted_string(self) -> str:
        return "\n".join(self.lines)

    def __iter__(self) -> Iterator[str]:
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self.lines)
