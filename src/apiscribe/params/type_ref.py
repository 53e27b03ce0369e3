from __future__ import annotations

from apiscribe.domain.models import TypeRef
from apiscribe.params.tokens import TokenStream

TYPE_ERROR = "unparseable parameter type, expected: identifier or identifier within brackets"

_ARRAY_WRAPPERS = {"list", "List"}
_OPTION_WRAPPERS = {"Optional"}


def parse_type_ref(stream: TokenStream) -> TypeRef:
    """
    Parse a type reference:

        int | users.UserId | [int] | list[int] | Optional[int] | Optional[[int]]
    """
    if stream.peek("name") and stream.current().text in _OPTION_WRAPPERS:
        stream.next()
        stream.expect_op("[", TYPE_ERROR)
        ty, is_array = _parse_inner(stream)
        stream.expect_op("]", TYPE_ERROR)
        return TypeRef(ty=ty, is_array=is_array, is_option=True)

    ty, is_array = _parse_inner(stream)
    return TypeRef(ty=ty, is_array=is_array)


def _parse_inner(stream: TokenStream) -> tuple[str, bool]:
    if stream.peek_op("["):
        stream.next()
        ty = _parse_dotted(stream)
        stream.expect_op("]", TYPE_ERROR)
        return ty, True

    ty = _parse_dotted(stream)
    if ty in _ARRAY_WRAPPERS and stream.peek_op("["):
        stream.next()
        ty = _parse_dotted(stream)
        stream.expect_op("]", TYPE_ERROR)
        return ty, True
    return ty, False


def _parse_dotted(stream: TokenStream) -> str:
    parts = [stream.expect_name(TYPE_ERROR).text]
    while stream.peek_op("."):
        stream.next()
        parts.append(stream.expect_name(TYPE_ERROR).text)
    return ".".join(parts)
