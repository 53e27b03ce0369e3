from __future__ import annotations

import logging

from apiscribe.domain.models import Parameter, ParameterIn
from apiscribe.params.tokens import TokenStream
from apiscribe.params.type_ref import parse_type_ref

logger = logging.getLogger(__name__)

_LOCATIONS = {m.value for m in ParameterIn}
_KEYWORDS = "path, query, header, cookie, deprecated, description"
_BOOLS = {"True": True, "true": True, "False": False, "false": False}


def parse_parameter(clause: str, strict: bool = True) -> Parameter:
    """Tokenize and parse one clause, see parse_parameter_tokens()."""
    return parse_parameter_tokens(TokenStream.from_text(clause), strict=strict)


def parse_parameter_tokens(stream: TokenStream, strict: bool = True) -> Parameter:
    """
    Parse a parameter clause:

        "id" = int, path, deprecated, description = "Users database id"
        "id", query

    The location defaults to path. `deprecated` alone means True.
    With strict=False two attributes may follow each other without a comma.
    Raises ClauseSyntaxError on the first problem found.
    """
    name_tok = stream.current()
    name = name_tok.string_value() if name_tok is not None else None
    if name is None:
        raise stream.error("unparseable parameter name, expected literal string")
    if not name:
        raise stream.error("parameter name must not be empty", token=name_tok)
    stream.next()

    parameter = Parameter(name=name)

    if stream.peek_op("="):
        stream.next()
        parameter.parameter_type = parse_type_ref(stream)

    stream.expect_op(",", "expected comma after literal string")

    while True:
        ident = stream.expect_name("unparseable Parameter, expected identifier")
        keyword = ident.text

        if keyword in _LOCATIONS:
            parameter.parameter_in = ParameterIn.parse(keyword)
        elif keyword == "deprecated":
            parameter.deprecated = _parse_bool_or_true(stream)
        elif keyword == "description":
            stream.expect_op("=", "expected '=' after description")
            parameter.description = stream.expect_string(
                "unparseable description, expected literal string"
            )
        else:
            raise stream.error(
                f"unexpected identifier: {keyword}, expected any of: {_KEYWORDS}",
                token=ident,
            )

        if stream.peek_op(","):
            stream.next()
        elif strict and not stream.is_empty():
            raise stream.error("expected comma between attributes")

        if stream.is_empty():
            break

    logger.debug("Parsed parameter clause %r -> %r", stream.clause, parameter)
    return parameter


def _parse_bool_or_true(stream: TokenStream) -> bool:
    if not stream.peek_op("="):
        return True
    stream.next()
    tok = stream.expect_name("unparseable deprecated, expected boolean literal")
    if tok.text not in _BOOLS:
        raise stream.error("unparseable deprecated, expected boolean literal", token=tok)
    return _BOOLS[tok.text]
