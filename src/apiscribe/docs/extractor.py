from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional

from apiscribe.config import ExtractSettings
from apiscribe.docs.include import resolve_include
from apiscribe.domain.models import CommentAttributes, FileInclude, LiteralDoc

logger = logging.getLogger(__name__)


def extract_docs(
    raw_annotations: Iterable[object],
    settings: Optional[ExtractSettings] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> CommentAttributes:
    """
    Resolve doc annotations of one declaration into CommentAttributes.

    Literal lines lose trailing whitespace only. Includes are replaced by the
    file contents. Afterwards the smallest leading-space indent of the
    non-empty entries is removed from every non-empty entry.

    Entries that are neither LiteralDoc nor FileInclude are dropped.
    Unreadable includes and a missing project root variable raise.
    """
    settings = settings or ExtractSettings()

    docs: list[str] = []
    for entry in raw_annotations:
        if isinstance(entry, LiteralDoc):
            docs.append(entry.text.rstrip())
        elif isinstance(entry, FileInclude):
            docs.append(
                resolve_include(
                    entry.path_expression,
                    project_root_var=settings.project_root_var,
                    encoding=settings.encoding,
                    environ=environ,
                )
            )
        else:
            logger.debug("Dropping non-textual doc annotation: %r", entry)

    min_indent = min(
        (len(line) - len(line.lstrip(" ")) for line in docs if line),
        default=0,
    )

    return CommentAttributes(tuple(line[min_indent:] if line else line for line in docs))
