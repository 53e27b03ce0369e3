from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from apiscribe.config import ExtractSettings
from apiscribe.domain.errors import ApiscribeError, ClauseSyntaxError
from apiscribe.extractors.python.annotations import OperationDoc, extract_operations_from_file
from apiscribe.repo.scanner import scan_python_files, select_annotated_files

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtractResult:
    root: str
    files_scanned: int
    candidate_files: list[str]
    operations: list[OperationDoc]
    skipped_files: list[str]  # candidates that are not valid Python


def run_extract(
    root: Path,
    settings: Optional[ExtractSettings] = None,
    max_files: int | None = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ExtractResult:
    """
    Extract documented operations from every annotated .py file under root.

    The first ApiscribeError aborts the whole pass; it is re-raised with the
    offending file prefixed to the message.
    """
    settings = settings or ExtractSettings()
    root = root.resolve()
    base = root.parent if root.is_file() else root

    py_files = scan_python_files(root, max_files=max_files)
    candidates = select_annotated_files(py_files)
    logger.debug("Scanned %d files, %d candidates", len(py_files), len(candidates))

    operations: list[OperationDoc] = []
    skipped: list[str] = []

    for p in candidates:
        fpath = Path(p)
        rel_path = os.path.relpath(str(fpath), str(base))
        try:
            ops = extract_operations_from_file(fpath, settings=settings, environ=environ)
        except (SyntaxError, UnicodeDecodeError) as exc:
            logger.warning("Skipping %s: not valid Python (%s)", rel_path, exc)
            skipped.append(rel_path)
            continue
        except ClauseSyntaxError as exc:
            raise exc.relocated(path=rel_path) from exc
        except ApiscribeError as exc:
            logger.error("Extraction aborted in %s: %s", rel_path, exc)
            raise

        logger.debug("%s: %d operations", rel_path, len(ops))
        operations.extend(ops)

    operations.sort(key=lambda op: (op.file_path, op.line, op.handler_name))

    return ExtractResult(
        root=str(root),
        files_scanned=len(py_files),
        candidate_files=[os.path.relpath(p, str(base)) for p in candidates],
        operations=operations,
        skipped_files=skipped,
    )
