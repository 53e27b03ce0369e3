from __future__ import annotations

import os
from pathlib import Path

from apiscribe.repo.ignore import should_ignore_dir

ANNOTATION_NEEDLES = ("@doc(", "@param(", ".doc(", ".param(")


def scan_python_files(root: Path, max_files: int | None = None) -> list[str]:
    """
    Absolute paths of .py files under root, sorted. A single .py file is
    returned as-is.
    """
    if root.is_file():
        return [str(root.resolve())] if root.suffix == ".py" else []

    out: list[str] = []
    for dirpath, dirs, files in os.walk(root):
        dir_p = Path(dirpath)

        # prune ignored dirs
        dirs[:] = sorted(d for d in dirs if not should_ignore_dir(dir_p / d))

        for f in sorted(files):
            if f.endswith(".py"):
                out.append(str((dir_p / f).resolve()))
                if max_files is not None and len(out) >= max_files:
                    return out
    return out


def _file_contains_any(path: str, needles: tuple[str, ...], max_bytes: int = 500_000) -> bool:
    try:
        with open(path, "rb") as f:
            data = f.read(max_bytes)
    except OSError:
        return False
    text = data.decode("utf-8", errors="ignore")
    return any(n in text for n in needles)


def select_annotated_files(py_files: list[str]) -> list[str]:
    """Files that mention a doc/param decorator; the rest cannot yield anything."""
    return [p for p in py_files if _file_contains_any(p, ANNOTATION_NEEDLES)]
