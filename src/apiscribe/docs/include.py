from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Mapping, Optional

from apiscribe.config import DEFAULT_PROJECT_ROOT_VAR
from apiscribe.domain.errors import ConfigError, IncludeReadError

logger = logging.getLogger(__name__)

_QUOTES = "\"'"
_CONCAT_CALL = re.compile(r"\bconcat\s*(?=\()")


def resolve_include(
    path_expression: str,
    project_root_var: str = DEFAULT_PROJECT_ROOT_VAR,
    encoding: str = "utf-8",
    environ: Optional[Mapping[str, str]] = None,
) -> str:
    """
    Evaluate the argument of include_str(...) and return the file contents.

    Two forms are understood:
      include_str("docs/users.md")                              -> direct path
      include_str(concat(env("PROJECT_ROOT"), "/docs/users.md")) -> root relative
    """
    expr = path_expression.strip().strip(_QUOTES)

    if project_root_var in expr:
        path = _project_root_path(expr, project_root_var, environ)
    else:
        path = Path(expr)

    logger.debug("Resolved include %r -> %s", path_expression, path)
    return _read(path, encoding)


def _project_root_path(
    expr: str, project_root_var: str, environ: Optional[Mapping[str, str]]
) -> Path:
    env = os.environ if environ is None else environ
    root = env.get(project_root_var)
    if root is None:
        raise ConfigError(f"{project_root_var} not found in environment")

    env_call = re.compile(r"\benv\s*\(\s*([\"'])" + re.escape(project_root_var) + r"\1\s*\)")
    fragment = _CONCAT_CALL.sub("", expr)
    fragment = env_call.sub("", fragment).replace(",", "")
    fragment = fragment.strip().strip("()").strip().strip(_QUOTES)

    # a single leading separator would make the join absolute
    if fragment.startswith("/"):
        fragment = fragment[1:]
    return Path(root) / fragment


def _read(path: Path, encoding: str) -> str:
    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise IncludeReadError(path, str(exc)) from exc
