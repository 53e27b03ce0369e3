from __future__ import annotations

import os
from typing import Mapping, Optional

from pydantic import BaseModel

DEFAULT_PROJECT_ROOT_VAR = "PROJECT_ROOT"

_TRUTHY = {"1", "true", "yes", "on"}


class ExtractSettings(BaseModel):
    project_root_var: str = DEFAULT_PROJECT_ROOT_VAR
    encoding: str = "utf-8"
    strict_clauses: bool = True

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ExtractSettings":
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}
        if env.get("APISCRIBE_PROJECT_ROOT_VAR"):
            values["project_root_var"] = env["APISCRIBE_PROJECT_ROOT_VAR"]
        if env.get("APISCRIBE_ENCODING"):
            values["encoding"] = env["APISCRIBE_ENCODING"]
        if "APISCRIBE_STRICT_CLAUSES" in env:
            values["strict_clauses"] = env["APISCRIBE_STRICT_CLAUSES"].strip().lower() in _TRUTHY
        return cls(**values)
