from __future__ import annotations

from pathlib import Path
from typing import Optional

Position = tuple[int, int]  # (line 1-based, column 0-based)


class ApiscribeError(Exception):
    """Base class for errors that abort an extraction pass."""


class ClauseSyntaxError(ApiscribeError):
    """
    A parameter clause could not be parsed.

    Attributes:
        message: what the parser expected
        text: offending token text ("" at end of input)
        start / end: span of the offending token, inside the clause or, once
            path is set, inside that file
        clause: the full clause text, when known
        path: file holding the clause, when known
    """

    def __init__(
        self,
        message: str,
        text: str = "",
        start: Optional[Position] = None,
        end: Optional[Position] = None,
        clause: Optional[str] = None,
        path: Optional[str] = None,
    ):
        self.message = message
        self.text = text
        self.start = start
        self.end = end
        self.clause = clause
        self.path = path

        location = [path] if path else []
        if start is not None:
            location += [str(start[0]), str(start[1])]
        if location:
            super().__init__(f"{':'.join(location)}: {message}")
        else:
            super().__init__(message)

    def relocated(
        self,
        message: Optional[str] = None,
        start: Optional[Position] = None,
        end: Optional[Position] = None,
        path: Optional[str] = None,
    ) -> "ClauseSyntaxError":
        """Copy with another message, span or file; unset arguments are kept."""
        return ClauseSyntaxError(
            self.message if message is None else message,
            text=self.text,
            start=self.start if start is None else start,
            end=self.end if end is None else end,
            clause=self.clause,
            path=self.path if path is None else path,
        )


class IncludeReadError(ApiscribeError, OSError):
    """An included documentation file could not be read."""

    def __init__(self, path: Path | str, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Failed to read include_str file {self.path}: {reason}")


class ConfigError(ApiscribeError):
    """Required configuration (e.g. the project root variable) is missing."""
