"""Grading error taxonomy."""

from __future__ import annotations

from dataclasses import dataclass


class ConfigurationError(RuntimeError):
    """No grading credentials are available; nothing can be scored."""


@dataclass
class GradingParseError(Exception):
    message: str
    raw_text: str = ""

    def __str__(self) -> str:
        return self.message


@dataclass
class UpstreamTransientError(Exception):
    status_code: int | None
    message: str

    def __str__(self) -> str:
        return self.message
