# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
"""Errors reported while reading the mount table.

There are exactly two kinds: the line source failed to produce a line
(`SourceReadError`), or a line was read but is not a mount table entry
(`ParseFailure`).
"""

from typing import Optional


class MountsError(Exception):
    """Base class for per-line errors produced while reading mounts."""


class SourceReadError(MountsError):
    """The line source failed to produce a line."""

    def __init__(self, cause: BaseException, line_number: Optional[int] = None):
        self.cause = cause
        self.line_number = line_number
        super().__init__(str(cause) or type(cause).__name__)

    def __str__(self) -> str:
        detail = str(self.cause) or type(self.cause).__name__
        if self.line_number is None:
            return f"Failed to read a line: {detail}"
        return f"Failed to read line {self.line_number}: {detail}"


class ParseFailure(MountsError):
    """A line did not conform to the mount table grammar.

    Carries no detail about where or why parsing failed. When raised from the
    iteration layer, `line_number` is the 1-based position of the line.
    """

    MESSAGE = "A parsing error occurred."

    def __init__(self, line_number: Optional[int] = None):
        self.line_number = line_number
        super().__init__(self.MESSAGE)

    def __str__(self) -> str:
        if self.line_number is None:
            return self.MESSAGE
        return f"{self.MESSAGE} (line {self.line_number})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParseFailure):
            return NotImplemented
        return self.line_number == other.line_number

    def __hash__(self) -> int:
        return hash((ParseFailure, self.line_number))
