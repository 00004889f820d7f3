"""
Source positions for syntax tree nodes and diagnostics.

Nodes built by hand (or by a parser that does not track positions) carry no
span; everything that reports a location treats a missing span as unknown.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SourceLocation:
    """A point in a source file; line and column count from 1."""
    line: int
    column: int
    offset: int = 0
    filename: Optional[str] = None

    def __str__(self) -> str:
        position = f"{self.line}:{self.column}"
        return f"{self.filename}:{position}" if self.filename else position


@dataclass(frozen=True)
class SourceSpan:
    """The half-open range between two locations."""
    start: SourceLocation
    end: SourceLocation

    def __str__(self) -> str:
        return f"{self.start}-{self.end.line}:{self.end.column}"


def span_at(line: int, column: int, length: int = 1, filename: Optional[str] = None) -> SourceSpan:
    """Build a single-line span starting at ``line:column``."""
    start = SourceLocation(line, column, filename=filename)
    end = SourceLocation(line, column + length, filename=filename)
    return SourceSpan(start, end)
