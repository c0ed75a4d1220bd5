"""Result types shared by the services."""

import math
from dataclasses import dataclass
from typing import Optional

from eats.app.core.errors import ErrorKind

PAGE_SIZE = 10


@dataclass
class CoreOutput:
    ok: bool
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def fail(cls, kind: ErrorKind, error: str, **fields):
        return cls(ok=False, error=error, error_kind=kind, **fields)


@dataclass
class PaginationOutput(CoreOutput):
    total_pages: Optional[int] = None
    total_results: Optional[int] = None


def total_pages(total_results: int) -> int:
    return math.ceil(total_results / PAGE_SIZE)


def page_offset(page: int) -> int:
    """Pages are 1-based; anything below 1 is treated as the first page."""
    return (max(page, 1) - 1) * PAGE_SIZE
