"""
Storage row value objects produced by the property processors.

Processors never touch the database. Creation processors return DbInsertData
(rows to bulk insert for a new issue), update processors return a
DbOperationResult (a diff applied by IssueService against existing rows).
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

__all__ = [
    "SingleValueRow",
    "MultiValueRow",
    "DbInsertData",
    "SingleValueUpdate",
    "MultiValueData",
    "DbOperationResult",
]


@dataclass(frozen=True)
class SingleValueRow:
    """A property_single_values row without bookkeeping columns."""

    issue_id: str
    property_id: str
    property_type: str
    value: str | None
    number_value: float | None = None

    def to_params(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class MultiValueRow:
    """A property_multi_values row without bookkeeping columns."""

    issue_id: str
    property_id: str
    property_type: str
    value: str | None
    position: int
    number_value: float | None = None

    def to_params(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class DbInsertData:
    """Rows to insert for one property of a new issue."""

    single_values: list[SingleValueRow] = field(default_factory=list)
    multi_values: list[MultiValueRow] = field(default_factory=list)


@dataclass(frozen=True)
class SingleValueUpdate:
    """New content of the (issue, property) single value row."""

    value: str | None
    number_value: float | None = None


@dataclass(frozen=True)
class MultiValueData:
    """One list element to write. position=None appends after the current max."""

    value: str | None
    position: int | None = None
    number_value: float | None = None


@dataclass
class DbOperationResult:
    """
    Row diff for one operation on one property of an existing issue.

    Applied in this order: single row remove/upsert, multi row removals,
    positional updates, creates.
    """

    single_value_update: SingleValueUpdate | None = None
    single_value_remove: bool = False
    multi_value_creates: list[MultiValueData] = field(default_factory=list)
    multi_value_updates: dict[int, MultiValueData] = field(default_factory=dict)
    multi_value_remove_positions: list[int] = field(default_factory=list)
    # Delete every element regardless of position
    multi_value_remove_all: bool = False
    # Upper bound on elements after the operation, checked by the applier
    max_items: int | None = None

    @property
    def is_empty(self) -> bool:
        return not (
            self.single_value_update
            or self.single_value_remove
            or self.multi_value_creates
            or self.multi_value_updates
            or self.multi_value_remove_positions
            or self.multi_value_remove_all
        )
