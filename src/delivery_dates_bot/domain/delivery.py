"""Domain models for parsed and persisted delivery dates."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum


@dataclass(frozen=True)
class ParsedLine:
    """Raw result of parsing one message line, before city canonicalization."""

    city: str
    start_date: str
    restrictions: str | None


@dataclass(frozen=True)
class ParsedRecord:
    """One delivery-date update ready to be persisted.

    ``city`` is the canonical name, ``original_city`` keeps the text as typed
    (after line sanitizing). ``date`` is always ``DD.MM``.
    """

    city: str
    original_city: str
    date: str
    restrictions: str | None


@dataclass(frozen=True)
class UnrecognizedLine:
    """Input line that did not match the ``<city> с <DD.MM>`` head."""

    line_number: int
    text: str


@dataclass(frozen=True)
class BatchParseResult:
    """Parsed records together with per-line recognition diagnostics."""

    records: tuple[ParsedRecord, ...]
    total_lines: int
    unrecognized_lines: tuple[UnrecognizedLine, ...] = ()

    @property
    def recognized_lines(self) -> int:
        return len(self.records)

    @property
    def has_unrecognized_lines(self) -> bool:
        return bool(self.unrecognized_lines)


class UpsertAction(StrEnum):
    """Outcome of writing one record to the delivery-date store."""

    CREATED = "created"
    UPDATED = "updated"


@dataclass(frozen=True)
class StoredDeliveryDate:
    """Delivery date row as kept by the store."""

    city_name: str
    delivery_date: str
    restrictions: str | None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class DeliveryUpdateSuccess:
    city: str
    action: UpsertAction
    date: str


@dataclass(frozen=True)
class DeliveryUpdateFailure:
    city: str
    error: str


@dataclass(frozen=True)
class DeliveryUpdateReport:
    """Per-record outcome of a batch update; failures never abort the batch."""

    total: int
    success: tuple[DeliveryUpdateSuccess, ...] = field(default_factory=tuple)
    failed: tuple[DeliveryUpdateFailure, ...] = field(default_factory=tuple)

    @property
    def has_failures(self) -> bool:
        return bool(self.failed)
