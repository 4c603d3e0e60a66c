"""Parse chat messages like "Москва с 9.02 (кроме 16, 20)" into delivery records.

Line grammar::

    [list marker] <city> с|со <D.M> [anything] [кроме <dates or sentinel>]

The head (city + start date) is matched non-greedily from the line start and
is not anchored to the line end, so trailing text after the date is
tolerated. The "кроме" clause is searched independently over the whole line.
"""

from __future__ import annotations

import logging
import re
from uuid import uuid4

from delivery_dates_bot.application.city_normalizer import CityNormalizer, default_city_normalizer
from delivery_dates_bot.application.date_normalizer import normalize_date_token
from delivery_dates_bot.application.text_normalizer import normalize_text, sanitize_line
from delivery_dates_bot.domain.delivery import (
    BatchParseResult,
    ParsedLine,
    ParsedRecord,
    UnrecognizedLine,
)

LOGGER = logging.getLogger(__name__)

EXCEPT_KEYWORD = "кроме"
NO_DELIVERY_PHRASES: tuple[str, ...] = ("дату доставки нет", "доставки нет")

_HEAD_PATTERN = re.compile(
    r"^(.+?)\s+(?:с|со)\s+([0-9]{1,2}[.][0-9]{1,2})(?![0-9A-Za-z_])",
    re.IGNORECASE,
)
_EXCEPT_PATTERN = re.compile(EXCEPT_KEYWORD, re.IGNORECASE)
_CLAUSE_LEAD_PATTERN = re.compile(r"^[\s:,-]+")
_CLAUSE_TAIL_PATTERN = re.compile(r"[\s)\]]+$")
_AND_PATTERN = re.compile(r"\s+и\s+", re.IGNORECASE)
_WHITESPACE_PATTERN = re.compile(r"\s+")
_REPEATED_COMMA_PATTERN = re.compile(r",+")
_LINE_BREAK_PATTERN = re.compile(r"\r?\n")


def parse_line(raw_line: str) -> ParsedLine | None:
    """Parse one line into city, start date and restrictions.

    Returns ``None`` when the line has no ``<city> с <D.M>`` head; this is the
    only failure mode.
    """
    line = sanitize_line(normalize_text(raw_line))
    if not line:
        return None

    head = _HEAD_PATTERN.match(line)
    if head is None:
        LOGGER.debug("event=delivery_line_unrecognized line=%r", line)
        return None

    city = head.group(1).strip()
    start_date = normalize_date_token(head.group(2).strip())
    restrictions = _extract_restrictions(line)

    LOGGER.debug(
        "event=delivery_line_parsed city=%s start_date=%s restrictions=%s",
        city,
        start_date,
        restrictions,
    )
    return ParsedLine(city=city, start_date=start_date, restrictions=restrictions)


def parse_batch(
    text: object,
    *,
    city_normalizer: CityNormalizer | None = None,
) -> list[ParsedRecord]:
    """Parse a multi-line message and return recognized records in input order."""
    return list(parse_batch_with_diagnostics(text, city_normalizer=city_normalizer).records)


def parse_batch_with_diagnostics(
    text: object,
    *,
    city_normalizer: CityNormalizer | None = None,
) -> BatchParseResult:
    """Parse a multi-line message and report which lines were not recognized.

    Lines are split on line breaks only, never on commas. Non-string input
    yields an empty result instead of raising.
    """
    if not isinstance(text, str):
        LOGGER.warning(
            "event=delivery_batch_invalid_input input_type=%s",
            type(text).__name__,
        )
        return BatchParseResult(records=(), total_lines=0)

    normalizer = city_normalizer or default_city_normalizer()
    lines = [line.strip() for line in _LINE_BREAK_PATTERN.split(normalize_text(text))]
    lines = [line for line in lines if line]

    records: list[ParsedRecord] = []
    unrecognized: list[UnrecognizedLine] = []
    for line_number, line in enumerate(lines, start=1):
        parsed = parse_line(line)
        if parsed is None:
            unrecognized.append(UnrecognizedLine(line_number=line_number, text=line))
            continue

        records.append(
            ParsedRecord(
                city=normalizer.normalize(parsed.city),
                original_city=parsed.city,
                date=parsed.start_date,
                restrictions=parsed.restrictions,
            )
        )

    result = BatchParseResult(
        records=tuple(records),
        total_lines=len(lines),
        unrecognized_lines=tuple(unrecognized),
    )
    LOGGER.info(
        (
            "event=delivery_batch_parsed correlation_id=%s "
            "total_lines=%s recognized_lines=%s unrecognized_lines=%s"
        ),
        str(uuid4()),
        result.total_lines,
        result.recognized_lines,
        len(result.unrecognized_lines),
    )
    return result


def _extract_restrictions(line: str) -> str | None:
    keyword = _EXCEPT_PATTERN.search(line)
    if keyword is None:
        return None

    clause = line[keyword.end() :]
    clause = _CLAUSE_LEAD_PATTERN.sub("", clause, count=1).strip()
    lowered = clause.lower()
    if any(phrase in lowered for phrase in NO_DELIVERY_PHRASES):
        return clause

    # Closing brackets belong to the "(кроме ...)" wrapper, not to the date list.
    clause = _CLAUSE_TAIL_PATTERN.sub("", clause, count=1)
    if not clause:
        return None

    clause = _AND_PATTERN.sub(", ", clause)
    clause = _WHITESPACE_PATTERN.sub(" ", clause)
    clause = _REPEATED_COMMA_PATTERN.sub(",", clause)
    clause = clause.strip().strip(",")

    dates = [normalize_date_token(part.strip()) for part in clause.split(",")]
    joined = ", ".join(date for date in dates if date)
    return joined or None
