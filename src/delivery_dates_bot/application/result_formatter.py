"""Human-readable renderings of parse results and update reports."""

from __future__ import annotations

from collections.abc import Sequence
from html import escape

from delivery_dates_bot.domain.delivery import (
    BatchParseResult,
    DeliveryUpdateReport,
    ParsedRecord,
    StoredDeliveryDate,
    UpsertAction,
)

NO_RECORDS_MESSAGE = '❌ Не найдено ни одной записи в формате "Город с ДД.ММ"'
NO_STORED_DATES_MESSAGE = "📭 В базе пока нет дат доставки."
REPORT_SUCCESS_PREVIEW_LIMIT = 10
REPORT_FAILURE_PREVIEW_LIMIT = 10
UNRECOGNIZED_PREVIEW_LIMIT = 5

_ACTION_LABELS = {
    UpsertAction.CREATED: "создан",
    UpsertAction.UPDATED: "обновлен",
}


def format_parsed_results(records: Sequence[ParsedRecord]) -> str:
    """Render preview: one ``<n>. <city> - <date> [(кроме ...)]`` line per record."""
    if not records:
        return NO_RECORDS_MESSAGE

    lines = [f"✅ Найдено записей: {len(records)}", ""]
    for index, record in enumerate(records, start=1):
        line = f"{index}. {record.city} - {record.date}"
        if record.restrictions is not None:
            line += f" (кроме {record.restrictions})"
        lines.append(line)
    return "\n".join(lines)


def format_recognition_summary(result: BatchParseResult) -> str | None:
    """Warn about unrecognized lines; ``None`` when every line was understood."""
    if not result.has_unrecognized_lines:
        return None

    lines = [
        f"⚠️ Распознано {result.recognized_lines} из {result.total_lines} строк.",
        "Не распознаны:",
    ]
    for item in result.unrecognized_lines[:UNRECOGNIZED_PREVIEW_LIMIT]:
        lines.append(f"• строка {item.line_number}: {_shorten(item.text)}")
    hidden = len(result.unrecognized_lines) - UNRECOGNIZED_PREVIEW_LIMIT
    if hidden > 0:
        lines.append(f"... и еще {hidden}")
    return "\n".join(lines)


def format_update_report(report: DeliveryUpdateReport) -> str:
    """Render HTML report for a finished batch update."""
    lines = [
        "✅ <b>Обновление завершено!</b>",
        "",
        f"📊 Всего обработано: {report.total}",
        f"✅ Успешно: {len(report.success)}",
    ]

    if report.failed:
        lines.append(f"❌ Ошибок: {len(report.failed)}")
        lines.append("")
        lines.append("<b>Ошибки:</b>")
        for failure in report.failed[:REPORT_FAILURE_PREVIEW_LIMIT]:
            error = _shorten(failure.error, max_length=200)
            lines.append(f"• {escape(failure.city)}: {escape(error)}")
        hidden_failures = len(report.failed) - REPORT_FAILURE_PREVIEW_LIMIT
        if hidden_failures > 0:
            lines.append(f"... и еще {hidden_failures} ошибок")

    if report.success:
        lines.append("")
        lines.append("<b>Обновленные города:</b>")
        for item in report.success[:REPORT_SUCCESS_PREVIEW_LIMIT]:
            lines.append(
                f"• {escape(item.city)} - {item.date} ({_ACTION_LABELS[item.action]})"
            )
        hidden = len(report.success) - REPORT_SUCCESS_PREVIEW_LIMIT
        if hidden > 0:
            lines.append("")
            lines.append(f"... и еще {hidden} городов")

    return "\n".join(lines)


def format_stored_dates(rows: Sequence[StoredDeliveryDate]) -> str:
    """Render stored delivery dates as HTML list."""
    if not rows:
        return NO_STORED_DATES_MESSAGE

    lines = ["📋 <b>Текущие даты доставки:</b>", ""]
    for row in rows:
        line = f"• {escape(row.city_name)} - {row.delivery_date}"
        if row.restrictions:
            line += f" (кроме {escape(row.restrictions)})"
        lines.append(line)
    return "\n".join(lines)


def _shorten(text: str, *, max_length: int = 50) -> str:
    if len(text) <= max_length:
        return text
    return f"{text[:max_length]}..."
