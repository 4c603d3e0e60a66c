"""Unit tests for preview and report rendering."""

from __future__ import annotations

from delivery_dates_bot.application.delivery_parser import parse_batch_with_diagnostics
from delivery_dates_bot.application.result_formatter import (
    NO_RECORDS_MESSAGE,
    NO_STORED_DATES_MESSAGE,
    format_parsed_results,
    format_recognition_summary,
    format_stored_dates,
    format_update_report,
)
from delivery_dates_bot.domain.delivery import (
    DeliveryUpdateFailure,
    DeliveryUpdateReport,
    DeliveryUpdateSuccess,
    ParsedRecord,
    StoredDeliveryDate,
    UpsertAction,
)


def test_format_parsed_results_renders_one_line_per_record() -> None:
    records = [
        ParsedRecord(city="Москва", original_city="Москва", date="09.02", restrictions=None),
        ParsedRecord(city="Тула", original_city="Тула", date="09.02", restrictions="16, 20"),
    ]

    preview = format_parsed_results(records)

    assert preview.splitlines() == [
        "✅ Найдено записей: 2",
        "",
        "1. Москва - 09.02",
        "2. Тула - 09.02 (кроме 16, 20)",
    ]


def test_format_parsed_results_returns_not_found_message_for_empty_list() -> None:
    assert format_parsed_results([]) == NO_RECORDS_MESSAGE


def test_blank_input_yields_not_found_preview() -> None:
    result = parse_batch_with_diagnostics("  \n \n")

    assert format_parsed_results(result.records) == NO_RECORDS_MESSAGE


def test_format_recognition_summary_lists_unrecognized_lines() -> None:
    result = parse_batch_with_diagnostics("Москва с 9.02\nнепонятная строка\nТула с 10.02")

    summary = format_recognition_summary(result)

    assert summary is not None
    assert "Распознано 2 из 3 строк" in summary
    assert "строка 2: непонятная строка" in summary


def test_format_recognition_summary_is_none_when_all_lines_recognized() -> None:
    result = parse_batch_with_diagnostics("Москва с 9.02")

    assert format_recognition_summary(result) is None


def test_format_update_report_includes_failures_and_escapes_html() -> None:
    report = DeliveryUpdateReport(
        total=3,
        success=(
            DeliveryUpdateSuccess(city="Москва", action=UpsertAction.CREATED, date="09.02"),
            DeliveryUpdateSuccess(city="Тула", action=UpsertAction.UPDATED, date="10.02"),
        ),
        failed=(DeliveryUpdateFailure(city="Орёл", error="status=500 <timeout>"),),
    )

    text = format_update_report(report)

    assert "📊 Всего обработано: 3" in text
    assert "✅ Успешно: 2" in text
    assert "❌ Ошибок: 1" in text
    assert "• Орёл: status=500 &lt;timeout&gt;" in text
    assert "• Москва - 09.02 (создан)" in text
    assert "• Тула - 10.02 (обновлен)" in text


def test_format_update_report_truncates_long_success_list() -> None:
    success = tuple(
        DeliveryUpdateSuccess(city=f"Город {index}", action=UpsertAction.UPDATED, date="01.03")
        for index in range(12)
    )

    text = format_update_report(DeliveryUpdateReport(total=12, success=success))

    assert "Город 9 - 01.03" in text
    assert "Город 10 - 01.03" not in text
    assert "... и еще 2 городов" in text
    assert "Ошибок" not in text


def test_format_update_report_caps_failure_list() -> None:
    failed = tuple(
        DeliveryUpdateFailure(city=f"Город {index}", error="x" * 500) for index in range(150)
    )

    text = format_update_report(DeliveryUpdateReport(total=150, failed=failed))

    assert "❌ Ошибок: 150" in text
    assert "• Город 9: " in text
    assert "• Город 10: " not in text
    assert "... и еще 140 ошибок" in text
    assert "x" * 201 not in text
    assert len(text) < 4000

def test_format_stored_dates_renders_rows() -> None:
    rows = [
        StoredDeliveryDate(city_name="Москва", delivery_date="09.02", restrictions="16.02"),
        StoredDeliveryDate(city_name="Тула", delivery_date="10.02", restrictions=None),
    ]

    text = format_stored_dates(rows)

    assert "• Москва - 09.02 (кроме 16.02)" in text
    assert "• Тула - 10.02" in text
    assert format_stored_dates([]) == NO_STORED_DATES_MESSAGE
