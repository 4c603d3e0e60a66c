"""Contract tests for the Supabase PostgREST store with mocked transport."""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import UTC, datetime

import httpx
import pytest

from delivery_dates_bot.domain.delivery import ParsedRecord, UpsertAction
from delivery_dates_bot.infrastructure.errors import ConfigurationError
from delivery_dates_bot.infrastructure.supabase.client import SupabaseRestClient
from delivery_dates_bot.infrastructure.supabase.config import SupabaseConfig
from delivery_dates_bot.infrastructure.supabase.errors import (
    SupabaseRequestError,
    SupabaseResponseError,
    SupabaseRetryExhaustedError,
    SupabaseServerError,
)
from delivery_dates_bot.infrastructure.supabase.repository import (
    SupabaseDeliveryDateRepository,
    SupabaseDeliveryUnitOfWork,
)
from delivery_dates_bot.infrastructure.supabase.retry import RetryExecutor, RetryPolicy

FIXED_NOW = datetime(2026, 2, 9, 8, 30, tzinfo=UTC)
CONFIG = SupabaseConfig(url="https://project.supabase.co/", service_role_key="service-key")
RECORD = ParsedRecord(city="Тула", original_city="Тула", date="09.02", restrictions=None)


def test_upsert_inserts_row_when_city_is_missing() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        if request.method == "GET":
            assert request.url.path == "/rest/v1/delivery_dates"
            assert request.url.params["city_name"] == "eq.Тула"
            assert request.url.params["select"] == "id,city_name"
            return httpx.Response(status_code=200, json=[])
        return httpx.Response(status_code=201)

    with _make_client(handler) as client:
        action = SupabaseDeliveryDateRepository(client).upsert_delivery_date(RECORD, FIXED_NOW)

    assert action is UpsertAction.CREATED
    assert [request.method for request in captured] == ["GET", "POST"]
    assert captured[0].headers["apikey"] == "service-key"
    assert captured[0].headers["authorization"] == "Bearer service-key"
    assert json.loads(captured[1].content.decode("utf-8")) == {
        "city_name": "Тула",
        "delivery_date": "09.02",
        "restrictions": None,
        "updated_at": FIXED_NOW.isoformat(),
    }


def test_upsert_patches_existing_city_and_clears_restrictions() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        if request.method == "GET":
            return httpx.Response(status_code=200, json=[{"id": 7, "city_name": "Тула"}])
        return httpx.Response(status_code=204)

    with _make_client(handler) as client:
        action = SupabaseDeliveryDateRepository(client).upsert_delivery_date(RECORD, FIXED_NOW)

    assert action is UpsertAction.UPDATED
    patch_request = captured[1]
    assert patch_request.method == "PATCH"
    assert patch_request.url.params["city_name"] == "eq.Тула"
    payload = json.loads(patch_request.content.decode("utf-8"))
    assert payload["restrictions"] is None
    assert payload["delivery_date"] == "09.02"


def test_list_delivery_dates_validates_rows() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["order"] == "city_name.asc"
        return httpx.Response(
            status_code=200,
            json=[
                {"city_name": "Москва", "delivery_date": "09.02", "restrictions": "16.02"},
                {
                    "city_name": "Тула",
                    "delivery_date": "10.02",
                    "restrictions": None,
                    "updated_at": "2026-02-09T08:30:00+00:00",
                },
            ],
        )

    with _make_client(handler) as client:
        with SupabaseDeliveryUnitOfWork(client) as uow:
            rows = uow.deliveries.list_delivery_dates()

    assert [row.city_name for row in rows] == ["Москва", "Тула"]
    assert rows[0].restrictions == "16.02"
    assert rows[1].updated_at == FIXED_NOW


def test_list_delivery_dates_rejects_unexpected_row_shape() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=200, json=[{"city": "Москва"}])

    with _make_client(handler) as client:
        with pytest.raises(SupabaseResponseError):
            SupabaseDeliveryDateRepository(client).list_delivery_dates()


def test_client_maps_client_errors_to_request_error_with_detail() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            status_code=400,
            json={"message": "column delivery_datez does not exist"},
        )

    with _make_client(handler) as client:
        with pytest.raises(SupabaseRequestError, match="delivery_datez"):
            client.select("delivery_dates", columns="*")


def test_client_retries_server_errors_then_succeeds() -> None:
    attempts = {"count": 0}
    sleep_calls: list[float] = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts["count"] += 1
        if attempts["count"] < 3:
            return httpx.Response(status_code=503, text="upstream unavailable")
        return httpx.Response(status_code=200, json=[])

    with _make_client(handler, sleep=sleep_calls.append) as client:
        rows = client.select("delivery_dates", columns="*")

    assert rows == []
    assert attempts["count"] == 3
    assert sleep_calls == [0.1, 0.2]


def test_client_gives_up_after_retry_budget() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=429, json={"message": "slow down"})

    with _make_client(handler, sleep=lambda _: None) as client:
        with pytest.raises(SupabaseRetryExhaustedError) as exc_info:
            client.select("delivery_dates", columns="*")

    assert exc_info.value.attempts == 3


def test_client_rejects_non_array_payload() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=200, json={"rows": []})

    with _make_client(handler) as client:
        with pytest.raises(SupabaseResponseError):
            client.select("delivery_dates", columns="*")



def test_client_waits_for_retry_after_on_rate_limit() -> None:
    attempts = {"count": 0}
    sleep_calls: list[float] = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts["count"] += 1
        if attempts["count"] == 1:
            return httpx.Response(status_code=429, headers={"Retry-After": "0.75"})
        return httpx.Response(status_code=200, json=[])

    with _make_client(handler, sleep=sleep_calls.append) as client:
        client.select("delivery_dates", columns="*")

    assert sleep_calls == [0.75]


def test_insert_reported_created_when_response_is_lost_after_commit() -> None:
    stored: list[dict[str, object]] = []
    methods: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        methods.append(request.method)
        if request.method == "GET":
            rows = [{"id": 1, "city_name": "Тула"}] if stored else []
            return httpx.Response(status_code=200, json=rows)
        if request.method == "POST":
            if stored:
                return httpx.Response(status_code=409, json={"message": "duplicate key value"})
            stored.append(json.loads(request.content.decode("utf-8")))
            raise httpx.ReadTimeout("timed out", request=request)
        return httpx.Response(status_code=204)

    with _make_client(handler) as client:
        action = SupabaseDeliveryDateRepository(client).upsert_delivery_date(RECORD, FIXED_NOW)

    assert action is UpsertAction.CREATED
    assert methods == ["GET", "POST", "GET", "PATCH"]
    assert len(stored) == 1


def test_insert_error_propagates_when_row_was_not_written() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(status_code=200, json=[])
        return httpx.Response(status_code=502, text="bad gateway")

    with _make_client(handler) as client:
        with pytest.raises(SupabaseServerError):
            SupabaseDeliveryDateRepository(client).upsert_delivery_date(RECORD, FIXED_NOW)


def test_insert_conflict_falls_back_to_update() -> None:
    methods: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        methods.append(request.method)
        if request.method == "GET":
            return httpx.Response(status_code=200, json=[])
        if request.method == "POST":
            return httpx.Response(status_code=409, json={"message": "duplicate key value"})
        return httpx.Response(status_code=204)

    with _make_client(handler) as client:
        action = SupabaseDeliveryDateRepository(client).upsert_delivery_date(RECORD, FIXED_NOW)

    assert action is UpsertAction.UPDATED
    assert methods == ["GET", "POST", "PATCH"]

@pytest.mark.parametrize(
    ("url", "key"),
    [("", "service-key"), ("https://project.supabase.co", "  "), ("", "")],
)
def test_supabase_config_fails_fast_without_credentials(url: str, key: str) -> None:
    with pytest.raises(ConfigurationError):
        SupabaseConfig(url=url, service_role_key=key)


def test_supabase_config_builds_rest_base_url() -> None:
    assert CONFIG.rest_base_url == "https://project.supabase.co/rest/v1"


class _ClientContext:
    def __init__(self, client: SupabaseRestClient, http_client: httpx.Client) -> None:
        self._client = client
        self._http_client = http_client

    def __enter__(self) -> SupabaseRestClient:
        return self._client

    def __exit__(self, *_: object) -> None:
        self._http_client.close()


def _make_client(
    handler: Callable[[httpx.Request], httpx.Response],
    *,
    sleep: Callable[[float], None] | None = None,
) -> _ClientContext:
    http_client = httpx.Client(
        transport=httpx.MockTransport(handler),
        base_url=CONFIG.rest_base_url,
    )
    retry_executor = RetryExecutor(
        RetryPolicy(max_attempts=3, base_delay_seconds=0.1, max_delay_seconds=1.0),
        sleep=sleep or (lambda _: None),
    )
    client = SupabaseRestClient(CONFIG, http_client=http_client, retry_executor=retry_executor)
    return _ClientContext(client, http_client)
