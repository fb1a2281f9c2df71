"""Tests for HTTP-based adapters."""

import asyncio
from datetime import date

import httpx
import pytest

from adherence_tracker.adapters.httpx_health_provider import HttpxHealthProvider
from adherence_tracker.domain.health import DailyMetric, WorkoutActivityType

BASE_URL = "http://bridge.local"


def _provider(handler) -> HttpxHealthProvider:  # type: ignore[no-untyped-def]
    transport = httpx.MockTransport(handler)
    return HttpxHealthProvider(
        base_url=f"{BASE_URL}/",
        token="bridge-token",
        http_client=httpx.AsyncClient(transport=transport),
    )


def test_is_authorized_sends_bearer_token() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/authorization"
        assert request.headers["Authorization"] == "Bearer bridge-token"
        return httpx.Response(200, json={"authorized": True})

    provider = _provider(handler)

    assert asyncio.run(provider.is_authorized()) is True


def test_fetch_sleep_uses_overnight_window() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/sleep"
        assert request.url.params["start"] == "2024-03-09T20:00:00"
        assert request.url.params["end"] == "2024-03-10T14:00:00"
        return httpx.Response(
            200,
            json={
                "samples": [
                    {
                        "stage": "core",
                        "start": "2024-03-09T23:00:00",
                        "end": "2024-03-10T03:00:00",
                    },
                    {
                        "stage": "deep",
                        "start": "2024-03-10T03:00:00",
                        "end": "2024-03-10T04:30:00",
                    },
                    {
                        "stage": "unknown",
                        "start": "2024-03-10T04:30:00",
                        "end": "2024-03-10T05:00:00",
                    },
                ],
                "hrv": 52,
                "resting_hr": None,
            },
        )

    reading = asyncio.run(_provider(handler).fetch_sleep(date(2024, 3, 10)))

    assert reading is not None
    assert reading.total_sleep_minutes == 330
    assert reading.deep_sleep_minutes == 90
    assert reading.hrv == 52.0
    assert reading.resting_hr is None


def test_fetch_sleep_without_samples_returns_none() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"samples": []})

    assert asyncio.run(_provider(handler).fetch_sleep(date(2024, 3, 10))) is None


def test_fetch_workouts_parses_and_sorts() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["date"] == "2024-03-10"
        return httpx.Response(
            200,
            json={
                "workouts": [
                    {
                        "activity_type": "running",
                        "start": "2024-03-10T18:00:00+00:00",
                        "end": "2024-03-10T18:09:30+00:00",
                        "distance_m": 1700.5,
                    },
                    {
                        "activity_type": "traditional_strength_training",
                        "start": "2024-03-10T07:00:00+00:00",
                        "end": "2024-03-10T08:00:00+00:00",
                        "duration_seconds": 3300,
                        "energy_kcal": 410.7,
                    },
                ]
            },
        )

    workouts = asyncio.run(_provider(handler).fetch_workouts(date(2024, 3, 10)))

    assert [w.activity_type for w in workouts] == [
        WorkoutActivityType.TRADITIONAL_STRENGTH,
        WorkoutActivityType.RUNNING,
    ]
    assert workouts[0].duration_minutes == 55
    assert workouts[0].calories == 410
    assert workouts[1].duration_minutes == 9
    assert workouts[1].distance_m == 1700.5
    assert workouts[1].calories is None


def test_fetch_daily_total_converts_water_to_ounces() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/totals/water":
            return httpx.Response(200, json={"value": 2.0})
        if request.url.path == "/totals/steps":
            return httpx.Response(200, json={"value": 10432})
        return httpx.Response(200, json={"value": None})

    provider = _provider(handler)

    async def run() -> tuple[float | None, float | None, float | None]:
        water = await provider.fetch_daily_total(DailyMetric.WATER, date(2024, 3, 10))
        steps = await provider.fetch_daily_total(DailyMetric.STEPS, date(2024, 3, 10))
        energy = await provider.fetch_daily_total(
            DailyMetric.ACTIVE_ENERGY, date(2024, 3, 10)
        )
        await provider.close()
        return water, steps, energy

    water, steps, energy = asyncio.run(run())

    assert water == pytest.approx(67.628)
    assert steps == 10432.0
    assert energy is None


def test_http_errors_are_raised() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"error": "unavailable"})

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(_provider(handler).fetch_workouts(date(2024, 3, 10)))
