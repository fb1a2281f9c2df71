"""HTTP client for the health data bridge."""

from dataclasses import dataclass
from datetime import date, datetime

import httpx

from adherence_tracker.domain.health import (
    OUNCES_PER_LITER,
    DailyMetric,
    SleepReading,
    SleepSample,
    SleepStage,
    WorkoutActivityType,
    WorkoutReading,
    sleep_window,
    summarize_sleep_samples,
)
from adherence_tracker.services.health_sync import HealthProvider


@dataclass
class HttpxHealthProvider(HealthProvider):
    """HTTPX-backed provider reading from a device sync bridge."""

    base_url: str
    http_client: httpx.AsyncClient
    token: str | None = None

    @classmethod
    def create(cls, base_url: str, token: str | None = None) -> "HttpxHealthProvider":
        """Create a provider with a managed httpx session."""
        return cls(base_url=base_url, token=token, http_client=httpx.AsyncClient())

    async def is_authorized(self) -> bool:
        """Return whether the bridge has read permission."""
        payload = await self._get("/authorization")
        return bool(payload.get("authorized"))

    async def fetch_sleep(self, day: date) -> SleepReading | None:
        """Fetch sleep samples for the night ending on a date."""
        start, end = sleep_window(day)
        payload = await self._get(
            "/sleep", params={"start": start.isoformat(), "end": end.isoformat()}
        )
        samples = [
            SleepSample(
                stage=SleepStage(str(raw["stage"])),
                start=datetime.fromisoformat(str(raw["start"])),
                end=datetime.fromisoformat(str(raw["end"])),
            )
            for raw in payload.get("samples") or []
            if _is_known_stage(raw.get("stage"))
        ]
        return summarize_sleep_samples(
            samples,
            hrv=_optional_float(payload.get("hrv")),
            resting_hr=_optional_float(payload.get("resting_hr")),
        )

    async def fetch_workouts(self, day: date) -> list[WorkoutReading]:
        """Fetch workouts that started on a date."""
        payload = await self._get("/workouts", params={"date": day.isoformat()})
        workouts = [_parse_workout(raw) for raw in payload.get("workouts") or []]
        return sorted(workouts, key=lambda workout: workout.start)

    async def fetch_daily_total(self, metric: DailyMetric, day: date) -> float | None:
        """Fetch a cumulative daily total. Water is converted to ounces."""
        payload = await self._get(
            f"/totals/{metric.value}", params={"date": day.isoformat()}
        )
        value = _optional_float(payload.get("value"))
        if value is None:
            return None
        if metric is DailyMetric.WATER:
            return value * OUNCES_PER_LITER
        return value

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _get(
        self, path: str, params: dict[str, str] | None = None
    ) -> dict[str, object]:
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        response = await self.http_client.get(
            f"{self.base_url.rstrip('/')}{path}",
            params=params,
            headers=headers,
            timeout=15,
        )
        response.raise_for_status()
        return response.json()


def _parse_workout(raw: dict[str, object]) -> WorkoutReading:
    start = datetime.fromisoformat(str(raw["start"]))
    end = datetime.fromisoformat(str(raw["end"]))
    duration_seconds = _optional_float(raw.get("duration_seconds"))
    if duration_seconds is None:
        duration_seconds = (end - start).total_seconds()
    calories = _optional_float(raw.get("energy_kcal"))
    return WorkoutReading(
        activity_type=WorkoutActivityType.parse(raw.get("activity_type")),
        start=start,
        end=end,
        duration_minutes=int(duration_seconds / 60.0),
        calories=int(calories) if calories is not None else None,
        distance_m=_optional_float(raw.get("distance_m")),
    )


def _is_known_stage(value: object) -> bool:
    return value in {stage.value for stage in SleepStage}


def _optional_float(value: object) -> float | None:
    if isinstance(value, int | float) and not isinstance(value, bool):
        return float(value)
    return None
