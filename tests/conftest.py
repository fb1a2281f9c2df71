"""Shared test fixtures."""

import asyncio
import copy
from dataclasses import dataclass, field
from datetime import UTC, date, datetime

import pytest

from adherence_tracker.config import Settings
from adherence_tracker.containers import AppContainer
from adherence_tracker.domain.checklist import RoutineTaskTemplate
from adherence_tracker.domain.days import DayRecord
from adherence_tracker.domain.health import DailyMetric, SleepReading, WorkoutReading
from adherence_tracker.domain.targets import UserTargets
from adherence_tracker.services.day_boundary import DayBoundaryDetector
from adherence_tracker.services.days import DayRepository, DayService
from adherence_tracker.services.health_sync import HealthProvider, HealthSyncService
from adherence_tracker.services.user_settings import (
    UserSettingsRepository,
    UserSettingsService,
)


@dataclass
class FixedClock:
    """Clock returning a settable instant."""

    now: datetime = field(
        default_factory=lambda: datetime(2024, 3, 10, 9, 0, tzinfo=UTC)
    )

    def __call__(self) -> datetime:
        return self.now


@dataclass
class InMemoryDayRepository(DayRepository):
    """In-memory day repository for tests."""

    records: dict[date, DayRecord] = field(default_factory=dict)
    saves: int = 0
    creates: int = 0

    def get_by_date(self, day: date) -> DayRecord | None:
        return self.records.get(day)

    def create(self, record: DayRecord) -> DayRecord:
        self.creates += 1
        self.records[record.day] = record
        return record

    def save(self, record: DayRecord) -> None:
        self.saves += 1
        self.records[record.day] = record

    def list_unfinalized_before(self, day: date) -> list[DayRecord]:
        return [
            record
            for key, record in sorted(self.records.items())
            if key < day and not record.is_finalized
        ]

    def list_range(self, start: date, end: date) -> list[DayRecord]:
        return [
            record
            for key, record in sorted(self.records.items())
            if start <= key <= end
        ]


@dataclass
class CopyingDayRepository(InMemoryDayRepository):
    """Day repository handing out detached copies, like a remote store."""

    def get_by_date(self, day: date) -> DayRecord | None:
        record = self.records.get(day)
        return copy.deepcopy(record) if record is not None else None

    def create(self, record: DayRecord) -> DayRecord:
        super().create(copy.deepcopy(record))
        return record

    def save(self, record: DayRecord) -> None:
        super().save(copy.deepcopy(record))

    def list_unfinalized_before(self, day: date) -> list[DayRecord]:
        return copy.deepcopy(super().list_unfinalized_before(day))

    def list_range(self, start: date, end: date) -> list[DayRecord]:
        return copy.deepcopy(super().list_range(start, end))


@dataclass
class InMemoryUserSettingsRepository(UserSettingsRepository):
    """In-memory user settings repository for tests."""

    targets: UserTargets | None = None
    templates: list[RoutineTaskTemplate] = field(default_factory=list)

    def get_targets(self) -> UserTargets | None:
        return self.targets

    def save_targets(self, targets: UserTargets) -> None:
        self.targets = targets

    def list_routine_templates(self) -> list[RoutineTaskTemplate]:
        return list(self.templates)

    def save_routine_templates(self, templates: list[RoutineTaskTemplate]) -> None:
        self.templates = list(templates)


@dataclass
class FakeHealthProvider(HealthProvider):
    """Fake provider with canned readings and optional per-category failures."""

    authorized: bool = True
    sleep: SleepReading | None = None
    workouts: list[WorkoutReading] = field(default_factory=list)
    totals: dict[DailyMetric, float | None] = field(default_factory=dict)
    failures: dict[str, Exception] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)
    gate: asyncio.Event | None = None

    async def is_authorized(self) -> bool:
        self.calls.append("authorization")
        return self.authorized

    async def fetch_sleep(self, day: date) -> SleepReading | None:
        self.calls.append("sleep")
        await self._wait()
        if "sleep" in self.failures:
            raise self.failures["sleep"]
        return self.sleep

    async def fetch_workouts(self, day: date) -> list[WorkoutReading]:
        self.calls.append("workouts")
        await self._wait()
        if "workouts" in self.failures:
            raise self.failures["workouts"]
        return list(self.workouts)

    async def fetch_daily_total(self, metric: DailyMetric, day: date) -> float | None:
        self.calls.append(metric.value)
        await self._wait()
        if metric.value in self.failures:
            raise self.failures[metric.value]
        return self.totals.get(metric)

    async def _wait(self) -> None:
        if self.gate is not None:
            await self.gate.wait()


def build_day_service(
    clock: FixedClock | None = None,
    templates: list[RoutineTaskTemplate] | None = None,
    targets: UserTargets | None = None,
    repository: InMemoryDayRepository | None = None,
) -> DayService:
    settings_repository = InMemoryUserSettingsRepository(
        targets=targets, templates=list(templates or [])
    )
    return DayService(
        repository=repository or InMemoryDayRepository(),
        user_settings_service=UserSettingsService(settings_repository),
        clock=clock or FixedClock(),
    )


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def day_service(clock: FixedClock) -> DayService:
    return build_day_service(clock)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        api_token="api-token",
    )


@pytest.fixture
def provider() -> FakeHealthProvider:
    return FakeHealthProvider()


@pytest.fixture
def container(
    settings: Settings, clock: FixedClock, provider: FakeHealthProvider
) -> AppContainer:
    day_service = build_day_service(clock)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        user_settings_service=day_service.user_settings_service,
        day_service=day_service,
        health_sync_service=HealthSyncService(
            provider=provider, day_service=day_service
        ),
        day_boundary_detector=DayBoundaryDetector(clock=clock),
        close_resources=close_resources,
    )
