"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from zoneinfo import ZoneInfo

from supabase import create_client

from adherence_tracker.adapters.httpx_health_provider import HttpxHealthProvider
from adherence_tracker.adapters.supabase_day_repository import SupabaseDayRepository
from adherence_tracker.adapters.supabase_user_settings_repository import (
    SupabaseUserSettingsRepository,
)
from adherence_tracker.config import Settings
from adherence_tracker.services.day_boundary import DayBoundaryDetector
from adherence_tracker.services.days import DayService
from adherence_tracker.services.health_sync import HealthSyncService
from adherence_tracker.services.user_settings import UserSettingsService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    user_settings_service: UserSettingsService
    day_service: DayService
    health_sync_service: HealthSyncService
    day_boundary_detector: DayBoundaryDetector
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    tz = ZoneInfo(resolved_settings.timezone)

    def clock() -> datetime:
        return datetime.now(tz=tz)

    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    user_settings_service = UserSettingsService(
        SupabaseUserSettingsRepository(supabase_client)
    )
    day_service = DayService(
        repository=SupabaseDayRepository(supabase_client),
        user_settings_service=user_settings_service,
        routine_points=resolved_settings.routine_points,
        clock=clock,
    )
    provider = HttpxHealthProvider.create(
        base_url=resolved_settings.health_provider_url,
        token=resolved_settings.health_provider_token,
    )
    health_sync_service = HealthSyncService(provider=provider, day_service=day_service)
    detector = DayBoundaryDetector(
        clock=clock, cutoff_hour=resolved_settings.day_cutoff_hour
    )

    async def close_resources() -> None:
        await provider.close()

    return AppContainer(
        settings=resolved_settings,
        user_settings_service=user_settings_service,
        day_service=day_service,
        health_sync_service=health_sync_service,
        day_boundary_detector=detector,
        close_resources=close_resources,
    )
