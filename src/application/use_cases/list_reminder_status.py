"""List Employees With Reminder Status Use Case."""

from src.application.dto.responses import ReminderOverviewResponse
from src.application.use_cases.reminder_settings import load_reminder_settings
from src.core.entities.employee import Requester
from src.core.entities.overview import ReminderOverview
from src.core.interfaces.storage import IReminderSettingsStore
from src.core.services.access import ensure_manager
from src.core.services.reminder_overview import ReminderOverviewService


class ListEmployeeReminderStatusUseCase:
    """Manager overview of order activity and open reminder threads."""

    def __init__(
        self,
        overview_service: ReminderOverviewService | None = None,
        settings_store: IReminderSettingsStore | None = None,
    ):
        self._overview_service = overview_service
        self._settings_store = settings_store

    async def _get_overview_service(self) -> ReminderOverviewService:
        if self._overview_service is None:
            from src.application.services import get_overview_service

            self._overview_service = await get_overview_service()
        return self._overview_service

    async def _get_settings_store(self) -> IReminderSettingsStore:
        if self._settings_store is None:
            from src.infrastructure.storage.sqlite import get_settings_store

            self._settings_store = await get_settings_store()
        return self._settings_store

    async def execute(
        self,
        requester: Requester | None,
        location_id: str | None = None,
        include_managers: bool = False,
        overdue_threshold_override: int | None = None,
    ) -> ReminderOverview:
        ensure_manager(requester)
        settings = await load_reminder_settings(await self._get_settings_store())
        service = await self._get_overview_service()
        return await service.build_overview(
            settings,
            location_id=location_id,
            include_managers=include_managers,
            overdue_threshold_override=overdue_threshold_override,
        )

    def to_response(self, overview: ReminderOverview) -> ReminderOverviewResponse:
        return ReminderOverviewResponse(**overview.model_dump())
