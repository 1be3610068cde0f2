"""
Reminder settings endpoints.
"""

from fastapi import APIRouter, Depends

from src.api.dependencies import (
    get_settings_use_case,
    get_update_settings_use_case,
    require_manager,
)
from src.application.dto.requests import UpdateReminderSettingsRequest
from src.application.dto.responses import ReminderSettingsResponse
from src.application.use_cases import GetReminderSettingsUseCase, UpdateReminderSettingsUseCase
from src.application.use_cases.reminder_settings import settings_to_response
from src.core.entities.employee import Requester

router = APIRouter(prefix="/api/reminder-settings", tags=["reminder-settings"])


@router.get("", response_model=ReminderSettingsResponse)
async def get_reminder_settings(
    requester: Requester = Depends(require_manager),
    use_case: GetReminderSettingsUseCase = Depends(get_settings_use_case),
) -> ReminderSettingsResponse:
    """Current organisation settings."""
    return settings_to_response(await use_case.execute(requester))


@router.patch("", response_model=ReminderSettingsResponse)
async def update_reminder_settings(
    request: UpdateReminderSettingsRequest,
    requester: Requester = Depends(require_manager),
    use_case: UpdateReminderSettingsUseCase = Depends(get_update_settings_use_case),
) -> ReminderSettingsResponse:
    """Update any subset of the settings."""
    return settings_to_response(await use_case.execute(request, requester))
