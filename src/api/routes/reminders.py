"""
Reminder endpoints: manual send, manager overview and delivery log.
"""

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import (
    get_delivery_events_use_case,
    get_reminder_status_use_case,
    get_send_reminder_use_case,
    require_manager,
)
from src.application.dto.requests import SendReminderRequest
from src.application.dto.responses import (
    DeliveryEventListResponse,
    ErrorResponse,
    ReminderOverviewResponse,
    SendReminderResponse,
)
from src.application.use_cases import (
    ListEmployeeReminderStatusUseCase,
    ListReminderDeliveryEventsUseCase,
    SendReminderUseCase,
)
from src.core.entities.employee import Requester

router = APIRouter(prefix="/api/reminders", tags=["reminders"])


@router.post(
    "/send",
    response_model=SendReminderResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
    },
)
async def send_reminder(
    request: SendReminderRequest,
    requester: Requester = Depends(require_manager),
    use_case: SendReminderUseCase = Depends(get_send_reminder_use_case),
) -> SendReminderResponse:
    """
    Send a reminder to one employee.

    Re-sending to an employee with an open thread bumps that thread.
    Returns 429 with Retry-After while the thread is rate limited.
    """
    result = await use_case.execute(request, requester)
    return use_case.to_response(result)


@router.get("/overview", response_model=ReminderOverviewResponse)
async def reminder_overview(
    location_id: str | None = Query(default=None),
    include_managers: bool = Query(default=False),
    overdue_threshold_days: int | None = Query(
        default=None,
        description="Override the overdue threshold (clamped to 1-60)",
    ),
    requester: Requester = Depends(require_manager),
    use_case: ListEmployeeReminderStatusUseCase = Depends(get_reminder_status_use_case),
) -> ReminderOverviewResponse:
    """Employees with order activity and reminder status."""
    overview = await use_case.execute(
        requester,
        location_id=location_id,
        include_managers=include_managers,
        overdue_threshold_override=overdue_threshold_days,
    )
    return use_case.to_response(overview)


@router.get("/events", response_model=DeliveryEventListResponse)
async def list_delivery_events(
    limit: int = Query(default=50, ge=1, le=200),
    requester: Requester = Depends(require_manager),
    use_case: ListReminderDeliveryEventsUseCase = Depends(get_delivery_events_use_case),
) -> DeliveryEventListResponse:
    """Recent delivery events, newest first."""
    entries = await use_case.execute(requester, limit=limit)
    return use_case.to_response(entries, limit)
