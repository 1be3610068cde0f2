"""
Reminder Overview Aggregator.

Builds the manager dashboard snapshot and keeps thread state eventually
consistent by resolving stale threads it comes across.
"""

from datetime import UTC, datetime

from src.config import get_logger
from src.core.entities.employee import EmployeeRole
from src.core.entities.overview import (
    EmployeeReminderState,
    EmployeeReminderStatusRow,
    OverviewStats,
    ReminderOverview,
    ReminderThreadSummary,
)
from src.core.entities.reminder import ReminderThread
from src.core.entities.settings import ReminderSystemSettings
from src.core.interfaces.storage import IEmployeeStore, IOrderStore, IReminderStore
from src.core.services.conditions import days_between
from src.core.services.reminder_threads import ReminderThreadService
from src.core.services.schedule import date_key, resolve_timezone

logger = get_logger(__name__)


class ReminderOverviewService:
    """Read-side aggregation across employees, orders and active threads."""

    def __init__(
        self,
        employee_store: IEmployeeStore,
        order_store: IOrderStore,
        reminder_store: IReminderStore,
        timezone: str = "America/Los_Angeles",
    ) -> None:
        self._employees = employee_store
        self._orders = order_store
        self._reminders = reminder_store
        self._threads = ReminderThreadService(reminder_store)
        self._tz = resolve_timezone(timezone)

    async def build_overview(
        self,
        settings: ReminderSystemSettings,
        location_id: str | None = None,
        include_managers: bool = False,
        overdue_threshold_override: int | None = None,
        now: datetime | None = None,
    ) -> ReminderOverview:
        now = now or datetime.now(UTC)
        effective = settings.with_overdue_threshold(overdue_threshold_override)
        threshold = effective.overdue_threshold_days

        roles = [EmployeeRole.EMPLOYEE]
        if include_managers:
            roles.append(EmployeeRole.MANAGER)
        employees = await self._employees.list_employees(roles=roles, location_id=location_id)

        if not employees:
            return ReminderOverview(settings=effective, generated_at=now)

        ids = [e.id for e in employees]
        locations = {loc.id: loc for loc in await self._employees.list_locations(active_only=True)}
        latest_orders = await self._orders.get_latest_orders(ids)
        active_threads = await self._reminders.list_active_threads(ids)

        warnings: list[str] = []
        pending = 0
        active_by_employee: dict[str, ReminderThread] = {}
        seen_pairs: dict[tuple[str, str], list[str]] = {}

        resolved: set[str] = set()

        for thread in active_threads:
            if thread.id in resolved:
                continue
            latest_order = latest_orders.get(thread.employee_id)
            resolved.update(await self._threads.resolve_stale(thread, latest_order, warnings))
            # A failed resolution is already in warnings; still not pending
            if thread.id in resolved or self._threads.is_stale(thread, latest_order):
                continue
            pending += 1
            seen_pairs.setdefault((thread.employee_id, thread.location_id or ""), []).append(
                thread.id
            )
            active_by_employee.setdefault(thread.employee_id, thread)

        for (employee_id, pair_location), thread_ids in seen_pairs.items():
            if len(thread_ids) > 1:
                logger.warning(
                    "duplicate_active_reminder_threads",
                    employee_id=employee_id,
                    location_id=pair_location or None,
                    reminder_ids=thread_ids,
                )
                warnings.append(
                    f"Multiple active reminder threads for employee {employee_id}: "
                    f"{', '.join(thread_ids)}"
                )

        today = date_key(now, self._tz)
        rows: list[EmployeeReminderStatusRow] = []
        for employee in employees:
            latest_order = latest_orders.get(employee.id)
            last_order_at = latest_order.created_at if latest_order else employee.last_order_at
            days_since = (
                days_between(date_key(last_order_at, self._tz), today)
                if last_order_at is not None
                else None
            )

            active = active_by_employee.get(employee.id)
            if active is not None:
                state = EmployeeReminderState.REMINDER_ACTIVE
            elif days_since is None or days_since >= threshold:
                state = EmployeeReminderState.OVERDUE
            else:
                state = EmployeeReminderState.OK

            default_location = locations.get(employee.default_location_id or "")
            order_location = (
                locations.get(latest_order.location_id or "") if latest_order else None
            )

            rows.append(
                EmployeeReminderStatusRow(
                    user_id=employee.id,
                    name=employee.display_name,
                    email=employee.email,
                    role=employee.role,
                    location_id=employee.default_location_id,
                    location_name=(
                        (default_location and default_location.name)
                        or (order_location and order_location.name)
                        or "Unassigned"
                    ),
                    location_short_code=(
                        (default_location and default_location.short_code)
                        or (order_location and order_location.short_code)
                        or None
                    ),
                    last_order_at=last_order_at,
                    last_activity_at=employee.last_active_at,
                    days_since_last_order=days_since,
                    status=state,
                    notifications_enabled=employee.notifications_enabled,
                    active_reminder=(
                        ReminderThreadSummary(
                            id=active.id,
                            location_id=active.location_id,
                            manager_id=active.manager_id,
                            created_at=active.created_at,
                            last_reminded_at=active.last_reminded_at,
                            reminder_count=active.reminder_count,
                        )
                        if active is not None
                        else None
                    ),
                    is_suspended=employee.is_suspended,
                )
            )

        stats = OverviewStats(
            pending_reminders=pending,
            overdue_employees=sum(1 for r in rows if r.status == EmployeeReminderState.OVERDUE),
            notifications_off=sum(1 for r in rows if r.notifications_off),
        )

        logger.info(
            "reminder_overview_built",
            employees=len(rows),
            pending_reminders=stats.pending_reminders,
            overdue_employees=stats.overdue_employees,
            warnings=len(warnings),
        )

        return ReminderOverview(
            employees=rows,
            stats=stats,
            settings=effective,
            generated_at=now,
            warnings=warnings,
        )
