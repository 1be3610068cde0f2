"""
Dependency injection container for FastAPI.

Provides caller identity, use cases and stores to route handlers.
"""

import hmac
from dataclasses import dataclass

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.application.use_cases import (
    DeleteRecurringRuleUseCase,
    EvaluateRecurringRulesUseCase,
    GetReminderSettingsUseCase,
    ListEmployeeReminderStatusUseCase,
    ListRecurringRulesUseCase,
    ListReminderDeliveryEventsUseCase,
    SendReminderUseCase,
    UpdateReminderSettingsUseCase,
    UpsertRecurringRuleUseCase,
)
from src.config import bind_log_context, get_settings
from src.core.entities.employee import Requester
from src.core.exceptions import UnauthorizedError
from src.core.interfaces.storage import IIdentityStore
from src.core.services.access import ensure_manager
from src.infrastructure.storage.sqlite import get_identity_store

_bearer = HTTPBearer(auto_error=False)


@dataclass
class Caller:
    """Resolved caller: a user, or the cron service token."""

    requester: Requester | None = None
    is_service: bool = False


async def get_identity() -> IIdentityStore:
    """Get identity store."""
    return await get_identity_store()


async def get_caller(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    identity: IIdentityStore = Depends(get_identity),
) -> Caller:
    """
    Resolve the bearer token.

    Raises:
        UnauthorizedError: Missing or unknown token.
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError()

    token = credentials.credentials
    service_token = get_settings().auth.service_token
    if service_token and hmac.compare_digest(token, service_token):
        bind_log_context(caller="service")
        return Caller(is_service=True)

    requester = await identity.get_requester_by_token(token)
    if requester is None:
        raise UnauthorizedError("Invalid or expired token")
    bind_log_context(user_id=requester.user_id)
    return Caller(requester=requester)


async def require_manager(caller: Caller = Depends(get_caller)) -> Requester:
    """Only active managers pass."""
    return ensure_manager(caller.requester)


# Use case dependencies
def get_send_reminder_use_case() -> SendReminderUseCase:
    """Get send reminder use case."""
    return SendReminderUseCase()


def get_reminder_status_use_case() -> ListEmployeeReminderStatusUseCase:
    """Get reminder overview use case."""
    return ListEmployeeReminderStatusUseCase()


def get_delivery_events_use_case() -> ListReminderDeliveryEventsUseCase:
    """Get delivery events use case."""
    return ListReminderDeliveryEventsUseCase()


def get_evaluate_rules_use_case() -> EvaluateRecurringRulesUseCase:
    """Get recurring evaluation use case."""
    return EvaluateRecurringRulesUseCase()


def get_list_rules_use_case() -> ListRecurringRulesUseCase:
    return ListRecurringRulesUseCase()


def get_upsert_rule_use_case() -> UpsertRecurringRuleUseCase:
    return UpsertRecurringRuleUseCase()


def get_delete_rule_use_case() -> DeleteRecurringRuleUseCase:
    return DeleteRecurringRuleUseCase()


def get_settings_use_case() -> GetReminderSettingsUseCase:
    return GetReminderSettingsUseCase()


def get_update_settings_use_case() -> UpdateReminderSettingsUseCase:
    return UpdateReminderSettingsUseCase()
