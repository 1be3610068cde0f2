"""
Recurring reminder rule endpoints.
"""

from fastapi import APIRouter, Depends, Response, status

from src.api.dependencies import (
    Caller,
    get_caller,
    get_delete_rule_use_case,
    get_evaluate_rules_use_case,
    get_list_rules_use_case,
    get_upsert_rule_use_case,
    require_manager,
)
from src.application.dto.requests import (
    EvaluateRecurringRulesRequest,
    UpsertRecurringRuleRequest,
)
from src.application.dto.responses import (
    ErrorResponse,
    RecurringEvaluationResponse,
    RecurringRuleListResponse,
    RecurringRuleResponse,
)
from src.application.use_cases import (
    DeleteRecurringRuleUseCase,
    EvaluateRecurringRulesUseCase,
    ListRecurringRulesUseCase,
    UpsertRecurringRuleUseCase,
)
from src.application.use_cases.manage_recurring_rules import rule_to_response
from src.core.entities.employee import Requester

router = APIRouter(prefix="/api/recurring-reminders", tags=["recurring-reminders"])


@router.post("/evaluate", response_model=RecurringEvaluationResponse)
async def evaluate_rules(
    request: EvaluateRecurringRulesRequest | None = None,
    caller: Caller = Depends(get_caller),
    use_case: EvaluateRecurringRulesUseCase = Depends(get_evaluate_rules_use_case),
) -> RecurringEvaluationResponse:
    """
    Run one evaluation pass.

    Accepts a manager token or the service token used by the cron caller.
    """
    result = await use_case.execute(
        request or EvaluateRecurringRulesRequest(),
        requester=caller.requester,
        service_call=caller.is_service,
    )
    return use_case.to_response(result)


@router.get("", response_model=RecurringRuleListResponse)
async def list_rules(
    requester: Requester = Depends(require_manager),
    use_case: ListRecurringRulesUseCase = Depends(get_list_rules_use_case),
) -> RecurringRuleListResponse:
    """List rules, newest first."""
    return use_case.to_response(await use_case.execute(requester))


@router.put(
    "",
    response_model=RecurringRuleResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def upsert_rule(
    request: UpsertRecurringRuleRequest,
    requester: Requester = Depends(require_manager),
    use_case: UpsertRecurringRuleUseCase = Depends(get_upsert_rule_use_case),
) -> RecurringRuleResponse:
    """Create a rule, or replace the one named by ``id``."""
    return rule_to_response(await use_case.execute(request, requester))


@router.delete(
    "/{rule_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_rule(
    rule_id: str,
    requester: Requester = Depends(require_manager),
    use_case: DeleteRecurringRuleUseCase = Depends(get_delete_rule_use_case),
) -> Response:
    """Delete a rule."""
    await use_case.execute(rule_id, requester)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
