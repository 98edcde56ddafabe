"""Submission API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from rejection.auth.dependencies import get_current_principal
from rejection.auth.principal import Principal
from rejection.config import Settings
from rejection.dependencies import get_app_settings, get_rules, get_store
from rejection.errors import InvalidInput
from rejection.gamification.ledger import LedgerRules
from rejection.gamification.reconciliation import SubmissionReconciliationService, parse_cleanup_mode
from rejection.gamification.xp_service import SubmissionDraft
from rejection.store.base import Store
from rejection.submissions.schemas import (
    CreateSubmissionRequest,
    CreateSubmissionResponse,
    DailyLimitData,
    DailyLimitRequest,
    DailyLimitResponse,
    DeleteSubmissionRequest,
    DeleteSubmissionResponse,
    DeletionData,
    ResetTime,
    SubmissionCreatedData,
)
from rejection.submissions.service import check_daily_limit, create_submission

router = APIRouter(prefix="/api/v1/submissions", tags=["Submissions"])


@router.post("", response_model=CreateSubmissionResponse, response_model_exclude_none=True)
async def submit(
    body: CreateSubmissionRequest,
    principal: Principal = Depends(get_current_principal),
    store: Store = Depends(get_store),
    rules: LedgerRules = Depends(get_rules),
    settings: Settings = Depends(get_app_settings),
) -> CreateSubmissionResponse:
    """Submit proof of a completed challenge and earn completion XP."""
    result = await create_submission(
        store,
        rules,
        principal.user_id,
        body.challenge_id,
        SubmissionDraft(
            comment=body.comment,
            video_url=body.video_url or None,
            contact_method=body.contact_method,
            contact_value=body.contact_value,
        ),
        max_daily=settings.max_daily_submissions,
    )
    return CreateSubmissionResponse(
        data=SubmissionCreatedData(
            submission_id=result.submission_id,
            first_completion=result.first_completion,
            new_xp=result.new_xp,
            new_rank=result.new_rank,
            new_challenges_completed=result.new_challenges_completed,
            xp_added=result.xp_added,
            message=result.message,
        )
    )


async def _read_delete_payload(request: Request) -> dict[str, object]:
    """Accept the delete payload as JSON or as a form post."""
    content_type = request.headers.get("content-type", "")
    if "application/json" in content_type:
        try:
            payload = await request.json()
        except ValueError:
            raise InvalidInput("Malformed JSON body") from None
        if not isinstance(payload, dict):
            raise InvalidInput("Request body must be a JSON object")
        return payload
    form = await request.form()
    return dict(form)


@router.post("/delete", response_model=DeleteSubmissionResponse, response_model_exclude_none=True)
async def delete_submission(
    request: Request,
    principal: Principal = Depends(get_current_principal),
    store: Store = Depends(get_store),
    rules: LedgerRules = Depends(get_rules),
) -> DeleteSubmissionResponse:
    """Delete a submission and take back the XP it earned.

    Clients that accept JSON get the reconciled profile numbers back; plain
    form posts only get a success message.
    """
    payload = await _read_delete_payload(request)

    if not payload.get("submissionId"):
        raise InvalidInput("Submission ID is required")
    cleanup_mode = parse_cleanup_mode(payload.get("cleanupMode"))
    try:
        body = DeleteSubmissionRequest.model_validate({**payload, "cleanupMode": cleanup_mode})
    except ValidationError:
        raise InvalidInput("Invalid submission ID") from None

    result = await SubmissionReconciliationService(store, rules).delete_submission(
        body.submission_id, body.cleanup_mode, actor=principal
    )

    response = DeleteSubmissionResponse()
    if "application/json" in request.headers.get("accept", ""):
        response.data = DeletionData(
            new_xp=result.new_xp,
            new_challenges_completed=result.new_challenges_completed,
            new_rank=result.new_rank,
            xp_removed=result.xp_removed,
            submissions_deleted=result.submissions_deleted,
        )
    return response


@router.post("/check-daily-limit", response_model=DailyLimitResponse)
async def daily_limit(
    body: DailyLimitRequest,
    principal: Principal = Depends(get_current_principal),
    store: Store = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
) -> DailyLimitResponse:
    """How many submissions the user has left today."""
    principal.require_self_or_admin(body.user_id)
    status = await check_daily_limit(store, body.user_id, settings.max_daily_submissions)
    return DailyLimitResponse(
        data=DailyLimitData(
            submissions_today=status.submissions_today,
            submissions_remaining=status.submissions_remaining,
            max_daily_submissions=status.max_daily_submissions,
            can_submit=status.can_submit,
            reset_time=ResetTime(
                date=status.reset_at,
                hours=status.reset_hours,
                minutes=status.reset_minutes,
            ),
        )
    )
