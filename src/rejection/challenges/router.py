"""Weekly challenge API endpoints."""

from __future__ import annotations

import uuid
from typing import Literal

from fastapi import APIRouter, Depends, Query, Response

from rejection.auth.dependencies import get_admin_principal, get_current_principal
from rejection.auth.principal import Principal
from rejection.challenges.schemas import (
    ChallengeCreateRequest,
    ChallengeListResponse,
    ChallengeResponse,
    ChallengeUpdateRequest,
    SelectWinnerRequest,
    SelectWinnerResponse,
)
from rejection.challenges.service import (
    create_challenge,
    delete_challenge,
    get_challenge,
    select_winner,
    update_challenge,
)
from rejection.challenges.week_utils import get_current_week
from rejection.dependencies import get_rules, get_store
from rejection.errors import NotFound
from rejection.gamification.ledger import LedgerRules
from rejection.gamification.schemas import AwardData
from rejection.store.base import ChallengeRecord, NewChallenge, Store, SubmissionRecord
from rejection.submissions.schemas import SubmissionListResponse, SubmissionResponse

router = APIRouter(prefix="/api/v1/challenges", tags=["Challenges"])


def _to_response(challenge: ChallengeRecord) -> ChallengeResponse:
    return ChallengeResponse(
        id=challenge.id,
        week=challenge.week,
        year=challenge.year,
        title=challenge.title,
        description=challenge.description,
        tiktok_link=challenge.tiktok_link,
        winner_submission_id=challenge.winner_submission_id,
        created_at=challenge.created_at,
    )


def _submission_response(submission: SubmissionRecord, principal: Principal) -> SubmissionResponse:
    # Contact details are only shown to the owner and to admins
    private = principal.can_act_for(submission.user_id)
    return SubmissionResponse(
        id=submission.id,
        challenge_id=submission.challenge_id,
        user_id=submission.user_id,
        comment=submission.comment,
        video_url=submission.video_url,
        contact_method=submission.contact_method if private else None,
        contact_value=submission.contact_value if private else None,
        is_completion=submission.is_completion,
        created_at=submission.created_at,
    )


# ── Public endpoints ──


@router.get("", response_model=ChallengeListResponse)
async def list_challenges(
    year: int | None = Query(None, ge=2024),
    store: Store = Depends(get_store),
) -> ChallengeListResponse:
    """Challenges for a year, in week order. Defaults to the current ISO year."""
    if year is None:
        _, year = get_current_week()
    challenges = await store.challenges.list_for_year(year)
    return ChallengeListResponse(challenges=[_to_response(c) for c in challenges])


@router.get("/current", response_model=ChallengeResponse)
async def current_challenge(store: Store = Depends(get_store)) -> ChallengeResponse:
    """This week's challenge."""
    week, year = get_current_week()
    challenge = await store.challenges.get_by_week(week, year)
    if challenge is None:
        raise NotFound(f"No challenge for week {week}, {year}")
    return _to_response(challenge)


# ── Admin endpoints ──


@router.post("/winner", response_model=SelectWinnerResponse, response_model_exclude_none=True)
async def choose_winner(
    body: SelectWinnerRequest,
    _admin: Principal = Depends(get_admin_principal),
    store: Store = Depends(get_store),
    rules: LedgerRules = Depends(get_rules),
) -> SelectWinnerResponse:
    """Record the winning submission and award the winner bonus."""
    selection = await select_winner(store, rules, body.challenge_id, body.submission_id)

    if not selection.newly_selected:
        message = "Winner was already selected"
    elif selection.xp_awarded:
        message = "Winner selected and XP awarded"
    else:
        message = "Winner selected"

    data = None
    if selection.award is not None:
        data = AwardData(
            new_xp=selection.award.new_xp,
            new_rank=selection.award.new_rank,
            new_challenges_completed=selection.award.new_challenges_completed,
            xp_added=selection.award.xp_added,
        )
    return SelectWinnerResponse(
        message=message,
        xp_awarded=selection.xp_awarded,
        data=data,
        warnings=selection.warnings,
    )


@router.post("", response_model=ChallengeResponse, status_code=201)
async def create(
    body: ChallengeCreateRequest,
    _admin: Principal = Depends(get_admin_principal),
    store: Store = Depends(get_store),
) -> ChallengeResponse:
    """Create the challenge for a week."""
    created = await create_challenge(
        store,
        NewChallenge(
            week=body.week,
            year=body.year,
            title=body.title.strip(),
            description=body.description,
            tiktok_link=str(body.tiktok_link) if body.tiktok_link else None,
        ),
    )
    return _to_response(created)


@router.get("/{challenge_id}", response_model=ChallengeResponse)
async def get_one(challenge_id: uuid.UUID, store: Store = Depends(get_store)) -> ChallengeResponse:
    return _to_response(await get_challenge(store, challenge_id))


@router.patch("/{challenge_id}", response_model=ChallengeResponse)
async def update(
    challenge_id: uuid.UUID,
    body: ChallengeUpdateRequest,
    _admin: Principal = Depends(get_admin_principal),
    store: Store = Depends(get_store),
) -> ChallengeResponse:
    """Edit a challenge's title, description or link. Omitted fields are left alone."""
    changes: dict[str, object] = body.model_dump(exclude_unset=True)
    if "title" in changes and isinstance(changes["title"], str):
        changes["title"] = changes["title"].strip()
    if "tiktok_link" in changes and changes["tiktok_link"] is not None:
        changes["tiktok_link"] = str(changes["tiktok_link"])
    return _to_response(await update_challenge(store, challenge_id, changes))


@router.delete("/{challenge_id}", status_code=204)
async def delete(
    challenge_id: uuid.UUID,
    _admin: Principal = Depends(get_admin_principal),
    store: Store = Depends(get_store),
) -> Response:
    await delete_challenge(store, challenge_id)
    return Response(status_code=204)


@router.get("/{challenge_id}/submissions", response_model=SubmissionListResponse)
async def list_submissions(
    challenge_id: uuid.UUID,
    sort: Literal["newest", "oldest"] = Query("newest"),
    principal: Principal = Depends(get_current_principal),
    store: Store = Depends(get_store),
) -> SubmissionListResponse:
    """Submissions for a challenge, newest first unless ``sort=oldest``."""
    await get_challenge(store, challenge_id)
    submissions = await store.submissions.list_for_challenge(challenge_id, newest_first=sort == "newest")
    return SubmissionListResponse(submissions=[_submission_response(s, principal) for s in submissions])
