"""XP and rank API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from rejection.auth.dependencies import get_current_principal
from rejection.auth.principal import Principal
from rejection.dependencies import get_rules, get_store
from rejection.gamification.ledger import LedgerRules
from rejection.gamification.profile_writer import require_profile
from rejection.gamification.schemas import (
    AllRanksResponse,
    AwardData,
    ProfileXPResponse,
    RankEntry,
    XPUpdateRequest,
    XPUpdateResponse,
)
from rejection.gamification.xp_service import XPUpdateService
from rejection.store.base import Store

router = APIRouter(prefix="/api/v1", tags=["Gamification"])


@router.post("/xp/update", response_model=XPUpdateResponse, response_model_exclude_none=True)
async def update_xp(
    body: XPUpdateRequest,
    principal: Principal = Depends(get_current_principal),
    store: Store = Depends(get_store),
    rules: LedgerRules = Depends(get_rules),
) -> XPUpdateResponse:
    """Award XP for an action on behalf of the caller (or any user, for admins)."""
    principal.require_self_or_admin(body.user_id, "Not authorized to update XP for this user")
    result = await XPUpdateService(store, rules).award(body.user_id, body.action, body.challenge_id)
    return XPUpdateResponse(
        data=AwardData(
            new_xp=result.new_xp,
            new_rank=result.new_rank,
            new_challenges_completed=result.new_challenges_completed,
            xp_added=result.xp_added,
            message=result.message,
        )
    )


@router.get("/ranks", response_model=AllRanksResponse)
async def list_ranks(rules: LedgerRules = Depends(get_rules)) -> AllRanksResponse:
    """The rank ladder, lowest first."""
    return AllRanksResponse(
        ranks=[RankEntry(name=r.name, threshold=r.threshold) for r in rules.rank_table.ranks]
    )


@router.get("/profiles/me/xp", response_model=ProfileXPResponse)
async def get_my_xp(
    principal: Principal = Depends(get_current_principal),
    store: Store = Depends(get_store),
    rules: LedgerRules = Depends(get_rules),
) -> ProfileXPResponse:
    """Current XP, rank and progress toward the next rank."""
    profile = await require_profile(store, principal.user_id, "User profile not found")
    nxt = rules.rank_table.next_rank(profile.experience_points)
    return ProfileXPResponse(
        experience_points=profile.experience_points,
        rank_level=rules.rank_table.rank_for(profile.experience_points),
        challenges_completed=profile.challenges_completed,
        next_rank=nxt.name if nxt else None,
        xp_to_next_rank=nxt.threshold - profile.experience_points if nxt else None,
    )
