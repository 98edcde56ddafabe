"""Pydantic request/response models for XP endpoints.

Field names on the wire are camelCase to match the web client.
"""

from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict, Field


class XPUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: uuid.UUID = Field(alias="userId")
    action: str
    challenge_id: uuid.UUID | None = Field(default=None, alias="challengeId")


class AwardData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    new_xp: int = Field(alias="newXP")
    new_rank: str = Field(alias="newRank")
    new_challenges_completed: int = Field(alias="newChallengesCompleted")
    xp_added: int = Field(alias="xpAdded")
    message: str | None = None


class XPUpdateResponse(BaseModel):
    success: bool = True
    data: AwardData


# --- Ranks ---


class RankEntry(BaseModel):
    name: str
    threshold: int


class AllRanksResponse(BaseModel):
    ranks: list[RankEntry]


class ProfileXPResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    experience_points: int = Field(alias="experiencePoints")
    rank_level: str = Field(alias="rankLevel")
    challenges_completed: int = Field(alias="challengesCompleted")
    next_rank: str | None = Field(default=None, alias="nextRank")
    xp_to_next_rank: int | None = Field(default=None, alias="xpToNextRank")
