"""Pydantic request/response models for challenge endpoints."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator

from rejection.gamification.schemas import AwardData


class ChallengeCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    week: int
    year: int
    title: str
    description: str | None = None
    tiktok_link: HttpUrl | None = Field(default=None, alias="tiktokLink")

    @field_validator("tiktok_link", mode="before")
    @classmethod
    def blank_link_is_none(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class ChallengeUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str | None = None
    description: str | None = None
    tiktok_link: HttpUrl | None = Field(default=None, alias="tiktokLink")

    @field_validator("tiktok_link", mode="before")
    @classmethod
    def blank_link_is_none(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class ChallengeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: uuid.UUID
    week: int
    year: int
    title: str
    description: str | None = None
    tiktok_link: str | None = Field(default=None, alias="tiktokLink")
    winner_submission_id: uuid.UUID | None = Field(default=None, alias="winnerSubmissionId")
    created_at: datetime | None = Field(default=None, alias="createdAt")


class ChallengeListResponse(BaseModel):
    challenges: list[ChallengeResponse]


class SelectWinnerRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    submission_id: uuid.UUID = Field(alias="submissionId")
    challenge_id: uuid.UUID = Field(alias="challengeId")


class SelectWinnerResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    xp_awarded: bool = Field(alias="xpAwarded")
    data: AwardData | None = None
    warnings: list[str] = []
