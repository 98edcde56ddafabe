"""Pydantic request/response models for submission endpoints."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from rejection.gamification.reconciliation import CleanupMode
from rejection.gamification.schemas import AwardData


class CreateSubmissionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    challenge_id: uuid.UUID = Field(alias="challengeId")
    comment: str = Field(min_length=1, max_length=1000)
    video_url: str | None = Field(default=None, alias="videoUrl", max_length=2048)
    contact_method: Literal["email", "instagram"] = Field(alias="contactMethod")
    contact_value: str = Field(alias="contactValue", min_length=1, max_length=256)


class SubmissionCreatedData(AwardData):
    submission_id: uuid.UUID | None = Field(default=None, alias="submissionId")
    first_completion: bool = Field(alias="firstCompletion")


class CreateSubmissionResponse(BaseModel):
    success: bool = True
    data: SubmissionCreatedData


class DeleteSubmissionRequest(BaseModel):
    """Delete payload, read from either a JSON body or a form post."""

    model_config = ConfigDict(populate_by_name=True)

    submission_id: uuid.UUID = Field(alias="submissionId")
    cleanup_mode: CleanupMode = Field(default=CleanupMode.SINGLE, alias="cleanupMode")


class DeletionData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    new_xp: int = Field(alias="newXP")
    new_challenges_completed: int = Field(alias="newChallengesCompleted")
    new_rank: str = Field(alias="newRank")
    xp_removed: int = Field(alias="xpRemoved")
    submissions_deleted: int = Field(alias="submissionsDeleted")


class DeleteSubmissionResponse(BaseModel):
    success: bool = True
    message: str = "Submission deleted successfully"
    data: DeletionData | None = None


class DailyLimitRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: uuid.UUID = Field(alias="userId")


class ResetTime(BaseModel):
    date: datetime
    hours: int
    minutes: int


class DailyLimitData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    submissions_today: int = Field(alias="submissionsToday")
    submissions_remaining: int = Field(alias="submissionsRemaining")
    max_daily_submissions: int = Field(alias="maxDailySubmissions")
    can_submit: bool = Field(alias="canSubmit")
    reset_time: ResetTime = Field(alias="resetTime")


class DailyLimitResponse(BaseModel):
    success: bool = True
    data: DailyLimitData


class SubmissionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: uuid.UUID
    challenge_id: uuid.UUID = Field(alias="challengeId")
    user_id: uuid.UUID = Field(alias="userId")
    comment: str | None = None
    video_url: str | None = Field(default=None, alias="videoUrl")
    contact_method: str | None = Field(default=None, alias="contactMethod")
    contact_value: str | None = Field(default=None, alias="contactValue")
    is_completion: bool = Field(alias="isCompletion")
    created_at: datetime = Field(alias="createdAt")


class SubmissionListResponse(BaseModel):
    submissions: list[SubmissionResponse]
