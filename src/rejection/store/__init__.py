"""Row-store repositories."""

from rejection.store.base import (
    ChallengeRecord,
    NewChallenge,
    NewSubmission,
    ProfileRecord,
    Store,
    SubmissionRecord,
)

__all__ = [
    "ChallengeRecord",
    "NewChallenge",
    "NewSubmission",
    "ProfileRecord",
    "Store",
    "SubmissionRecord",
]
