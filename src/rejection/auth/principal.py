"""The authenticated caller of a request."""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from rejection.errors import Forbidden


@dataclass(frozen=True)
class Principal:
    user_id: uuid.UUID
    is_admin: bool = False

    def can_act_for(self, user_id: uuid.UUID) -> bool:
        return self.is_admin or self.user_id == user_id

    def require_self_or_admin(self, user_id: uuid.UUID, message: str = "Forbidden") -> None:
        if not self.can_act_for(user_id):
            raise Forbidden(message)

    def require_admin(self) -> None:
        if not self.is_admin:
            raise Forbidden("Administrator rights required")
