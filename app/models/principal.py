from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated identity extracted from a validated JWT.

    Routes receive this from require_user and pass `user_id` explicitly into
    every progress operation; the core never looks up a "current user".

        user_id: subject from JWT (the learner identity)
        roles: platform roles (admin, user)
    """

    user_id: str
    roles: frozenset[str]

    def has_role(self, role: str) -> bool:
        return role in self.roles
