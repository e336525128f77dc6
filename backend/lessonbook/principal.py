"""Authenticated caller identity."""

from __future__ import annotations

from dataclasses import dataclass

from .core.enums import RoleName


@dataclass(frozen=True)
class CurrentUser:
    """Identity taken from a verified access token."""

    user_id: str
    role: RoleName

    @property
    def id(self) -> str:
        return self.user_id
