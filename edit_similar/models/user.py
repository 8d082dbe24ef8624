"""
User model.

Anonymous visitors are represented with ``user_id = 0``; they can still
receive suggestions but never get the preferences link or the plain
"thank you" message.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator


class User(BaseModel):
    """The user who performed an edit or is viewing a page.

    Attributes:
        user_id: Numeric user ID; ``0`` for anonymous users.
        name: User name, or the IP address for anonymous users.
    """

    model_config = ConfigDict(frozen=True)

    user_id: int = 0
    name: str

    @field_validator("user_id")
    @classmethod
    def validate_user_id(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"user_id must be >= 0, got {v}.")
        return v

    @property
    def is_registered(self) -> bool:
        return self.user_id > 0
