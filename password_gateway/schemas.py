"""Password gateway — request/response schemas and email parsing."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel


@dataclass(frozen=True)
class EmailAddress:
    """A mailbox address split into the user store's key."""

    local_part: str
    domain_part: str

    def __str__(self) -> str:
        return f"{self.local_part}@{self.domain_part}"


def parse_email(value: object) -> EmailAddress | None:
    """Split ``value`` at its single ``@``; ``None`` when either side is empty."""
    if not isinstance(value, str):
        return None
    local_part, sep, domain_part = value.strip().partition("@")
    if not sep or not local_part or not domain_part or "@" in domain_part:
        return None
    return EmailAddress(local_part=local_part, domain_part=domain_part)


class PasswordStatusResponse(BaseModel):
    email: str
    password_initialized: bool
    must_change_password: bool
