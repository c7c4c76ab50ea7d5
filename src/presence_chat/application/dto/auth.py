from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SignupDTO:
    username: str
    password: str
    display_name: str | None = None
