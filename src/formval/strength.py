"""
Password strength checking.

The ``password`` validation hands scoring to a ``PasswordChecker``. Forms
use ``RequirementChecker`` unless given another one, e.g. a checker that
calls out to an external policy service.
"""

import string
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

COMMON_PASSWORDS = frozenset({
    "123456", "123456789", "12345678", "12345", "1234567", "111111",
    "password", "password1", "password123", "passw0rd", "qwerty",
    "qwerty123", "abc123", "letmein", "welcome", "monkey", "dragon",
    "iloveyou", "admin", "login", "princess", "sunshine", "football",
    "baseball", "master", "trustno1", "000000", "654321", "superman",
})


class PasswordRequirements(BaseModel):
    """Which properties a password must have.

    ``length`` is a minimum number of characters; every boolean switches a
    requirement on. ``common`` rejects well-known passwords.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    length: int = Field(default=6, ge=0)
    lowercase: bool = True
    uppercase: bool = True
    digits: bool = False
    whitespace: bool = False
    punctuation: bool = False
    common: bool = True


class StrengthReport(BaseModel):
    """Outcome of a password check."""

    passed: bool
    score: int = 0
    unmet: list[str] = Field(default_factory=list)

    @property
    def reason(self) -> str | None:
        if self.passed:
            return None
        return self.unmet[0] if self.unmet else "too-weak"


@runtime_checkable
class PasswordChecker(Protocol):
    """Anything that can score a password. ``check`` may be async."""

    def check(
        self,
        password: str,
        requirements: PasswordRequirements,
        min_score: int,
    ) -> Any: ...


class RequirementChecker:
    """Scores one point per satisfied requirement.

    A password passes when every enabled requirement is satisfied and the
    score reaches ``min_score``.
    """

    def __init__(self, common_passwords: frozenset[str] = COMMON_PASSWORDS):
        self.common_passwords = common_passwords

    def check(
        self,
        password: str,
        requirements: PasswordRequirements,
        min_score: int = 0,
    ) -> StrengthReport:
        tests: Mapping[str, bool] = {
            "length": len(password) >= requirements.length,
            "lowercase": not requirements.lowercase or any(c.islower() for c in password),
            "uppercase": not requirements.uppercase or any(c.isupper() for c in password),
            "digits": not requirements.digits or any(c.isdigit() for c in password),
            "whitespace": not requirements.whitespace or any(c.isspace() for c in password),
            "punctuation": (
                not requirements.punctuation
                or any(c in string.punctuation for c in password)
            ),
            "common": (
                not requirements.common
                or password.lower() not in self.common_passwords
            ),
        }
        unmet = [name for name, ok in tests.items() if not ok]
        score = len(tests) - len(unmet)
        return StrengthReport(
            passed=not unmet and score >= min_score,
            score=score,
            unmet=unmet,
        )
