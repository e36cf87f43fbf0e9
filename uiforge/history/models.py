"""Data models for version history.

A Version pairs one accepted request with the plan, the generated source and
an optional explanation. Versions are immutable once created.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from uiforge.ir import Explanation, Plan


@dataclass(frozen=True)
class VersionSummary:
    """Lightweight listing entry; never carries code or plan.

    Attributes:
        id: Version identifier.
        timestamp: Creation time (UTC).
        user_intent: The user text that produced the version.
        is_modification: Whether it modified an earlier version.
    """

    id: str
    timestamp: datetime
    user_intent: str
    is_modification: bool

    def to_dict(self) -> dict[str, Any]:
        """Convert to the history listing payload."""
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "userIntent": self.user_intent,
            "isModification": self.is_modification,
        }


@dataclass(frozen=True)
class Version:
    """An accepted generation or modification.

    Attributes:
        id: Unique version identifier.
        timestamp: Creation time (UTC).
        user_intent: The user text that produced the version.
        plan: The validated plan.
        code: Generated source that passed static validation.
        explanation: Optional explanation of the layout.
        is_modification: Whether it modified an earlier version.
        parent_id: The version it was derived from, if any.
    """

    id: str
    user_intent: str
    plan: Plan
    code: str
    explanation: Explanation | None = None
    is_modification: bool = False
    parent_id: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def create(
        cls,
        user_intent: str,
        plan: Plan,
        code: str,
        explanation: Explanation | None = None,
        is_modification: bool = False,
        parent_id: str | None = None,
    ) -> "Version":
        """Factory method to create a new version with generated ID."""
        return cls(
            id=str(uuid4()),
            user_intent=user_intent,
            plan=plan,
            code=code,
            explanation=explanation,
            is_modification=is_modification,
            parent_id=parent_id,
        )

    def summary(self) -> VersionSummary:
        """Listing metadata for this version."""
        return VersionSummary(
            id=self.id,
            timestamp=self.timestamp,
            user_intent=self.user_intent,
            is_modification=self.is_modification,
        )

    def to_payload(self) -> dict[str, Any]:
        """Convert to the payload returned by generate/modify/rollback."""
        payload: dict[str, Any] = {
            "id": self.id,
            "code": self.code,
            "plan": self.plan.to_json_dict(),
        }
        if self.explanation is not None:
            payload["explanation"] = self.explanation.to_json_dict()
        return payload
