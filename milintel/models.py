"""Tier identity and the records a pipeline run produces."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict


class Tier(str, Enum):
    MINI = "mini"
    DEEP = "deep"

    @classmethod
    def parse(cls, value: "str | Tier") -> "Tier":
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"unknown tier: {value!r}") from None


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class AnalysisResult:
    """A validated model assessment stamped with tier, time and model."""
    tier: Tier
    produced_at: str
    model: str
    assessment: Dict[str, Any]

    @property
    def threat_level(self) -> float:
        return self.assessment["threatLevel"]

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.assessment,
            "tier": self.tier.value,
            "producedAt": self.produced_at,
            "model": self.model,
        }


@dataclass(frozen=True)
class AnalysisError:
    """Typed failure of a tier run; never written to shared state."""
    tier: Tier
    error: str
    produced_at: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tier": self.tier.value,
            "error": self.error,
            "producedAt": self.produced_at,
        }
