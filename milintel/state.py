"""Process-wide store for the latest result of each analysis tier.

Two single-value slots (mini, deep) plus last/next run timestamps.
Nothing is persisted; a restart starts empty.

Writes are whole-value swaps under a lock. Each run takes a generation
number when it starts, and a commit from an older generation than the one
already stored is dropped, so a slow run can never overwrite the result of
a run that started after it.
"""

import itertools
import threading
from typing import Any, Dict, Optional

from .models import AnalysisResult, Tier


class SharedState:
    def __init__(self):
        self._lock = threading.Lock()
        self._generations = itertools.count(1)
        self._slots: Dict[Tier, Optional[AnalysisResult]] = {t: None for t in Tier}
        self._last_run: Dict[Tier, Optional[str]] = {t: None for t in Tier}
        self._next_run: Dict[Tier, Optional[str]] = {t: None for t in Tier}
        self._committed_gen: Dict[Tier, int] = {t: 0 for t in Tier}

    @property
    def mini(self) -> Optional[AnalysisResult]:
        return self._slots[Tier.MINI]

    @property
    def deep(self) -> Optional[AnalysisResult]:
        return self._slots[Tier.DEEP]

    def get(self, tier: Tier) -> Optional[AnalysisResult]:
        return self._slots[tier]

    def last_run(self, tier: Tier) -> Optional[str]:
        return self._last_run[tier]

    def next_run(self, tier: Tier) -> Optional[str]:
        return self._next_run[tier]

    def begin(self, tier: Tier) -> int:
        """Reserve a generation number for a run that is starting now."""
        with self._lock:
            return next(self._generations)

    def commit(self, result: AnalysisResult, generation: int) -> bool:
        """Swap ``result`` into its tier slot unless a newer run already did.

        Returns False when the write was dropped as stale.
        """
        tier = result.tier
        with self._lock:
            if generation < self._committed_gen[tier]:
                return False
            self._slots[tier] = result
            self._last_run[tier] = result.produced_at
            self._committed_gen[tier] = generation
            return True

    def set_next_run(self, tier: Tier, when: Optional[str]) -> None:
        with self._lock:
            self._next_run[tier] = when

    def to_dict(self) -> Dict[str, Any]:
        with self._lock:
            mini, deep = self._slots[Tier.MINI], self._slots[Tier.DEEP]
            return {
                "mini": mini.to_dict() if mini else None,
                "deep": deep.to_dict() if deep else None,
                "lastMiniRun": self._last_run[Tier.MINI],
                "lastDeepRun": self._last_run[Tier.DEEP],
                "nextMiniRun": self._next_run[Tier.MINI],
                "nextDeepRun": self._next_run[Tier.DEEP],
            }
