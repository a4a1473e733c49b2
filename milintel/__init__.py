"""Military OSINT aggregation engine.

Provides:
- Provider clients (NewsAPI, Finnhub, OpenSky, Reddit, naval placeholder)
  that degrade to typed fallbacks instead of raising
- Concurrent snapshot aggregation
- Heuristic threat score
- Mini/deep model analysis with a single cached result per tier
- US-Eastern cadence scheduler

Usage:
    from milintel.service import IntelService
    service = IntelService.from_env()
    service.start()
"""

from .models import AnalysisError, AnalysisResult, Tier
from .state import SharedState

__all__ = ["AnalysisError", "AnalysisResult", "Tier", "SharedState"]
