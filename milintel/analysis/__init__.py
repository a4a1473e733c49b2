"""Analysis: heuristic threat score and the tiered model pipeline."""
from .threat_score import ThreatScore, ScoreFactors, compute_threat_score
from .llm_client import AnalysisLLM, LLMError
from .schemas import MiniAssessment, DeepAssessment, Region
from .pipeline import AnalysisPipeline, TierProfile, tier_profiles

__all__ = [
    "ThreatScore", "ScoreFactors", "compute_threat_score",
    "AnalysisLLM", "LLMError",
    "MiniAssessment", "DeepAssessment", "Region",
    "AnalysisPipeline", "TierProfile", "tier_profiles",
]
