"""Prompt builders for the two analysis tiers."""

import json
from typing import Any, Dict, List

from ..aggregator import SourceSnapshot
from ..serialize import to_jsonable

MINI_SYSTEM = (
    "You are an expert military intelligence analyst specializing in predicting "
    "US military interventions from multi-source intelligence."
)

DEEP_SYSTEM = (
    "You are a senior military intelligence analyst with decades of experience "
    "predicting US military interventions. You combine geopolitical analysis, "
    "defense industry indicators, SIGINT and open-source intelligence into "
    "accurate threat assessments."
)

MINI_KEYS = ["threatLevel", "regions", "probability", "indicators", "summary"]

DEEP_KEYS = [
    "threatLevel", "confidenceInterval", "regions", "probabilities",
    "indicators", "historicalContext", "scenarios", "executiveSummary",
    "monitoringPriorities",
]


def _block(value: Any) -> str:
    return json.dumps(to_jsonable(value), indent=2, default=str)


def _articles(snapshot: SourceSnapshot, cap: int) -> List[Any]:
    news = snapshot.get("news")
    return list(getattr(news, "articles", None) or [])[:cap]


def build_mini_messages(snapshot: SourceSnapshot, article_cap: int = 20) -> List[Dict[str, str]]:
    prompt = f"""You are a military intelligence analyst. Analyze the following real-time data and provide a threat assessment:

NEWS HEADLINES:
{_block(_articles(snapshot, article_cap))}

DEFENSE CONTRACTOR STOCKS:
{_block(snapshot.get("stocks", []))}

MILITARY FLIGHT ACTIVITY:
{_block(snapshot.get("flights"))}

Provide:
1. Overall threat level (0-100 scale)
2. Top 3 regions of concern
3. Probability of US military action in next 30 days (percentage)
4. Key indicators driving your assessment
5. Brief summary (2-3 sentences)

Format as JSON with keys: {", ".join(MINI_KEYS)}.
"regions" is an array of region names; "probability" is a number from 0 to 100."""

    return [
        {"role": "system", "content": MINI_SYSTEM},
        {"role": "user", "content": prompt},
    ]


def build_deep_messages(snapshot: SourceSnapshot, article_cap: int = 30) -> List[Dict[str, str]]:
    prompt = f"""You are a senior military intelligence analyst conducting a deep threat assessment. Analyze this comprehensive intelligence package:

NEWS & GEOPOLITICAL INTEL:
{_block(_articles(snapshot, article_cap))}

DEFENSE INDUSTRY INDICATORS:
{_block(snapshot.get("stocks", []))}

MILITARY AIR ACTIVITY:
{_block(snapshot.get("flights"))}

NAVAL MOVEMENTS:
{_block(snapshot.get("navy"))}

SOCIAL INTELLIGENCE (REDDIT):
{_block(snapshot.get("social"))}

Provide a COMPREHENSIVE assessment including:
1. Overall threat level (0-100 scale) with confidence interval
2. Detailed regional breakdown (top 5 hotspots, each with name, score and reasoning)
3. Probability estimates for the next 7, 30 and 90 days
4. Key indicators and their weight in your analysis
5. Historical context and pattern matching
6. Specific scenarios most likely to trigger intervention
7. Executive summary (3-4 paragraphs)
8. Recommended monitoring priorities

Format as JSON with keys: {", ".join(DEEP_KEYS)}.
"regions" is an array of objects with name/score/reasoning; "probabilities" has keys 7day, 30day, 90day."""

    return [
        {"role": "system", "content": DEEP_SYSTEM},
        {"role": "user", "content": prompt},
    ]
