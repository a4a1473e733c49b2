"""Heuristic threat score from headlines and defense stock moves.

score = 50 + 2 * keyword_hits(first 20 titles) + 10 * mean(changePercent)
clamped to [0, 100]. Quotes with errors are left out of the mean; with no
usable quote the stock contribution is 0.

Pure and I/O free: callers fetch news and quotes themselves.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from ..core.config import IntelConfig, get_config
from ..sources.news_client import NewsPayload
from ..sources.quote_client import NormalizedQuote, usable_change


@dataclass
class ScoreFactors:
    news_activity: int
    defense_stocks: float


@dataclass
class ThreatScore:
    score: float
    factors: ScoreFactors
    produced_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )


def count_keyword_hits(titles: Sequence[str], keywords: Sequence[str]) -> int:
    """Number of titles containing at least one keyword (case-insensitive)."""
    lowered = [kw.lower() for kw in keywords]
    return sum(
        1 for title in titles
        if title and any(kw in title.lower() for kw in lowered)
    )


def mean_change_percent(quotes: Sequence[NormalizedQuote]) -> float:
    changes: List[float] = [c for c in map(usable_change, quotes) if c is not None]
    if not changes:
        return 0.0
    return sum(changes) / len(changes)


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def compute_threat_score(
    news: NewsPayload,
    stocks: Sequence[NormalizedQuote],
    config: Optional[IntelConfig] = None,
) -> ThreatScore:
    cfg = config or get_config()
    titles = [a.title for a in news.articles[: cfg.score_article_window]]

    hits = count_keyword_hits(titles, cfg.threat_keywords)
    avg_change = mean_change_percent(stocks)

    raw = (
        cfg.score_baseline
        + hits * cfg.score_keyword_weight
        + avg_change * cfg.score_stock_weight
    )
    return ThreatScore(
        score=round(clamp(raw), 2),
        factors=ScoreFactors(news_activity=hits, defense_stocks=round(avg_change, 4)),
    )
