"""Intelligence engine configuration."""

import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()


def _env(name: str, default: str) -> str:
    """Environment value at call time, or ``default`` when unset or blank."""
    return os.getenv(name, "").strip() or default


@dataclass
class Credentials:
    """Provider credentials supplied through the environment."""
    openai_api_key: Optional[str] = None
    news_api_key: Optional[str] = None
    finnhub_api_key: Optional[str] = None
    reddit_client_id: Optional[str] = None
    reddit_secret: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Credentials":
        def _get(name: str) -> Optional[str]:
            value = os.getenv(name, "").strip()
            return value or None

        return cls(
            openai_api_key=_get("OPENAI_API_KEY"),
            news_api_key=_get("NEWS_API_KEY"),
            finnhub_api_key=_get("FINNHUB_API_KEY"),
            reddit_client_id=_get("REDDIT_CLIENT_ID"),
            reddit_secret=_get("REDDIT_SECRET"),
        )


@dataclass
class IntelConfig:
    # Provider endpoints
    news_api_url: str = "https://newsapi.org/v2/everything"
    finnhub_quote_url: str = "https://finnhub.io/api/v1/quote"
    opensky_states_url: str = "https://opensky-network.org/api/states/all"
    reddit_token_url: str = "https://www.reddit.com/api/v1/access_token"
    reddit_search_url: str = "https://oauth.reddit.com/r/{channels}/search"
    reddit_user_agent: str = field(default_factory=lambda: _env("REDDIT_USER_AGENT", "MilIntelBot/1.0 (osint dashboard)"))

    # News search
    news_query: str = "military OR troops OR deployment OR strike OR conflict OR defense"
    news_page_size: int = 50

    # Defense contractor watch-list
    watch_symbols: List[str] = field(default_factory=lambda: [
        "LMT", "RTX", "NOC", "GD", "BA", "HII", "LHX",
    ])

    # ICAO24 prefixes treated as military (US ranges, simplified)
    military_icao_prefixes: List[str] = field(default_factory=lambda: ["AE", "15", "16"])
    max_flights: int = 50

    # Reddit search
    social_channels: List[str] = field(default_factory=lambda: [
        "worldnews", "geopolitics", "military",
    ])
    social_query: str = "military OR troops OR deployment"
    social_limit: int = 25

    # Heuristic score
    threat_keywords: List[str] = field(default_factory=lambda: [
        "strike", "invasion", "troops", "deployment", "conflict", "war",
    ])
    score_baseline: float = 50.0
    score_article_window: int = 20
    score_keyword_weight: float = 2.0
    score_stock_weight: float = 10.0

    # Analysis tiers
    mini_model: str = field(default_factory=lambda: _env("MINI_MODEL", "gpt-4o-mini"))
    mini_temperature: float = 0.7
    mini_article_cap: int = 20
    deep_model: str = field(default_factory=lambda: _env("DEEP_MODEL", "gpt-4o"))
    deep_temperature: float = 0.5
    deep_article_cap: int = 30

    # Timeouts (seconds)
    http_timeout: float = 10.0
    analysis_timeout: float = 120.0

    # Scheduling
    tick_interval: float = 60.0
    schedule_timezone: str = "America/New_York"
    skip_if_in_flight: bool = False


# Global singleton
_config: IntelConfig | None = None


def get_config() -> IntelConfig:
    global _config
    if _config is None:
        _config = IntelConfig()
    return _config
