"""NewsAPI client for military/geopolitical headlines."""

from dataclasses import dataclass, field
from typing import List, Optional

from pydantic import BaseModel

from .base import SourceClient


@dataclass
class Article:
    title: str
    published_at: Optional[str]
    source: str
    url: str = ""
    description: str = ""


@dataclass
class NewsPayload:
    articles: List[Article] = field(default_factory=list)
    total_results: int = 0
    error: Optional[str] = None


class _ApiSource(BaseModel):
    name: Optional[str] = None


class _ApiArticle(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None
    publishedAt: Optional[str] = None
    source: _ApiSource = _ApiSource()


class _ApiResponse(BaseModel):
    status: str = "ok"
    totalResults: int = 0
    articles: List[_ApiArticle] = []
    code: Optional[str] = None
    message: Optional[str] = None


class NewsClient(SourceClient[NewsPayload]):
    """Single keyword-OR search against NewsAPI ``/everything``, newest first."""

    name = "news"

    async def _fetch(self) -> NewsPayload:
        if not self.credentials.news_api_key:
            raise RuntimeError("NEWS_API_KEY not configured")

        params = {
            "q": self.config.news_query,
            "sortBy": "publishedAt",
            "language": "en",
            "pageSize": self.config.news_page_size,
        }
        headers = {"X-Api-Key": self.credentials.news_api_key}

        async with self.session() as client:
            resp = await client.get(self.config.news_api_url, params=params, headers=headers)
        resp.raise_for_status()
        body = _ApiResponse.model_validate(resp.json())
        if body.status != "ok":
            raise RuntimeError(f"newsapi {body.code or 'error'}: {body.message or 'unknown'}")

        articles = [
            Article(
                title=item.title or "",
                published_at=item.publishedAt,
                source=item.source.name or "Unknown",
                url=item.url or "",
                description=item.description or "",
            )
            for item in body.articles
        ]
        articles.sort(key=lambda a: a.published_at or "", reverse=True)
        return NewsPayload(
            articles=articles[: self.config.news_page_size],
            total_results=body.totalResults,
        )

    def fallback(self, reason: str) -> NewsPayload:
        return NewsPayload(error=reason)
