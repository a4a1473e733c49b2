"""Reddit OSINT client (OAuth client-credentials + one search).

Token exchange failures are reported exactly like search failures:
an empty post list carrying ``error``.
"""

from dataclasses import dataclass, field
from typing import List, Optional

import httpx
from pydantic import BaseModel

from .base import SourceClient


@dataclass
class SocialPost:
    title: str
    score: int
    comment_count: int
    channel: str
    created_at: Optional[float]
    url: str


@dataclass
class SocialPayload:
    posts: List[SocialPost] = field(default_factory=list)
    error: Optional[str] = None


class _Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: Optional[int] = None


class _PostData(BaseModel):
    title: str = ""
    score: int = 0
    num_comments: int = 0
    subreddit: str = ""
    created_utc: Optional[float] = None
    url: str = ""


class _Child(BaseModel):
    data: _PostData


class _ListingData(BaseModel):
    children: List[_Child] = []


class _Listing(BaseModel):
    data: _ListingData = _ListingData()


class SocialClient(SourceClient[SocialPayload]):
    name = "social"

    async def _fetch(self) -> SocialPayload:
        creds = self.credentials
        if not (creds.reddit_client_id and creds.reddit_secret):
            raise RuntimeError("REDDIT_CLIENT_ID/REDDIT_SECRET not configured")

        headers = {"User-Agent": self.config.reddit_user_agent}
        async with self.session() as client:
            token = await self._access_token(client, headers)
            url = self.config.reddit_search_url.format(
                channels="+".join(self.config.social_channels)
            )
            resp = await client.get(
                url,
                params={
                    "q": self.config.social_query,
                    "sort": "new",
                    "limit": self.config.social_limit,
                    "restrict_sr": "on",
                },
                headers={**headers, "Authorization": f"Bearer {token}"},
            )
        resp.raise_for_status()
        listing = _Listing.model_validate(resp.json())

        return SocialPayload(posts=[
            SocialPost(
                title=c.data.title,
                score=c.data.score,
                comment_count=c.data.num_comments,
                channel=c.data.subreddit,
                created_at=c.data.created_utc,
                url=c.data.url,
            )
            for c in listing.data.children
        ])

    async def _access_token(self, client: httpx.AsyncClient, headers: dict) -> str:
        resp = await client.post(
            self.config.reddit_token_url,
            data={"grant_type": "client_credentials"},
            auth=(self.credentials.reddit_client_id, self.credentials.reddit_secret),
            headers=headers,
        )
        resp.raise_for_status()
        return _Token.model_validate(resp.json()).access_token

    def fallback(self, reason: str) -> SocialPayload:
        return SocialPayload(error=reason)
