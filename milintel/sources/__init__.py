"""Provider clients. Each one returns a typed fallback instead of raising."""
from .base import SourceClient
from .news_client import NewsClient, NewsPayload, Article
from .quote_client import QuoteClient, NormalizedQuote
from .flight_client import FlightClient, FlightPayload, Flight
from .social_client import SocialClient, SocialPayload, SocialPost
from .vessel_client import VesselClient, VesselPayload

__all__ = [
    "SourceClient",
    "NewsClient", "NewsPayload", "Article",
    "QuoteClient", "NormalizedQuote",
    "FlightClient", "FlightPayload", "Flight",
    "SocialClient", "SocialPayload", "SocialPost",
    "VesselClient", "VesselPayload",
]
