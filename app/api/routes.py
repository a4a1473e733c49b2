"""API routes for the intelligence dashboard."""
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request

from milintel.serialize import to_jsonable
from milintel.service import IntelService

router = APIRouter()


def get_service(request: Request) -> IntelService:
    return request.app.state.intel


ENDPOINTS = {
    "analysis": "/api/analysis - Latest cached mini/deep assessments",
    "score": "/api/score - Heuristic threat score",
    "stock": "/api/stock/SYMBOL - Defense contractor quote",
    "news": "/api/news - Military/geopolitical news",
    "flights": "/api/flights - Military flight tracking",
    "navy": "/api/navy - Naval vessel positions",
    "reddit": "/api/reddit - Social intelligence",
    "runMini": "/api/run-mini - Trigger a mini analysis run",
    "runDeep": "/api/run-deep - Trigger a deep analysis run",
}


@router.get("/")
async def index() -> Dict[str, Any]:
    """Service banner and endpoint index."""
    return {
        "status": "online",
        "message": "Military Intelligence Dashboard API with AI Analysis",
        "endpoints": ENDPOINTS,
    }


@router.get("/health")
async def health_check(service: IntelService = Depends(get_service)):
    """Health check endpoint."""
    body = {
        "status": "healthy",
        "in_flight": service.scheduler.in_flight(),
    }
    if service.monitor is not None:
        body["runs"] = service.monitor.to_dict()
    return body


@router.get("/api/analysis")
async def get_analysis(service: IntelService = Depends(get_service)):
    """Latest cached result per tier; never starts a run."""
    return service.read_shared_state()


@router.api_route("/api/run-mini", methods=["GET", "POST"])
async def run_mini(service: IntelService = Depends(get_service)):
    outcome = await service.run_mini_analysis()
    return outcome.to_dict()


@router.api_route("/api/run-deep", methods=["GET", "POST"])
async def run_deep(service: IntelService = Depends(get_service)):
    outcome = await service.run_deep_analysis()
    return outcome.to_dict()


@router.get("/api/score")
async def get_score(service: IntelService = Depends(get_service)):
    return to_jsonable(await service.get_heuristic_score())


@router.get("/api/stock/{symbol}")
async def get_stock(symbol: str, service: IntelService = Depends(get_service)):
    return to_jsonable(await service.get_stock(symbol))


@router.get("/api/news")
async def get_news(service: IntelService = Depends(get_service)):
    return to_jsonable(await service.get_news())


@router.get("/api/flights")
async def get_flights(service: IntelService = Depends(get_service)):
    return to_jsonable(await service.get_flights())


@router.get("/api/navy")
async def get_navy(service: IntelService = Depends(get_service)):
    return to_jsonable(await service.get_navy())


@router.get("/api/reddit")
async def get_reddit(service: IntelService = Depends(get_service)):
    return to_jsonable(await service.get_social())
