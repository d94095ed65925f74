import time

from fastapi import APIRouter, Depends, Query

from rankedsearch.api.deps import get_search_service
from rankedsearch.config import settings
from rankedsearch.services.index_store import to_payload
from rankedsearch.services.search.query_engine import SearchService

router = APIRouter()
static_router = APIRouter()


@router.get("/search")
async def search(
    q: str = Query("", max_length=500, description="Search query"),
    size: int = Query(settings.default_top_k, ge=1, le=settings.max_search_results),
    service: SearchService = Depends(get_search_service),
):
    """Strict-AND keyword search.

    Every query term must occur in a result. Results are ranked by summed
    TF-IDF with a recency boost. An empty or unmatched query returns no
    results, not an error.
    """
    start_time = time.time()
    results = service.search(q, top_k=size)
    latency_ms = (time.time() - start_time) * 1000

    return {
        "query": q,
        "size": size,
        "total": len(results),
        "latency_ms": round(latency_ms, 1),
        "results": [
            {
                "id": doc.id,
                "title": doc.title,
                "url": doc.url,
                "date": doc.date,
                "excerpt": doc.excerpt,
                "score": round(score, 4),
            }
            for doc, score in results
        ],
    }


@static_router.get("/search.json")
async def search_json(service: SearchService = Depends(get_search_service)):
    """The persisted index, for clients that rank in the browser."""
    return to_payload(service.index)
