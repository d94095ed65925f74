from fastapi import HTTPException, Request, status

from rankedsearch.services.search.query_engine import EngineState, SearchService


def get_search_service(request: Request) -> SearchService:
    """Return the app's search service, or 503 while its index is unavailable."""
    service: SearchService = request.app.state.search_service
    if service.state is not EngineState.READY:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Search index is {service.state.value}",
        )
    return service
