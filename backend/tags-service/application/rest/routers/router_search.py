import logging
from typing import Optional

from application.rest.schemas.input.search_input import TagSearchRequest
from application.rest.schemas.output.common_output import ErrorResponse
from application.rest.schemas.output.search_output import TagSearchResponse
from domain.entities.search import SearchSort, TagSearchCriteria
from domain.services.search_service import TagSearchService
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import ValidationError
from sqlalchemy.orm import Session
from utils.config import SEARCH_DEFAULT_LIMIT, SEARCH_MAX_LIMIT
from utils.dependencies import get_db, get_search_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    path="/search",
    description="List objects carrying every given tag, grouped by scope.",
    response_model=TagSearchResponse,
    status_code=status.HTTP_200_OK,
    responses={
        status.HTTP_200_OK: {
            "model": TagSearchResponse,
            "description": "Per-scope totals and one page of matching objects.",
        },
        status.HTTP_400_BAD_REQUEST: {
            "model": ErrorResponse,
            "description": "Invalid request parameters (tag list, sort, page, limit).",
            "content": {
                "application/json": {
                    "example": {"detail": "At least one tag must be provided"}
                }
            },
        },
        status.HTTP_500_INTERNAL_SERVER_ERROR: {
            "model": ErrorResponse,
            "description": "Internal server error - database query failed.",
            "content": {
                "application/json": {"example": {"detail": "Search operation failed."}}
            },
        },
    },
)
async def search_tagged_objects(
    tags: str = "",
    scope: Optional[str] = None,
    sort: str = "date",
    page: int = 1,
    limit: int = SEARCH_DEFAULT_LIMIT,
    db: Session = Depends(get_db),
    search_service: TagSearchService = Depends(get_search_service),
) -> TagSearchResponse:
    """Browse objects tagged with all of the given tags.

    Args:
        tags (str): Comma-separated tag IDs, e.g. ``"3,7"``.
        scope (Optional[str]): Only list objects in this scope. Category
            totals always cover every scope.
        sort (str): ``"date"`` (most recently tagged first) or ``"scope"``.
        page (int): Page number for pagination. Defaults to 1.
        limit (int): Number of results per page.
        db (Session): Database session dependency injected by FastAPI.
        search_service (TagSearchService): Read-only search service.

    Returns:
        TagSearchResponse: Category totals plus the requested page of objects.

    Raises:
        HTTPException: 400 if the parameters are invalid.
        HTTPException: 500 if internal server errors occur.

    Example:
        >>> result = await search_tagged_objects(tags="3,7", scope="resources")
        >>> print(result.pagination.total_items)
        5
    """
    try:
        request = TagSearchRequest(
            tags=tags, scope=scope, sort=sort, page=page, limit=limit
        )
        criteria = TagSearchCriteria(
            tag_ids=request.get_tag_ids(),
            scope=request.scope,
            sort=SearchSort(request.sort),
            page=request.page,
            limit=request.limit,
            max_limit=SEARCH_MAX_LIMIT,
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="; ".join(error["msg"] for error in e.errors()),
        ) from e
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)
        ) from e

    try:
        result = await search_service.search(db, criteria)
    except Exception as e:
        logger.error(f"Search for tags {criteria.tag_ids} failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Search operation failed",
        ) from e

    logger.info(
        f"Returning {len(result.items)} of {result.pagination.total_items} objects "
        f"tagged {criteria.tag_ids} on page {criteria.page}"
    )
    return TagSearchResponse.from_entity(result)
