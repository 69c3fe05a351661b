import logging

from application.rest.schemas.output.common_output import ErrorResponse, HealthResponse
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from utils.config import SERVICE_NAME
from utils.dependencies import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    path="/health",
    description="Health check endpoint reporting service and database availability.",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    responses={
        status.HTTP_200_OK: {
            "model": HealthResponse,
            "description": "Service is healthy and the database answers.",
        },
        status.HTTP_503_SERVICE_UNAVAILABLE: {
            "model": ErrorResponse,
            "description": "Database unreachable.",
            "content": {
                "application/json": {
                    "example": {"detail": "Database unavailable"}
                }
            },
        },
    },
)
async def health_check(db: Session = Depends(get_db)) -> HealthResponse:
    """Health check endpoint for service monitoring.

    Returns:
        HealthResponse: Service status information containing status and service name.

    Raises:
        HTTPException: 503 if the database cannot be queried.

    Example:
        >>> response = await health_check(db)
        >>> print(response)
        HealthResponse(status="healthy", service="tags-service")
    """
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Health check failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database unavailable",
        ) from e
    return HealthResponse(status="healthy", service=SERVICE_NAME)
