"""Response schemas used by every router."""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Body of every non-2xx response, as produced by ``HTTPException``.

    Example:
        >>> ErrorResponse(detail="Tag(s) with ID 42 not found")
    """

    detail: str


class HealthResponse(BaseModel):
    """Health check result.

    Attributes:
        status (str): "healthy" when the service answers.
        service (str): Configured service name.
        database (str): "ok" once ``SELECT 1`` succeeded.
    """

    status: str
    service: str
    database: str = "ok"
