"""Database and user context dependencies for the Tags Service.

This module provides dependency injection functions for FastAPI,
including database session management, the acting user, and service factories.

Functions:
    - get_db: Database session factory with automatic cleanup
    - get_current_user_id: Extract user ID from request headers
    - get_user_context / get_notifier: Per-request collaborators
    - get_tag_service / get_association_service / get_search_service: Service factories

Architecture:
    These utilities are shared across all layers and provide clean dependency
    injection for database access and user management operations.
"""

import logging
from typing import Generator

from domain.services.association_service import AssociationService
from domain.services.context import UserContext
from domain.services.search_service import TagSearchService
from domain.services.tag_service import TagService
from fastapi import Depends, HTTPException, Request
from infrastructure.database.engine import create_db_engine, create_session_factory
from infrastructure.notifications.logging_notifier import LoggingNotifier
from infrastructure.repositories.sqlalchemy_association_repository import (
    SqlAlchemyAssociationRepository,
)
from infrastructure.repositories.sqlalchemy_search_repository import (
    SQLAlchemySearchRepository,
)
from infrastructure.repositories.sqlalchemy_tag_log_repository import (
    SqlAlchemyTagLogRepository,
)
from infrastructure.repositories.sqlalchemy_tag_repository import (
    SqlAlchemyTagRepository,
)
from sqlalchemy.orm import Session

from .config import DATABASE_ECHO, DATABASE_URL, LOG_LEVEL

# Configure logging
logging.basicConfig(level=getattr(logging, LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)

# Database setup
engine = create_db_engine(DATABASE_URL, echo=DATABASE_ECHO)
SessionLocal = create_session_factory(engine)


def get_db() -> Generator[Session, None, None]:
    """Get database session with automatic cleanup.

    Yields:
        Session: SQLAlchemy database session that automatically closes after use.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user_id(request: Request) -> int:
    """Extract user ID from request headers.

    Args:
        request (Request): FastAPI request object containing headers.

    Returns:
        int: User ID extracted from the X-User-ID header.

    Raises:
        HTTPException: 401 if X-User-ID header is missing or not an integer.

    Example:
        >>> user_id = get_current_user_id(request)
        >>> print(user_id)
        1001
    """
    user_id = request.headers.get("X-User-ID")
    if not user_id:
        raise HTTPException(status_code=401, detail="User ID not found in headers")
    try:
        return int(user_id)
    except ValueError as e:
        raise HTTPException(status_code=401, detail="Invalid user ID in headers") from e


def get_user_context(user_id: int = Depends(get_current_user_id)) -> UserContext:
    """Build the acting user context for the current request."""
    return UserContext(user_id=user_id)


def get_notifier() -> LoggingNotifier:
    """Create a per-request notifier collecting non-fatal errors."""
    return LoggingNotifier()


def get_tag_service() -> TagService:
    """Create and configure the tag service with repository dependencies.

    The session is injected per-request in each endpoint method.

    Returns:
        TagService: Configured domain service ready for use.
    """
    return TagService(SqlAlchemyTagRepository(), SqlAlchemyAssociationRepository())


def get_association_service(
    user_context: UserContext = Depends(get_user_context),
    notifier: LoggingNotifier = Depends(get_notifier),
) -> AssociationService:
    """Create the association service for the acting user.

    Args:
        user_context (UserContext): Acting user from the request headers.
        notifier (LoggingNotifier): Per-request notifier; the same instance is
            handed to endpoints that depend on ``get_notifier``.

    Returns:
        AssociationService: Configured domain service ready for use.
    """
    return AssociationService(
        SqlAlchemyAssociationRepository(),
        SqlAlchemyTagLogRepository(),
        user_context=user_context,
        notifier=notifier,
    )


def get_search_service() -> TagSearchService:
    """Create the read-only tag search service."""
    return TagSearchService(SQLAlchemySearchRepository())
