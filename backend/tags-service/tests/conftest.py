"""Shared pytest fixtures for the tags service tests.

Every test gets its own in-memory SQLite database, so tests can commit freely.
"""

import os
from datetime import datetime
from typing import Callable, Dict, Generator, List

import pytest

# Keep the application's module-level engine away from files on disk
os.environ.setdefault("DATABASE_URL", "sqlite://")

from domain.entities.association import AssociationEntity  # noqa: E402
from domain.services.association_service import AssociationService  # noqa: E402
from domain.services.context import Clock, UserContext  # noqa: E402
from infrastructure.database.engine import (  # noqa: E402
    create_db_engine,
    create_session_factory,
)
from infrastructure.models.associations import TagObjectORM  # noqa: E402
from infrastructure.models.base import Base  # noqa: E402
from infrastructure.models.tag_log_orm import TagLogORM  # noqa: E402,F401
from infrastructure.models.tag_orm import TagORM  # noqa: E402
from infrastructure.notifications.logging_notifier import LoggingNotifier  # noqa: E402
from infrastructure.repositories.sqlalchemy_association_repository import (  # noqa: E402
    SqlAlchemyAssociationRepository,
)
from infrastructure.repositories.sqlalchemy_tag_log_repository import (  # noqa: E402
    SqlAlchemyTagLogRepository,
)
from sqlalchemy.engine import Engine  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

ACTING_USER_ID = 1001
FIXED_NOW = datetime(2024, 3, 1, 9, 30, 0)


class FixedClock(Clock):
    """Clock that always returns the same instant."""

    def __init__(self, now: datetime = FIXED_NOW):
        self._now = now

    def now(self) -> datetime:
        return self._now


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Fresh in-memory database shared by every connection of one test."""
    engine = create_db_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def db_session(session_factory) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def tags(db_session) -> Dict[str, int]:
    """Seed a small taxonomy and return tag IDs by name."""
    ids = {}
    for name in ("physics", "chemistry", "biology", "nanotech"):
        tag = TagORM(name=name, description=f"All about {name}")
        db_session.add(tag)
        db_session.flush()
        ids[name] = tag.id
    db_session.commit()
    return ids


@pytest.fixture
def make_association(db_session) -> Callable[..., int]:
    """Insert an association row directly and return its ID."""

    def _make(
        tag_id: int,
        object_id: int,
        scope: str = "resources",
        label: str = "",
        tagger_id: int = 7,
        tagged_on: datetime = datetime(2023, 5, 17, 14, 0, 0),
    ) -> int:
        row = TagObjectORM(
            tbl=scope,
            objectid=object_id,
            tagid=tag_id,
            taggerid=tagger_id,
            taggedon=tagged_on,
            label=label,
        )
        db_session.add(row)
        db_session.flush()
        association_id = row.id
        db_session.commit()
        return association_id

    return _make


@pytest.fixture
def rows_for_tag(db_session) -> Callable[[int], List[AssociationEntity]]:
    """Read back the association rows of a tag, ordered by ID."""
    repository = SqlAlchemyAssociationRepository()

    def _rows(tag_id: int) -> List[AssociationEntity]:
        db_session.expire_all()
        models = (
            db_session.query(TagObjectORM)
            .filter(TagObjectORM.tagid == tag_id)
            .order_by(TagObjectORM.id)
            .all()
        )
        rows = [repository._model_to_entity(model) for model in models]
        # End the read transaction so other sessions can use the connection
        db_session.commit()
        return rows

    return _rows


# =============================================================================
# Services
# =============================================================================


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def notifier() -> LoggingNotifier:
    return LoggingNotifier()


@pytest.fixture
def association_service(clock, notifier) -> AssociationService:
    return AssociationService(
        SqlAlchemyAssociationRepository(),
        SqlAlchemyTagLogRepository(),
        user_context=UserContext(user_id=ACTING_USER_ID),
        clock=clock,
        notifier=notifier,
    )
