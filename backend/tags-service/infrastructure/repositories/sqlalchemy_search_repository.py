"""SQLAlchemy implementation of the search repository.

This module contains the concrete implementation of the SearchRepository
using SQLAlchemy for database operations. It only reads the association table.
"""

import logging
from typing import List, Optional, Tuple

from domain.entities.search import (
    ScopeTotal,
    SearchSort,
    TaggedObject,
    TagSearchCriteria,
)
from domain.repositories.search_repository import SearchRepository
from infrastructure.models.associations import TagObjectORM
from sqlalchemy import distinct, func
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class SQLAlchemySearchRepository(SearchRepository):
    """SQLAlchemy implementation of the search repository.

    An object matches when, within one scope, it is associated with every
    requested tag (AND logic, regardless of label).

    NOTE: This repository does not store the session internally.
    Each method receives a fresh session to ensure proper transaction management
    and avoid session leaks.
    """

    async def count_by_scope(
        self, db_session: Session, tag_ids: List[int]
    ) -> List[ScopeTotal]:
        """Count matching objects per scope.

        Args:
            db_session (Session): SQLAlchemy database session for this operation.
            tag_ids (List[int]): Tags the objects must all carry.

        Returns:
            List[ScopeTotal]: Totals ordered by scope name.
        """
        matches = self._matching_objects_query(db_session, tag_ids).subquery()
        rows = (
            db_session.query(matches.c.scope, func.count())
            .group_by(matches.c.scope)
            .order_by(matches.c.scope)
            .all()
        )
        return [ScopeTotal(scope=scope, total=total) for scope, total in rows]

    async def search_objects(
        self, db_session: Session, criteria: TagSearchCriteria
    ) -> Tuple[List[TaggedObject], int]:
        """Find objects carrying every tag in the criteria.

        Args:
            db_session (Session): SQLAlchemy database session for this operation.
            criteria (TagSearchCriteria): The search criteria.

        Returns:
            Tuple[List[TaggedObject], int]: The requested page and the total count.

        Raises:
            Exception: If the query fails at the database level.
        """
        try:
            query = self._matching_objects_query(
                db_session, criteria.tag_ids, criteria.scope
            )
            total_count = query.count()

            if criteria.sort == SearchSort.SCOPE:
                query = query.order_by(TagObjectORM.tbl, TagObjectORM.objectid)
            else:
                query = query.order_by(
                    func.max(TagObjectORM.taggedon).desc(),
                    TagObjectORM.tbl,
                    TagObjectORM.objectid,
                )

            rows = query.offset(criteria.offset).limit(criteria.limit).all()
            items = [
                TaggedObject(scope=scope, object_id=object_id, last_tagged_on=tagged_on)
                for scope, object_id, tagged_on in rows
            ]

            logger.info(
                f"Tag search completed: {len(items)} of {total_count} objects "
                f"for tags {criteria.tag_ids} on page {criteria.page}"
            )
            return items, total_count

        except Exception as e:
            logger.error(f"Tag search failed: {str(e)}")
            raise

    def _matching_objects_query(
        self, db_session: Session, tag_ids: List[int], scope: Optional[str] = None
    ):
        """Build the grouped query of (scope, object_id, last_tagged_on) matches."""
        query = db_session.query(
            TagObjectORM.tbl.label("scope"),
            TagObjectORM.objectid.label("object_id"),
            func.max(TagObjectORM.taggedon).label("last_tagged_on"),
        ).filter(TagObjectORM.tagid.in_(tag_ids))

        if scope:
            query = query.filter(TagObjectORM.tbl == scope)

        return query.group_by(TagObjectORM.tbl, TagObjectORM.objectid).having(
            func.count(distinct(TagObjectORM.tagid)) == len(tag_ids)
        )
