"""Association domain service.

This module contains the AssociationService that owns every write to the
tag/object association table and to the tag audit log: tagging objects,
merging one tag into another and copying one tag's associations to another.
"""

import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional, Tuple

from domain.entities.association import AssociationEntity, AssociationValidationError
from domain.entities.tag_log import TagLogAction, TagLogEntity
from domain.repositories.association_repository import AssociationRepositoryInterface
from domain.repositories.tag_log_repository import TagLogRepositoryInterface
from domain.services.context import Clock, Notifier, SystemClock, UserContext
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class AssociationService:
    """Domain service for tag/object associations.

    All operations run in the caller's session. Each public mutating method
    commits once at the end, so a merge or copy is a single transaction; rows
    that fail individually are isolated with SAVEPOINTs and reported through
    the notifier instead of aborting the batch.

    Attributes:
        _association_repository (AssociationRepositoryInterface): Association data access.
        _tag_log_repository (TagLogRepositoryInterface): Audit log data access.
        _user_context (UserContext): Acting user, default tagger and log actor.
        _clock (Clock): Source of default tagging times and log timestamps.
        _notifier (Notifier): Receiver of per-row failure reports.

    Example:
        >>> service = AssociationService(association_repository, tag_log_repository,
        ...                              user_context=UserContext(user_id=1001))
        >>> with get_db_session() as db:
        ...     await service.move_to(db, old_tag_id=12, new_tag_id=7)
        True
    """

    def __init__(
        self,
        association_repository: AssociationRepositoryInterface,
        tag_log_repository: TagLogRepositoryInterface,
        user_context: Optional[UserContext] = None,
        clock: Optional[Clock] = None,
        notifier: Optional[Notifier] = None,
    ) -> None:
        """Initialize the association service with required dependencies.

        Args:
            association_repository (AssociationRepositoryInterface): Association data access.
            tag_log_repository (TagLogRepositoryInterface): Audit log data access.
            user_context (Optional[UserContext]): Acting user; anonymous when omitted.
            clock (Optional[Clock]): Time source; system time when omitted.
            notifier (Optional[Notifier]): Receiver of non-fatal per-row errors;
                failures are only logged when omitted.
        """
        self._association_repository = association_repository
        self._tag_log_repository = tag_log_repository
        self._user_context = user_context or UserContext()
        self._clock = clock or SystemClock()
        self._notifier = notifier

    async def create_association(
        self,
        db_session: Session,
        scope: str,
        object_id: int,
        tag_id: int,
        tagger_id: Optional[int] = None,
        label: Optional[str] = "",
        tagged_on=None,
    ) -> AssociationEntity:
        """Create a new association between a tag and an object.

        Missing ``tagger_id`` defaults to the acting user and missing
        ``tagged_on`` to the current time. No duplicate check is made; use
        ``tag_object`` for that.

        Args:
            db_session (Session): Fresh database session for this operation.
            scope (str): Scope of the object (e.g. "resources").
            object_id (int): Identifier of the object inside its scope.
            tag_id (int): Identifier of the tag.
            tagger_id (Optional[int]): User creating the association.
            label (Optional[str]): Qualifier of the relationship.
            tagged_on (Optional[datetime]): Tagging time.

        Returns:
            AssociationEntity: The persisted association.

        Raises:
            AssociationValidationError: If scope is empty or an id is not
                positive. Nothing is written in that case.
        """
        association = self._with_defaults(
            AssociationEntity(
                id=None,
                scope=scope,
                object_id=object_id,
                tag_id=tag_id,
                tagger_id=tagger_id or 0,
                label=label or "",
                tagged_on=tagged_on,
            )
        )

        try:
            saved = await self._association_repository.add(db_session, association)
            db_session.commit()
        except SQLAlchemyError:
            db_session.rollback()
            logger.error(
                f"Failed to tag {scope}#{object_id} with tag {tag_id}", exc_info=True
            )
            raise

        logger.info(
            f"Created association {saved.id}: {saved.scope}#{saved.object_id} -> tag {saved.tag_id}"
        )
        return saved

    async def find_association(
        self,
        db_session: Session,
        scope: str,
        object_id: int,
        tag_id: int,
        tagger_id: Optional[int] = None,
        label: Optional[str] = "",
    ) -> Optional[AssociationEntity]:
        """Find the association of a tag with one object.

        Args:
            db_session (Session): Fresh database session for this operation.
            scope (str): Scope of the object.
            object_id (int): Identifier of the object inside its scope.
            tag_id (int): Identifier of the tag.
            tagger_id (Optional[int]): When given, only associations created by
                this user match.
            label (Optional[str]): Label of the association ("" by default).

        Returns:
            Optional[AssociationEntity]: The association, or None if not found.
        """
        return await self._association_repository.find_one_by_scope(
            db_session, scope, object_id, tag_id, tagger_id=tagger_id, label=label or ""
        )

    async def tag_object(
        self,
        db_session: Session,
        scope: str,
        object_id: int,
        tag_id: int,
        label: Optional[str] = "",
    ) -> Tuple[AssociationEntity, bool]:
        """Attach a tag to an object unless the same association already exists.

        Returns:
            Tuple[AssociationEntity, bool]: The association and whether it was
                created by this call.

        Raises:
            AssociationValidationError: If the fields are invalid.
        """
        # Validate before probing so that bad input never reaches the database
        AssociationEntity(id=None, scope=scope, object_id=object_id, tag_id=tag_id)

        existing = await self.find_association(
            db_session, scope, object_id, tag_id, label=label
        )
        if existing:
            return existing, False

        created = await self.create_association(
            db_session, scope, object_id, tag_id, label=label
        )
        return created, True

    async def untag_object(
        self,
        db_session: Session,
        scope: str,
        object_id: int,
        tag_id: int,
        label: Optional[str] = "",
    ) -> int:
        """Remove a tag from an object.

        Returns:
            int: Number of associations removed.
        """
        try:
            removed = await self._association_repository.delete_matching(
                db_session, scope, object_id, tag_id, label=label or ""
            )
            db_session.commit()
        except SQLAlchemyError:
            db_session.rollback()
            raise

        logger.info(f"Removed {removed} association(s) of tag {tag_id} from {scope}#{object_id}")
        return removed

    async def move_to(
        self, db_session: Session, old_tag_id: Optional[int], new_tag_id: Optional[int]
    ) -> bool:
        """Merge a tag into another by moving every association it has.

        For each association of ``old_tag_id``:

        - if the object already carries ``new_tag_id`` with the same scope and
          label, the association is deleted;
        - otherwise it is re-pointed at ``new_tag_id`` in place, keeping its
          id, tagger, label and tagging time.

        One ``objects_moved`` log entry is appended, attributed to
        ``new_tag_id``, listing the resulting state of every processed row.

        Args:
            db_session (Session): Fresh database session for this operation.
            old_tag_id (Optional[int]): Tag being merged away.
            new_tag_id (Optional[int]): Tag receiving the associations.

        Returns:
            bool: False if either id is missing or zero (nothing is read or
                written), True once every row has been processed.
        """
        if not self._is_valid_pair(old_tag_id, new_tag_id):
            logger.warning(
                f"Rejected merge with missing tag id (old={old_tag_id}, new={new_tag_id})"
            )
            return False

        logger.info(f"Merging tag {old_tag_id} into tag {new_tag_id}")

        try:
            associations = await self._association_repository.list_by_tag(
                db_session, old_tag_id, for_update=True
            )

            entries: List[Dict[str, Any]] = []
            for association in associations:
                try:
                    with db_session.begin_nested():
                        snapshot = await self._move_one(
                            db_session, association, new_tag_id
                        )
                except (SQLAlchemyError, LookupError) as e:
                    self._report(PersistenceError(association.id, "move", e))
                    continue
                entries.append(snapshot)

            await self._append_log(
                db_session,
                new_tag_id,
                TagLogAction.OBJECTS_MOVED,
                {"old_id": old_tag_id, "new_id": new_tag_id, "entries": entries},
            )
            db_session.commit()
        except Exception:
            db_session.rollback()
            logger.error(
                f"Merge of tag {old_tag_id} into tag {new_tag_id} failed", exc_info=True
            )
            raise

        removed = sum(1 for entry in entries if entry["removed"])
        logger.info(
            f"Merged tag {old_tag_id} into tag {new_tag_id}: "
            f"{len(entries) - removed} moved, {removed} duplicates removed"
        )
        return True

    async def copy_to(
        self,
        db_session: Session,
        old_tag_id: Optional[int],
        new_tag_id: Optional[int],
        scope: Optional[str] = None,
    ) -> bool:
        """Copy a tag's associations to another tag without creating duplicates.

        Objects that already carry ``new_tag_id`` (same scope and label) are
        skipped by an exclusion join. Each candidate is checked once more
        before insertion, so repeated source rows are copied only once.
        Every other association of ``old_tag_id`` is duplicated as a new row
        under ``new_tag_id``. A row that fails to save is skipped and reported
        through the notifier. One ``objects_copied`` log entry is appended if
        at least one row was copied.

        Args:
            db_session (Session): Fresh database session for this operation.
            old_tag_id (Optional[int]): Source tag.
            new_tag_id (Optional[int]): Destination tag.
            scope (Optional[str]): Only copy associations in this scope.

        Returns:
            bool: False if either id is missing or zero, True otherwise (even
                when nothing was eligible or some rows failed).
        """
        if not self._is_valid_pair(old_tag_id, new_tag_id):
            logger.warning(
                f"Rejected copy with missing tag id (old={old_tag_id}, new={new_tag_id})"
            )
            return False

        logger.info(
            f"Copying tag {old_tag_id} to tag {new_tag_id}"
            + (f" in scope '{scope}'" if scope else "")
        )

        try:
            candidate_ids = await self._association_repository.find_copy_candidates(
                db_session, old_tag_id, new_tag_id, scope=scope
            )

            source_ids: List[int] = []
            copied_ids: List[int] = []
            for source_id in candidate_ids:
                try:
                    with db_session.begin_nested():
                        copied = await self._copy_one(db_session, source_id, new_tag_id)
                except (SQLAlchemyError, AssociationValidationError, LookupError) as e:
                    self._report(PersistenceError(source_id, "copy", e))
                    continue
                if copied is None:
                    continue
                source_ids.append(source_id)
                copied_ids.append(copied.id)

            if copied_ids:
                await self._append_log(
                    db_session,
                    new_tag_id,
                    TagLogAction.OBJECTS_COPIED,
                    {
                        "old_id": old_tag_id,
                        "new_id": new_tag_id,
                        "entries": source_ids,
                        "copied_ids": copied_ids,
                    },
                )
            db_session.commit()
        except Exception:
            db_session.rollback()
            logger.error(
                f"Copy of tag {old_tag_id} to tag {new_tag_id} failed", exc_info=True
            )
            raise

        logger.info(
            f"Copied {len(copied_ids)} of {len(candidate_ids)} associations "
            f"from tag {old_tag_id} to tag {new_tag_id}"
        )
        return True

    async def get_tag_logs(
        self, db_session: Session, tag_id: int, limit: int = 50
    ) -> List[TagLogEntity]:
        """Retrieve the audit log entries attributed to a tag, newest first."""
        return await self._tag_log_repository.list_for_tag(db_session, tag_id, limit)

    async def count_associations(self, db_session: Session, tag_id: int) -> int:
        """Count associations currently referencing a tag."""
        return await self._association_repository.count_by_tag(db_session, tag_id)

    @staticmethod
    def require_tag_pair(old_tag_id: Optional[int], new_tag_id: Optional[int]) -> None:
        """Raise if a merge/copy tag pair is incomplete.

        Raises:
            PreconditionError: If either id is missing or zero.
        """
        if not AssociationService._is_valid_pair(old_tag_id, new_tag_id):
            raise PreconditionError(
                f"Both tag ids are required (old={old_tag_id}, new={new_tag_id})"
            )

    @staticmethod
    def _is_valid_pair(old_tag_id: Optional[int], new_tag_id: Optional[int]) -> bool:
        return bool(old_tag_id) and bool(new_tag_id)

    async def _move_one(
        self, db_session: Session, association: AssociationEntity, new_tag_id: int
    ) -> Dict[str, Any]:
        """Move or delete one association and return its snapshot."""
        duplicate = await self._association_repository.has_duplicate(
            db_session,
            association.scope,
            new_tag_id,
            association.object_id,
            association.label,
            exclude_id=association.id,
        )

        if duplicate:
            await self._association_repository.delete(db_session, association.id)
            return {**association.to_snapshot(), "removed": True}

        moved = await self._association_repository.retag(
            db_session, association.id, new_tag_id
        )
        return {**moved.to_snapshot(), "removed": False}

    async def _copy_one(
        self, db_session: Session, source_id: int, new_tag_id: int
    ) -> Optional[AssociationEntity]:
        """Copy one association, or return None when the destination already has it."""
        source = await self._association_repository.get_by_id(db_session, source_id)
        if source is None:
            raise LookupError(f"Association {source_id} disappeared before it could be copied")

        # The source tag may itself hold repeated (scope, object, label) rows
        if await self._association_repository.has_duplicate(
            db_session, source.scope, new_tag_id, source.object_id, source.label
        ):
            logger.debug(f"Skipped association {source_id}: already copied to tag {new_tag_id}")
            return None

        copy = self._with_defaults(source.copy_for_tag(new_tag_id))
        return await self._association_repository.add(db_session, copy)

    def _with_defaults(self, association: AssociationEntity) -> AssociationEntity:
        """Fill tagger and tagging time from the context when unset."""
        tagger_id = association.tagger_id or self._user_context.user_id
        tagged_on = association.tagged_on or self._clock.now()
        return replace(association, tagger_id=tagger_id, tagged_on=tagged_on)

    async def _append_log(
        self,
        db_session: Session,
        tag_id: int,
        action: TagLogAction,
        payload: Dict[str, Any],
    ) -> TagLogEntity:
        entry = TagLogEntity(
            id=None,
            tag_id=tag_id,
            action=action,
            payload=payload,
            actor_id=self._user_context.user_id,
            timestamp=self._clock.now(),
        )
        return await self._tag_log_repository.append(db_session, entry)

    def _report(self, error: "PersistenceError") -> None:
        if self._notifier is None:
            logger.error(str(error))
        else:
            self._notifier.error(str(error))


class PreconditionError(Exception):
    """Exception raised when a merge or copy is requested without both tag ids."""

    pass


class PersistenceError(Exception):
    """Exception describing one association that could not be saved.

    Raised for nothing; instances are reported to the notifier while the
    surrounding batch carries on.
    """

    def __init__(
        self, association_id: Optional[int], operation: str, original_error: Exception
    ):
        """Initialize persistence error.

        Args:
            association_id (Optional[int]): Association that failed.
            operation (str): "move" or "copy".
            original_error (Exception): Underlying database or validation error.
        """
        super().__init__(
            f"Failed to {operation} association {association_id}: {original_error}"
        )
        self.association_id = association_id
        self.operation = operation
        self.original_error = original_error
