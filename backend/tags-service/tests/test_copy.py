"""Tests for copying one tag's associations to another (AssociationService.copy_to)."""

from datetime import datetime

import pytest
from conftest import ACTING_USER_ID
from domain.entities.tag_log import TagLogAction
from domain.services.association_service import AssociationService
from infrastructure.models.associations import TagObjectORM
from infrastructure.models.tag_log_orm import TagLogORM
from infrastructure.repositories.sqlalchemy_association_repository import (
    SqlAlchemyAssociationRepository,
)
from infrastructure.repositories.sqlalchemy_tag_log_repository import (
    SqlAlchemyTagLogRepository,
)
from sqlalchemy.exc import IntegrityError

pytestmark = pytest.mark.asyncio


class TestCopyPreconditions:
    @pytest.mark.parametrize("old_id, new_id", [(None, 2), (1, None), (0, 0)])
    async def test_missing_ids_return_false(
        self, association_service, db_session, old_id, new_id
    ):
        assert await association_service.copy_to(db_session, old_id, new_id) is False
        assert db_session.query(TagLogORM).count() == 0


class TestCopyAssociations:
    async def test_source_is_untouched_and_copies_are_new_rows(
        self, association_service, db_session, tags, make_association, rows_for_tag
    ):
        physics, nanotech = tags["physics"], tags["nanotech"]
        source_ids = [make_association(physics, 1), make_association(physics, 2)]

        assert await association_service.copy_to(db_session, physics, nanotech) is True

        assert [row.id for row in rows_for_tag(physics)] == source_ids
        copies = rows_for_tag(nanotech)
        assert len(copies) == 2
        assert not set(row.id for row in copies) & set(source_ids)

    async def test_copies_keep_object_label_tagger_and_time(
        self, association_service, db_session, tags, make_association, rows_for_tag
    ):
        physics, nanotech = tags["physics"], tags["nanotech"]
        tagged_on = datetime(2018, 2, 3, 4, 5, 6)
        make_association(
            physics, 8, scope="tickets", label="owner", tagger_id=21, tagged_on=tagged_on
        )

        await association_service.copy_to(db_session, physics, nanotech)

        [copy] = rows_for_tag(nanotech)
        assert (copy.scope, copy.object_id, copy.label) == ("tickets", 8, "owner")
        assert copy.tagger_id == 21
        assert copy.tagged_on == tagged_on

    async def test_missing_tagger_defaults_to_acting_user(
        self, association_service, db_session, tags, make_association, rows_for_tag
    ):
        make_association(tags["physics"], 8, tagger_id=0)

        await association_service.copy_to(db_session, tags["physics"], tags["nanotech"])

        [copy] = rows_for_tag(tags["nanotech"])
        assert copy.tagger_id == ACTING_USER_ID

    async def test_objects_already_tagged_are_skipped(
        self, association_service, db_session, tags, make_association, rows_for_tag
    ):
        physics, nanotech = tags["physics"], tags["nanotech"]
        existing_id = make_association(nanotech, 1)
        make_association(physics, 1)
        make_association(physics, 2)

        await association_service.copy_to(db_session, physics, nanotech)

        rows = rows_for_tag(nanotech)
        assert sorted(row.object_id for row in rows) == [1, 2]
        assert existing_id in [row.id for row in rows]

    async def test_copy_twice_is_idempotent(
        self, association_service, db_session, tags, make_association, rows_for_tag
    ):
        physics, nanotech = tags["physics"], tags["nanotech"]
        make_association(physics, 1)
        make_association(physics, 2, label="author")

        await association_service.copy_to(db_session, physics, nanotech)
        first = [row.id for row in rows_for_tag(nanotech)]
        await association_service.copy_to(db_session, physics, nanotech)

        assert [row.id for row in rows_for_tag(nanotech)] == first

    async def test_repeated_source_rows_are_copied_once(
        self, association_service, db_session, tags, make_association, rows_for_tag
    ):
        physics, nanotech = tags["physics"], tags["nanotech"]
        first_id = make_association(physics, 1)
        make_association(physics, 1)

        await association_service.copy_to(db_session, physics, nanotech)

        [copy] = rows_for_tag(nanotech)
        assert (copy.scope, copy.object_id, copy.label) == ("resources", 1, "")
        [entry] = await association_service.get_tag_logs(db_session, nanotech)
        assert entry.payload["entries"] == [first_id]

    async def test_label_takes_part_in_the_exclusion(
        self, association_service, db_session, tags, make_association, rows_for_tag
    ):
        physics, nanotech = tags["physics"], tags["nanotech"]
        make_association(nanotech, 1, label="")
        make_association(physics, 1, label="author")

        await association_service.copy_to(db_session, physics, nanotech)

        assert sorted(row.label for row in rows_for_tag(nanotech)) == ["", "author"]

    async def test_scope_filter_limits_the_copy(
        self, association_service, db_session, tags, make_association, rows_for_tag
    ):
        physics, nanotech = tags["physics"], tags["nanotech"]
        make_association(physics, 1, scope="resources")
        make_association(physics, 2, scope="tickets")

        await association_service.copy_to(
            db_session, physics, nanotech, scope="tickets"
        )

        assert [(row.scope, row.object_id) for row in rows_for_tag(nanotech)] == [
            ("tickets", 2)
        ]


class TestCopyAuditLog:
    async def test_entry_lists_sources_and_copies(
        self, association_service, db_session, tags, make_association, rows_for_tag
    ):
        physics, nanotech = tags["physics"], tags["nanotech"]
        make_association(nanotech, 1)
        make_association(physics, 1)
        source_id = make_association(physics, 2)

        await association_service.copy_to(db_session, physics, nanotech)

        [entry] = await association_service.get_tag_logs(db_session, nanotech)
        assert entry.action == TagLogAction.OBJECTS_COPIED
        assert entry.actor_id == ACTING_USER_ID
        assert entry.payload["old_id"] == physics
        assert entry.payload["new_id"] == nanotech
        assert entry.payload["entries"] == [source_id]
        copied_ids = [row.id for row in rows_for_tag(nanotech) if row.object_id == 2]
        assert entry.payload["copied_ids"] == copied_ids

    async def test_nothing_copied_means_nothing_logged(
        self, association_service, db_session, tags, make_association
    ):
        make_association(tags["nanotech"], 1)
        make_association(tags["physics"], 1)

        assert (
            await association_service.copy_to(db_session, tags["physics"], tags["nanotech"])
            is True
        )
        assert db_session.query(TagLogORM).count() == 0


class FailingAddRepository(SqlAlchemyAssociationRepository):
    """Association repository that cannot insert rows for selected objects."""

    def __init__(self, failing_object_ids):
        self._failing_object_ids = set(failing_object_ids)

    async def add(self, db_session, association):
        if association.object_id in self._failing_object_ids:
            raise IntegrityError(
                "INSERT INTO tags_object", {}, Exception("constraint failed")
            )
        return await super().add(db_session, association)


class TestCopyFailures:
    async def test_failed_rows_are_reported_and_skipped(
        self, db_session, tags, make_association, rows_for_tag, clock, notifier
    ):
        physics, nanotech = tags["physics"], tags["nanotech"]
        make_association(physics, 1)
        failing_source = make_association(physics, 2)
        make_association(physics, 3)
        service = AssociationService(
            FailingAddRepository([2]),
            SqlAlchemyTagLogRepository(),
            clock=clock,
            notifier=notifier,
        )

        assert await service.copy_to(db_session, physics, nanotech) is True

        assert sorted(row.object_id for row in rows_for_tag(nanotech)) == [1, 3]
        assert notifier.has_errors()
        assert len(notifier.messages) == 1
        assert f"association {failing_source}" in notifier.messages[0]

        [entry] = await service.get_tag_logs(db_session, nanotech)
        assert failing_source not in entry.payload["entries"]
        assert entry.affected_count == 2

    async def test_failures_without_notifier_are_only_logged(
        self, db_session, tags, make_association, rows_for_tag, clock, caplog
    ):
        make_association(tags["physics"], 2)
        service = AssociationService(
            FailingAddRepository([2]), SqlAlchemyTagLogRepository(), clock=clock
        )

        assert await service.copy_to(db_session, tags["physics"], tags["nanotech"]) is True

        assert rows_for_tag(tags["nanotech"]) == []
        assert "Failed to copy association" in caplog.text
        assert db_session.query(TagObjectORM).count() == 1
