"""Tests for creating, finding and removing single associations."""

from datetime import datetime

import pytest
from conftest import ACTING_USER_ID, FIXED_NOW
from domain.entities.association import AssociationValidationError
from infrastructure.models.associations import TagObjectORM

pytestmark = pytest.mark.asyncio


class TestCreateAssociation:
    async def test_defaults_come_from_user_context_and_clock(
        self, association_service, db_session, tags
    ):
        created = await association_service.create_association(
            db_session, "resources", 12, tags["physics"]
        )

        assert created.id is not None
        assert created.tagger_id == ACTING_USER_ID
        assert created.tagged_on == FIXED_NOW
        assert created.label == ""

    async def test_explicit_tagger_and_time_are_kept(
        self, association_service, db_session, tags
    ):
        tagged_on = datetime(2020, 6, 1, 10, 0, 0)

        created = await association_service.create_association(
            db_session,
            "tickets",
            4,
            tags["physics"],
            tagger_id=77,
            label="reporter",
            tagged_on=tagged_on,
        )

        assert created.tagger_id == 77
        assert created.tagged_on == tagged_on
        assert created.label == "reporter"

    @pytest.mark.parametrize(
        "scope, object_id",
        [("", 12), ("resources", 0), ("resources", -3)],
    )
    async def test_invalid_fields_write_nothing(
        self, association_service, db_session, tags, scope, object_id
    ):
        with pytest.raises(AssociationValidationError):
            await association_service.create_association(
                db_session, scope, object_id, tags["physics"]
            )

        assert db_session.query(TagObjectORM).count() == 0

    async def test_zero_tag_id_is_rejected(self, association_service, db_session):
        with pytest.raises(AssociationValidationError):
            await association_service.create_association(db_session, "resources", 1, 0)


class TestFindAssociation:
    async def test_finds_matching_row(
        self, association_service, db_session, tags, make_association
    ):
        association_id = make_association(tags["physics"], 12, scope="resources")

        found = await association_service.find_association(
            db_session, "resources", 12, tags["physics"]
        )

        assert found is not None
        assert found.id == association_id

    async def test_returns_none_when_absent(self, association_service, db_session, tags):
        found = await association_service.find_association(
            db_session, "resources", 12, tags["physics"]
        )

        assert found is None

    async def test_label_is_part_of_the_match(
        self, association_service, db_session, tags, make_association
    ):
        make_association(tags["physics"], 12, label="author")

        assert (
            await association_service.find_association(
                db_session, "resources", 12, tags["physics"]
            )
            is None
        )
        assert (
            await association_service.find_association(
                db_session, "resources", 12, tags["physics"], label="author"
            )
            is not None
        )

    async def test_tagger_filter_only_when_given(
        self, association_service, db_session, tags, make_association
    ):
        make_association(tags["physics"], 12, tagger_id=5)

        assert (
            await association_service.find_association(
                db_session, "resources", 12, tags["physics"], tagger_id=6
            )
            is None
        )
        assert (
            await association_service.find_association(
                db_session, "resources", 12, tags["physics"], tagger_id=5
            )
            is not None
        )

    async def test_lowest_id_wins_when_duplicates_exist(
        self, association_service, db_session, tags, make_association
    ):
        first_id = make_association(tags["physics"], 12)
        make_association(tags["physics"], 12)

        found = await association_service.find_association(
            db_session, "resources", 12, tags["physics"]
        )

        assert found.id == first_id


class TestTagAndUntag:
    async def test_tag_object_is_idempotent(self, association_service, db_session, tags):
        first, created_first = await association_service.tag_object(
            db_session, "resources", 12, tags["physics"]
        )
        second, created_second = await association_service.tag_object(
            db_session, "resources", 12, tags["physics"]
        )

        assert created_first is True
        assert created_second is False
        assert first.id == second.id
        assert db_session.query(TagObjectORM).count() == 1

    async def test_untag_removes_matching_rows(
        self, association_service, db_session, tags, make_association
    ):
        make_association(tags["physics"], 12)
        make_association(tags["physics"], 12, label="author")

        removed = await association_service.untag_object(
            db_session, "resources", 12, tags["physics"]
        )

        assert removed == 1
        assert await association_service.count_associations(
            db_session, tags["physics"]
        ) == 1

    async def test_untag_missing_association_removes_nothing(
        self, association_service, db_session, tags
    ):
        removed = await association_service.untag_object(
            db_session, "resources", 99, tags["physics"]
        )

        assert removed == 0
