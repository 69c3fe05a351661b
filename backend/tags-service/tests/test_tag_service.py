"""Tests for tag management (TagService)."""

import pytest
from domain.services.tag_service import (
    TagAlreadyExistsError,
    TagInUseError,
    TagNotFoundError,
    TagService,
)
from infrastructure.repositories.sqlalchemy_association_repository import (
    SqlAlchemyAssociationRepository,
)
from infrastructure.repositories.sqlalchemy_tag_repository import (
    SqlAlchemyTagRepository,
)

pytestmark = pytest.mark.asyncio


@pytest.fixture
def tag_service():
    return TagService(SqlAlchemyTagRepository(), SqlAlchemyAssociationRepository())


class TestReadTags:
    async def test_tags_are_sorted_by_name(self, tag_service, db_session, tags):
        names = [tag.name for tag in await tag_service.get_all_tags(db_session)]

        assert names == ["biology", "chemistry", "nanotech", "physics"]

    async def test_get_by_id(self, tag_service, db_session, tags):
        tag = await tag_service.get_tag_by_id(db_session, tags["physics"])

        assert tag.name == "physics"
        assert tag.description == "All about physics"

    async def test_unknown_id_raises(self, tag_service, db_session, tags):
        with pytest.raises(TagNotFoundError):
            await tag_service.get_tag_by_id(db_session, 9999)


class TestWriteTags:
    async def test_create_strips_name(self, tag_service, db_session):
        tag = await tag_service.create_tag(db_session, "  optics ", "Light")

        assert tag.id is not None
        assert tag.name == "optics"
        assert tag.description == "Light"

    async def test_names_are_unique_ignoring_case(self, tag_service, db_session, tags):
        with pytest.raises(TagAlreadyExistsError):
            await tag_service.create_tag(db_session, "Physics")

    async def test_blank_name_is_rejected(self, tag_service, db_session):
        with pytest.raises(ValueError):
            await tag_service.create_tag(db_session, "   ")

    async def test_update_renames_and_keeps_description(
        self, tag_service, db_session, tags
    ):
        updated = await tag_service.update_tag(db_session, tags["biology"], "life sciences")

        assert updated.id == tags["biology"]
        assert updated.name == "life sciences"
        assert updated.description == "All about biology"

    async def test_update_to_taken_name_fails(self, tag_service, db_session, tags):
        with pytest.raises(TagAlreadyExistsError):
            await tag_service.update_tag(db_session, tags["biology"], "CHEMISTRY")

    async def test_case_only_rename_is_allowed(self, tag_service, db_session, tags):
        updated = await tag_service.update_tag(db_session, tags["biology"], "Biology")

        assert updated.name == "Biology"


class TestDeleteTags:
    async def test_unused_tag_is_deleted(self, tag_service, db_session, tags):
        assert await tag_service.delete_tag(db_session, tags["biology"]) is True

        with pytest.raises(TagNotFoundError):
            await tag_service.get_tag_by_id(db_session, tags["biology"])

    async def test_missing_tag_returns_false(self, tag_service, db_session):
        assert await tag_service.delete_tag(db_session, 4242) is False

    async def test_tag_in_use_cannot_be_deleted(
        self, tag_service, db_session, tags, make_association
    ):
        make_association(tags["physics"], 1)

        with pytest.raises(TagInUseError):
            await tag_service.delete_tag(db_session, tags["physics"])

    async def test_merged_away_tag_can_be_deleted(
        self, tag_service, association_service, db_session, tags, make_association
    ):
        make_association(tags["physics"], 1)
        await association_service.move_to(db_session, tags["physics"], tags["chemistry"])

        assert await tag_service.delete_tag(db_session, tags["physics"]) is True


class TestTagLookups:
    async def test_usage_count_reflects_associations(
        self, tag_service, db_session, tags, make_association
    ):
        make_association(tags["physics"], 1)
        make_association(tags["physics"], 2, scope="tickets")

        by_name = {tag.name: tag for tag in await tag_service.get_all_tags(db_session)}

        assert by_name["physics"].usage_count == 2
        assert by_name["biology"].is_unused()

    async def test_resolve_pair(self, tag_service, db_session, tags):
        source, target = await tag_service.resolve_pair(
            db_session, tags["physics"], tags["chemistry"]
        )

        assert (source.name, target.name) == ("physics", "chemistry")

    async def test_resolve_pair_names_missing_ids(self, tag_service, db_session, tags):
        with pytest.raises(TagNotFoundError, match="998, 999"):
            await tag_service.resolve_pair(db_session, 998, 999)
