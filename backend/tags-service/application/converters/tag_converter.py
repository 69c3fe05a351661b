"""Conversions from tag-related domain objects to API schemas."""

from typing import List

from domain.entities.tag import TagEntity
from domain.entities.tag_log import TagLogAction, TagLogEntity

from application.rest.schemas.output.tag_output import (
    TagLogResponse,
    TagOperationResponse,
    TagResponse,
)


class TagConverter:
    """Build tag, audit log and merge/copy responses.

    Example:
        >>> TagConverter.entity_to_response(TagEntity(id=3, name="physics"))
        TagResponse(id=3, name='physics', description='', usage_count=0)
    """

    @staticmethod
    def entity_to_response(tag_entity: TagEntity) -> TagResponse:
        """Convert a stored tag to its API representation.

        Raises:
            ValueError: If the tag has not been persisted.
        """
        if tag_entity.is_new():
            raise ValueError("Cannot convert new tag entity to response (no ID)")

        return TagResponse(
            id=tag_entity.id,
            name=tag_entity.name,
            description=tag_entity.description,
            usage_count=tag_entity.usage_count,
        )

    @staticmethod
    def entities_to_responses(tag_entities: List[TagEntity]) -> List[TagResponse]:
        return [TagConverter.entity_to_response(entity) for entity in tag_entities]

    @staticmethod
    def log_to_response(entry: TagLogEntity) -> TagLogResponse:
        return TagLogResponse(
            id=entry.id,
            tag_id=entry.tag_id,
            action=entry.action.value,
            payload=entry.payload,
            affected_count=entry.affected_count,
            actor_id=entry.actor_id,
            timestamp=entry.timestamp,
        )

    @staticmethod
    def operation_to_response(
        action: TagLogAction,
        source: TagEntity,
        target: TagEntity,
        warnings: List[str],
    ) -> TagOperationResponse:
        """Describe a finished merge or copy.

        Args:
            action (TagLogAction): Which operation ran.
            source (TagEntity): Tag the associations came from.
            target (TagEntity): Tag the associations went to.
            warnings (List[str]): Per-row failures collected by the notifier.

        Returns:
            TagOperationResponse: Operation summary for the API client.
        """
        return TagOperationResponse(
            success=True,
            action=action.value,
            source_tag_id=source.id,
            target_tag_id=target.id,
            target_tag_name=target.name,
            warnings=warnings,
        )
