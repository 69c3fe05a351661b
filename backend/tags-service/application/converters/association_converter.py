"""Association converters between domain entities and API schemas."""

from domain.entities.association import AssociationEntity

from application.rest.schemas.output.association_output import AssociationResponse


class AssociationConverter:
    """Converter class for association transformations between layers."""

    @staticmethod
    def entity_to_response(
        association: AssociationEntity, created: bool = False
    ) -> AssociationResponse:
        """Convert AssociationEntity to AssociationResponse.

        Args:
            association (AssociationEntity): Persisted association.
            created (bool): Whether the current request created it.

        Returns:
            AssociationResponse: Pydantic schema for API response.

        Raises:
            ValueError: If the association has not been persisted.
        """
        if association.is_new():
            raise ValueError("Cannot convert new association to response (no ID)")

        return AssociationResponse(
            id=association.id,
            scope=association.scope,
            object_id=association.object_id,
            tag_id=association.tag_id,
            tagger_id=association.tagger_id,
            label=association.label,
            tagged_on=association.tagged_on,
            created=created,
        )
