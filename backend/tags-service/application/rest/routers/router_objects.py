import logging
from typing import Optional

from application.converters.association_converter import AssociationConverter
from application.rest.schemas.input.association_input import AssociationCreate
from application.rest.schemas.output.association_output import (
    AssociationResponse,
    UntagResponse,
)
from application.rest.schemas.output.common_output import ErrorResponse
from domain.entities.association import AssociationValidationError
from domain.services.association_service import AssociationService
from domain.services.tag_service import TagNotFoundError, TagService
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from utils.dependencies import get_association_service, get_db, get_tag_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    path="/objects",
    description="Attach a tag to an object; an existing identical association is returned as-is.",
    response_model=AssociationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        status.HTTP_201_CREATED: {
            "model": AssociationResponse,
            "description": "Association created, or the existing one (created=false).",
        },
        status.HTTP_400_BAD_REQUEST: {
            "model": ErrorResponse,
            "description": "Invalid scope or identifiers.",
            "content": {
                "application/json": {
                    "example": {"detail": "Scope must not be empty"}
                }
            },
        },
        status.HTTP_401_UNAUTHORIZED: {
            "model": ErrorResponse,
            "description": "User authentication required.",
        },
        status.HTTP_404_NOT_FOUND: {
            "model": ErrorResponse,
            "description": "Tag not found.",
        },
        status.HTTP_500_INTERNAL_SERVER_ERROR: {
            "model": ErrorResponse,
            "description": "Internal server error - association could not be saved.",
            "content": {
                "application/json": {"example": {"detail": "Failed to tag object."}}
            },
        },
    },
)
async def tag_object(
    association_create: AssociationCreate,
    db: Session = Depends(get_db),
    tag_service: TagService = Depends(get_tag_service),
    association_service: AssociationService = Depends(get_association_service),
) -> AssociationResponse:
    """Tag an object on behalf of the acting user.

    Args:
        association_create (AssociationCreate): Scope, object and tag to associate.
        db (Session): Fresh database session for this request.
        tag_service (TagService): Used to check the tag exists.
        association_service (AssociationService): Creates the association.

    Returns:
        AssociationResponse: The association with its ``created`` flag.

    Raises:
        HTTPException: 400 if the association fields are invalid.
        HTTPException: 404 if the tag does not exist.
        HTTPException: 500 if internal server errors occur.
    """
    try:
        await tag_service.get_tag_by_id(db, association_create.tag_id)
        association, created = await association_service.tag_object(
            db,
            association_create.scope,
            association_create.object_id,
            association_create.tag_id,
            label=association_create.label,
        )
        return AssociationConverter.entity_to_response(association, created=created)
    except AssociationValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)
        ) from e
    except TagNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except Exception as e:
        logger.error(f"Failed to tag object: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to tag object",
        ) from e


@router.get(
    path="/objects/lookup",
    description="Find the association of a tag with one object.",
    response_model=AssociationResponse,
    status_code=status.HTTP_200_OK,
    responses={
        status.HTTP_200_OK: {
            "model": AssociationResponse,
            "description": "Association found.",
        },
        status.HTTP_404_NOT_FOUND: {
            "model": ErrorResponse,
            "description": "The object does not carry the tag.",
            "content": {
                "application/json": {"example": {"detail": "Association not found"}}
            },
        },
    },
)
async def lookup_association(
    scope: str,
    object_id: int,
    tag_id: int,
    tagger_id: Optional[int] = Query(default=None, description="Only match this tagger"),
    label: str = "",
    db: Session = Depends(get_db),
    association_service: AssociationService = Depends(get_association_service),
) -> AssociationResponse:
    """Look up one association by scope, object, tag and label.

    Raises:
        HTTPException: 404 if no association matches.
    """
    association = await association_service.find_association(
        db, scope, object_id, tag_id, tagger_id=tagger_id, label=label
    )
    if association is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Association not found"
        )
    return AssociationConverter.entity_to_response(association)


@router.delete(
    path="/objects",
    description="Remove a tag from an object.",
    response_model=UntagResponse,
    status_code=status.HTTP_200_OK,
    responses={
        status.HTTP_200_OK: {
            "model": UntagResponse,
            "description": "Number of associations removed (0 if none matched).",
        },
        status.HTTP_500_INTERNAL_SERVER_ERROR: {
            "model": ErrorResponse,
            "description": "Internal server error - untagging failed.",
        },
    },
)
async def untag_object(
    scope: str,
    object_id: int,
    tag_id: int,
    label: str = "",
    db: Session = Depends(get_db),
    association_service: AssociationService = Depends(get_association_service),
) -> UntagResponse:
    """Remove a tag from an object.

    Raises:
        HTTPException: 500 if internal server errors occur.
    """
    try:
        removed = await association_service.untag_object(
            db, scope, object_id, tag_id, label=label
        )
        return UntagResponse(removed=removed)
    except Exception as e:
        logger.error(f"Failed to untag {scope}#{object_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to untag object",
        ) from e
