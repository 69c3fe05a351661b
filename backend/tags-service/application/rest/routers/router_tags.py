import logging
from typing import Any, Dict, List

from application.converters.tag_converter import TagConverter
from application.rest.schemas.input.tag_input import (
    TagCopyRequest,
    TagCreate,
    TagMergeRequest,
    TagUpdate,
)
from application.rest.schemas.output.common_output import ErrorResponse
from application.rest.schemas.output.tag_output import (
    TagLogResponse,
    TagOperationResponse,
    TagResponse,
)
from domain.entities.tag_log import TagLogAction
from domain.services.association_service import AssociationService
from domain.services.tag_service import (
    TagAlreadyExistsError,
    TagInUseError,
    TagNotFoundError,
    TagService,
)
from fastapi import APIRouter, Depends, HTTPException, Query, status
from infrastructure.notifications.logging_notifier import LoggingNotifier
from sqlalchemy.orm import Session
from utils.dependencies import (
    get_association_service,
    get_db,
    get_notifier,
    get_tag_service,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _error(description: str, example: str) -> Dict[str, Any]:
    """OpenAPI documentation of an ``ErrorResponse`` body."""
    return {
        "model": ErrorResponse,
        "description": description,
        "content": {"application/json": {"example": {"detail": example}}},
    }


TAG_NOT_FOUND = _error("Tag not found.", "Tag with ID 42 not found")
NAME_CONFLICT = _error(
    "Invalid tag name or name already taken.", "Tag with name 'physics' already exists"
)
USER_REQUIRED = _error("User authentication required.", "User ID not found in headers")


@router.get(
    path="/tags",
    description="List every tag with the number of objects carrying it.",
    response_model=List[TagResponse],
    status_code=status.HTTP_200_OK,
    responses={
        status.HTTP_500_INTERNAL_SERVER_ERROR: _error(
            "Tags could not be read.", "Failed to retrieve tags"
        ),
    },
)
async def get_tags(
    db: Session = Depends(get_db), tag_service: TagService = Depends(get_tag_service)
) -> List[TagResponse]:
    """List tags sorted by name, ignoring case.

    Raises:
        HTTPException: 500 if the tags cannot be read.
    """
    try:
        return TagConverter.entities_to_responses(await tag_service.get_all_tags(db))
    except Exception as e:
        logger.error(f"Failed to list tags: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve tags",
        ) from e


@router.post(
    path="/tags",
    description="Register a new tag.",
    response_model=TagResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        status.HTTP_400_BAD_REQUEST: NAME_CONFLICT,
        status.HTTP_500_INTERNAL_SERVER_ERROR: _error(
            "Tag could not be stored.", "Failed to create tag"
        ),
    },
)
async def create_tag(
    tag_create: TagCreate,
    db: Session = Depends(get_db),
    tag_service: TagService = Depends(get_tag_service),
) -> TagResponse:
    """Register a tag whose name is not yet used, ignoring case.

    Args:
        tag_create (TagCreate): Name and description of the tag.
        db (Session): Fresh database session for this request.
        tag_service (TagService): Tag registry service.

    Returns:
        TagResponse: The stored tag with its id.

    Raises:
        HTTPException: 400 if the name is blank or taken.
        HTTPException: 500 if the tag cannot be stored.
    """
    try:
        created = await tag_service.create_tag(db, tag_create.name, tag_create.description)
        return TagConverter.entity_to_response(created)
    except (TagAlreadyExistsError, ValueError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except Exception as e:
        logger.error(f"Failed to create tag '{tag_create.name}': {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create tag",
        ) from e


@router.get(
    path="/tags/{tag_id}",
    description="Read one tag.",
    response_model=TagResponse,
    status_code=status.HTTP_200_OK,
    responses={status.HTTP_404_NOT_FOUND: TAG_NOT_FOUND},
)
async def get_tag_by_id(
    tag_id: int,
    db: Session = Depends(get_db),
    tag_service: TagService = Depends(get_tag_service),
) -> TagResponse:
    try:
        return TagConverter.entity_to_response(await tag_service.get_tag_by_id(db, tag_id))
    except TagNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.put(
    path="/tags/{tag_id}",
    description="Rename a tag or change its description.",
    response_model=TagResponse,
    status_code=status.HTTP_200_OK,
    responses={
        status.HTTP_400_BAD_REQUEST: NAME_CONFLICT,
        status.HTTP_404_NOT_FOUND: TAG_NOT_FOUND,
    },
)
async def update_tag(
    tag_id: int,
    tag_update: TagUpdate,
    db: Session = Depends(get_db),
    tag_service: TagService = Depends(get_tag_service),
) -> TagResponse:
    """Rename a tag. Associations keep pointing at the same tag id.

    Raises:
        HTTPException: 400 if the new name is blank or used by another tag.
        HTTPException: 404 if the tag does not exist.
        HTTPException: 500 if the change cannot be stored.
    """
    try:
        updated = await tag_service.update_tag(
            db, tag_id, tag_update.name, tag_update.description
        )
        return TagConverter.entity_to_response(updated)
    except TagNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except (TagAlreadyExistsError, ValueError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except Exception as e:
        logger.error(f"Failed to update tag {tag_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update tag",
        ) from e


@router.delete(
    path="/tags/{tag_id}",
    description="Delete a tag that no object carries any more.",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        status.HTTP_404_NOT_FOUND: TAG_NOT_FOUND,
        status.HTTP_409_CONFLICT: _error(
            "Objects still carry the tag; merge it into another tag first.",
            "Tag with ID 42 is still attached to 3 object(s)",
        ),
    },
)
async def delete_tag(
    tag_id: int,
    db: Session = Depends(get_db),
    tag_service: TagService = Depends(get_tag_service),
) -> None:
    """Delete an unused tag.

    Raises:
        HTTPException: 404 if the tag does not exist.
        HTTPException: 409 if objects still carry the tag.
        HTTPException: 500 if the tag cannot be deleted.
    """
    try:
        deleted = await tag_service.delete_tag(db, tag_id)
    except TagInUseError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    except Exception as e:
        logger.error(f"Failed to delete tag {tag_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete tag",
        ) from e

    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"Tag with ID {tag_id} not found"
        )


@router.post(
    path="/tags/{tag_id}/merge",
    description="Merge a tag into another tag: move its associations, dropping duplicates.",
    response_model=TagOperationResponse,
    status_code=status.HTTP_200_OK,
    responses={
        status.HTTP_400_BAD_REQUEST: _error(
            "Merging a tag into itself.", "Cannot merge a tag into itself"
        ),
        status.HTTP_401_UNAUTHORIZED: USER_REQUIRED,
        status.HTTP_404_NOT_FOUND: TAG_NOT_FOUND,
        status.HTTP_500_INTERNAL_SERVER_ERROR: _error(
            "Merge failed and was rolled back.", "Failed to merge tag"
        ),
    },
)
async def merge_tag(
    tag_id: int,
    merge_request: TagMergeRequest,
    db: Session = Depends(get_db),
    tag_service: TagService = Depends(get_tag_service),
    association_service: AssociationService = Depends(get_association_service),
    notifier: LoggingNotifier = Depends(get_notifier),
) -> TagOperationResponse:
    """Merge tag ``tag_id`` into ``merge_request.target_tag_id``.

    The source tag itself is kept; once merged it has no associations and
    can be deleted.

    Args:
        tag_id (int): Tag being merged away.
        merge_request (TagMergeRequest): Target tag.
        db (Session): Fresh database session for this request.
        tag_service (TagService): Resolves both tags.
        association_service (AssociationService): Performs the merge.
        notifier (LoggingNotifier): Collects rows that could not be moved.

    Returns:
        TagOperationResponse: Operation result with per-row warnings.

    Raises:
        HTTPException: 400 if both ids are equal.
        HTTPException: 404 if either tag does not exist.
        HTTPException: 500 if the merge failed.
    """
    target_tag_id = merge_request.target_tag_id
    if tag_id == target_tag_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot merge a tag into itself",
        )

    try:
        source, target = await tag_service.resolve_pair(db, tag_id, target_tag_id)
        if not await association_service.move_to(db, source.id, target.id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Both source and target tag ids are required",
            )
        return TagConverter.operation_to_response(
            TagLogAction.OBJECTS_MOVED, source, target, notifier.messages
        )
    except TagNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to merge tag {tag_id} into {target_tag_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to merge tag",
        ) from e


@router.post(
    path="/tags/{tag_id}/copy",
    description="Copy a tag's associations to another tag, skipping objects it already covers.",
    response_model=TagOperationResponse,
    status_code=status.HTTP_200_OK,
    responses={
        status.HTTP_400_BAD_REQUEST: _error(
            "Copying a tag onto itself.", "Cannot copy a tag onto itself"
        ),
        status.HTTP_401_UNAUTHORIZED: USER_REQUIRED,
        status.HTTP_404_NOT_FOUND: TAG_NOT_FOUND,
        status.HTTP_500_INTERNAL_SERVER_ERROR: _error(
            "Copy failed and was rolled back.", "Failed to copy tag"
        ),
    },
)
async def copy_tag(
    tag_id: int,
    copy_request: TagCopyRequest,
    db: Session = Depends(get_db),
    tag_service: TagService = Depends(get_tag_service),
    association_service: AssociationService = Depends(get_association_service),
    notifier: LoggingNotifier = Depends(get_notifier),
) -> TagOperationResponse:
    """Copy the associations of ``tag_id`` to ``copy_request.target_tag_id``.

    Rows that could not be copied are returned as ``warnings``; the rest of
    the copy is kept.

    Raises:
        HTTPException: 400 if both ids are equal.
        HTTPException: 404 if either tag does not exist.
        HTTPException: 500 if the copy failed.
    """
    target_tag_id = copy_request.target_tag_id
    if tag_id == target_tag_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot copy a tag onto itself",
        )

    try:
        source, target = await tag_service.resolve_pair(db, tag_id, target_tag_id)
        copied = await association_service.copy_to(
            db, source.id, target.id, scope=copy_request.scope or None
        )
        if not copied:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Both source and target tag ids are required",
            )
        return TagConverter.operation_to_response(
            TagLogAction.OBJECTS_COPIED, source, target, notifier.messages
        )
    except TagNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to copy tag {tag_id} to {target_tag_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to copy tag",
        ) from e


@router.get(
    path="/tags/{tag_id}/logs",
    description="List audit log entries attributed to a tag, newest first.",
    response_model=List[TagLogResponse],
    status_code=status.HTTP_200_OK,
    responses={
        status.HTTP_401_UNAUTHORIZED: USER_REQUIRED,
        status.HTTP_404_NOT_FOUND: TAG_NOT_FOUND,
    },
)
async def get_tag_logs(
    tag_id: int,
    limit: int = Query(default=50, ge=1, le=500),
    db: Session = Depends(get_db),
    tag_service: TagService = Depends(get_tag_service),
    association_service: AssociationService = Depends(get_association_service),
) -> List[TagLogResponse]:
    """Audit trail of merges and copies into a tag.

    Raises:
        HTTPException: 404 if the tag does not exist.
    """
    try:
        await tag_service.get_tag_by_id(db, tag_id)
    except TagNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e

    entries = await association_service.get_tag_logs(db, tag_id, limit=limit)
    return [TagConverter.log_to_response(entry) for entry in entries]
