"""Sync endpoints: pull the user's document, push a versioned (optimistic) update."""

from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v1.auth import AUTH_ERRORS, get_current_user
from app.core.database import get_db
from app.schemas.auth import CurrentUser
from app.schemas.errors import ConflictResponse, ErrorResponse
from app.schemas.sync import SyncDocumentResponse, SyncPushRequest, SyncPushResponse
from app.services.sync import read_document, write_document

router = APIRouter()

PUSH_ERRORS = {
    **AUTH_ERRORS,
    400: {"model": ErrorResponse},
    409: {"model": ConflictResponse},
}


@router.get("", response_model=SyncDocumentResponse, responses=AUTH_ERRORS)
@router.get("/pull", response_model=SyncDocumentResponse, responses=AUTH_ERRORS, include_in_schema=False)
def pull(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> SyncDocumentResponse:
    """Return every section of the user's document and its version."""
    snapshot = read_document(db, current_user.id)
    return SyncDocumentResponse(**asdict(snapshot))


@router.put("", response_model=SyncPushResponse, responses=PUSH_ERRORS)
@router.post("/push", response_model=SyncPushResponse, responses=PUSH_ERRORS, include_in_schema=False)
def push(
    body: SyncPushRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> SyncPushResponse:
    """
    Replace the sections present in the body if version still matches the server.

    On success returns the new version. If another device wrote first, responds
    409 with serverVersion; the client must pull, reconcile and push again.
    """
    new_version = write_document(
        db, current_user.id, body.section_updates(), body.version
    )
    return SyncPushResponse(version=new_version)
