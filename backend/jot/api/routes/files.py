import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from jot.api.deps import get_current_user, get_db, get_storage_client
from jot.core.exceptions import ResourceNotFoundError, ValidationError
from jot.models.file import File
from jot.models.note import DEFAULT_FOLDER
from jot.models.user import User
from jot.schemas.file import FileCreate, FileEnvelope, FileList, FileMove
from jot.services.storage import StorageError, UploadthingClient

router = APIRouter()
logger = logging.getLogger(__name__)


def _get_user_file(db: Session, file_id: str, owner: User) -> File:
    # Other owners' files are reported as missing, not forbidden.
    item = db.execute(select(File).where(File.id == file_id, File.user_id == owner.id)).scalar_one_or_none()
    if item is None:
        raise ResourceNotFoundError("File")
    return item


@router.get("", response_model=FileList)
def list_files(
    folder: str | None = Query(default=None),
    type: str | None = Query(default=None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    statement = select(File).where(File.user_id == current_user.id)
    if folder and folder != "all":
        statement = statement.where(File.folder == folder)
    if type == "image":
        statement = statement.where(File.type.like("image/%"))
    elif type == "document":
        statement = statement.where(or_(File.type == "application/pdf", File.type.like("text/%")))
    statement = statement.order_by(File.created_at.desc())
    return {"files": db.execute(statement).scalars().all()}


@router.post("", response_model=FileEnvelope, status_code=status.HTTP_201_CREATED)
def register_file(
    payload: FileCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    item = File(
        user_id=current_user.id,
        name=payload.name,
        url=payload.url,
        key=payload.key,
        type=payload.type,
        size=payload.size,
        folder=(payload.folder or "").strip() or DEFAULT_FOLDER,
    )
    db.add(item)
    db.commit()
    db.refresh(item)
    return {"file": item}


@router.patch("", response_model=FileEnvelope)
def move_file(
    payload: FileMove,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    if not payload.file_id or not payload.folder:
        raise ValidationError("File ID and folder are required")

    item = _get_user_file(db, payload.file_id, current_user)
    item.folder = payload.folder
    db.commit()
    db.refresh(item)
    return {"file": item}


@router.get("/{file_id}", response_model=FileEnvelope)
def get_file(file_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> dict:
    return {"file": _get_user_file(db, file_id, current_user)}


@router.delete("/{file_id}")
def delete_file(
    file_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: UploadthingClient = Depends(get_storage_client),
) -> dict:
    item = _get_user_file(db, file_id, current_user)
    try:
        storage.delete_files([item.key])
    except StorageError:
        # Storage failures never block removing the record.
        logger.warning("Failed to delete %s from storage", item.key, exc_info=True)

    db.delete(item)
    db.commit()
    return {"success": True}
