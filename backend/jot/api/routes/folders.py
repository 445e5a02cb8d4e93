from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from jot.api.deps import get_current_user, get_db, get_owned_or_error
from jot.core.exceptions import ValidationError
from jot.models.folder import DEFAULT_FOLDER_COLOR, Folder
from jot.models.note import DEFAULT_FOLDER, Note
from jot.models.user import User
from jot.schemas.auth import MessageOut
from jot.schemas.folder import FolderCreate, FolderList, FolderMessageEnvelope, FolderUpdate

router = APIRouter()


@router.get("", response_model=FolderList)
def list_folders(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> dict:
    folders = db.execute(
        select(Folder).where(Folder.user_id == current_user.id).order_by(Folder.created_at.asc())
    ).scalars().all()
    return {"folders": folders}


@router.post("", response_model=FolderMessageEnvelope, status_code=status.HTTP_201_CREATED)
def create_folder(
    payload: FolderCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    name = (payload.name or "").strip()
    if not name:
        raise ValidationError("Folder name is required")

    folder = Folder(user_id=current_user.id, name=name, color=payload.color or DEFAULT_FOLDER_COLOR)
    db.add(folder)
    db.commit()
    db.refresh(folder)
    return {"message": "Folder created successfully", "folder": folder}


@router.put("/{folder_id}", response_model=FolderMessageEnvelope)
def update_folder(
    folder_id: str,
    payload: FolderUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    folder = get_owned_or_error(db, Folder, folder_id, owner=current_user, label="Folder")
    changes = payload.model_dump(exclude_unset=True)
    if "name" in changes:
        name = (changes["name"] or "").strip()
        if not name:
            raise ValidationError("Folder name cannot be empty")
        folder.name = name
    if changes.get("color") is not None:
        folder.color = changes["color"]

    db.commit()
    db.refresh(folder)
    return {"message": "Folder updated successfully", "folder": folder}


@router.delete("/{folder_id}", response_model=MessageOut)
def delete_folder(
    folder_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageOut:
    folder = get_owned_or_error(db, Folder, folder_id, owner=current_user, label="Folder")
    db.execute(
        update(Note)
        .where(Note.user_id == current_user.id, Note.folder == folder.name)
        .values(folder=DEFAULT_FOLDER, updated_at=datetime.now(timezone.utc))
        .execution_options(synchronize_session=False)
    )
    db.delete(folder)
    db.commit()
    return MessageOut(message="Folder deleted successfully, notes moved to General")
