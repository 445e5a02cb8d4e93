from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from jot.api.deps import get_current_user, get_db, get_owned_or_error
from jot.models.note import DEFAULT_FOLDER, Note
from jot.models.user import User
from jot.schemas.auth import MessageOut
from jot.schemas.note import NoteCreate, NoteEnvelope, NoteList, NoteMessageEnvelope, NoteUpdate

router = APIRouter()


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


@router.get("", response_model=NoteList)
def list_notes(
    folder: str | None = Query(default=None),
    search: str | None = Query(default=None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    statement = select(Note).where(Note.user_id == current_user.id)
    if folder:
        statement = statement.where(Note.folder == folder)
    if search:
        pattern = _like_pattern(search)
        statement = statement.where(
            or_(Note.title.ilike(pattern, escape="\\"), Note.content.ilike(pattern, escape="\\"))
        )
    statement = statement.order_by(Note.is_pinned.desc(), Note.updated_at.desc())
    return {"notes": db.execute(statement).scalars().all()}


@router.post("", response_model=NoteMessageEnvelope, status_code=status.HTTP_201_CREATED)
def create_note(
    payload: NoteCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    note = Note(
        user_id=current_user.id,
        title=(payload.title or "").strip() or "Untitled Note",
        content=payload.content or "",
        tags=payload.tags or [],
        folder=(payload.folder or "").strip() or DEFAULT_FOLDER,
    )
    db.add(note)
    db.commit()
    db.refresh(note)
    return {"message": "Note created successfully", "note": note}


@router.get("/{note_id}", response_model=NoteEnvelope)
def get_note(note_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> dict:
    return {"note": get_owned_or_error(db, Note, note_id, owner=current_user, label="Note")}


@router.put("/{note_id}", response_model=NoteMessageEnvelope)
def update_note(
    note_id: str,
    payload: NoteUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    note = get_owned_or_error(db, Note, note_id, owner=current_user, label="Note")
    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(note, field, value)
    note.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(note)
    return {"message": "Note updated successfully", "note": note}


@router.delete("/{note_id}", response_model=MessageOut)
def delete_note(note_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> MessageOut:
    note = get_owned_or_error(db, Note, note_id, owner=current_user, label="Note")
    db.delete(note)
    db.commit()
    return MessageOut(message="Note deleted successfully")
