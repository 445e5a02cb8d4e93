from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from jot.api.deps import get_current_user, get_db
from jot.models.user import User
from jot.schemas.user import ProfileOut, ProfileUpdate, ProfileUpdateOut

router = APIRouter()


@router.get("/profile", response_model=ProfileOut)
def get_profile(current_user: User = Depends(get_current_user)) -> User:
    return current_user


@router.put("/profile", response_model=ProfileUpdateOut)
def update_profile(
    payload: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ProfileUpdateOut:
    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(current_user, field, value.strip())
    db.commit()
    db.refresh(current_user)
    return ProfileUpdateOut(
        message="Profile updated successfully",
        email=current_user.email,
        full_name=current_user.full_name,
        mobile_number=current_user.mobile_number,
        profile_picture_url=current_user.profile_picture_url,
    )
