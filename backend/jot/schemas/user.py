from pydantic import BaseModel, ConfigDict, EmailStr
from pydantic.alias_generators import to_camel


class ProfileOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    email: EmailStr
    full_name: str = ""
    mobile_number: str = ""
    profile_picture_url: str = ""


class ProfileUpdate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    full_name: str | None = None
    mobile_number: str | None = None
    profile_picture_url: str | None = None


class ProfileUpdateOut(ProfileOut):
    message: str
