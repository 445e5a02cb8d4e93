from pydantic import BaseModel, EmailStr, Field, field_validator


class EmailSchema(BaseModel):
    email: EmailStr

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class OtpRequest(EmailSchema):
    pass


class OtpVerify(EmailSchema):
    # Compared as submitted; any non-matching value counts as an attempt.
    otp: str = Field(min_length=1)


class SignupRequest(EmailSchema):
    password: str = Field(min_length=1, max_length=128)
    full_name: str = Field(default="", max_length=200, alias="fullName")
    mobile_number: str = Field(default="", max_length=50, alias="mobileNumber")

    model_config = {"populate_by_name": True}


class LoginRequest(EmailSchema):
    password: str = Field(min_length=1, max_length=128)


class MessageOut(BaseModel):
    message: str


class SessionOut(BaseModel):
    message: str
    email: EmailStr
