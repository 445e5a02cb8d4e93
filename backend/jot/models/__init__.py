from jot.models.email_otp import EmailOtp  # noqa: F401
from jot.models.file import File  # noqa: F401
from jot.models.folder import Folder  # noqa: F401
from jot.models.note import Note  # noqa: F401
from jot.models.user import User  # noqa: F401
