"""Request body schemas for the users resource."""

from pydantic import BaseModel, EmailStr


class CreateUser(BaseModel):
    """Body of ``POST /users``. Fields are validated in declaration order."""

    name: str
    email: EmailStr
