"""Login request schema for the application password."""

from pydantic import BaseModel


class LoginRequest(BaseModel):
    """Payload for login attempts."""

    password: str


class TokenRead(BaseModel):
    access_token: str
    token_type: str = "bearer"
