"""Pydantic schemas for signup/signin.

Learn: EmailStr (pydantic[email]) rejects malformed addresses before
the request ever reaches the auth service — validation failures are
answered with 400 by the app-level handler in main.py.
"""

from pydantic import BaseModel, EmailStr, Field


class AuthRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
