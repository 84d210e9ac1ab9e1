"""Pydantic schemas for signup and signin.

Learn: Every field is optional at the schema level on purpose. A missing
username or password is a domain error with its own status code
(400 on signup, 401 on signin), decided by the route, not a generic
request validation failure.
"""

from typing import Optional

from pydantic import BaseModel


class SignupRequest(BaseModel):
    name: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None


class SigninRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class TokenResponse(BaseModel):
    success: bool = True
    token: str
