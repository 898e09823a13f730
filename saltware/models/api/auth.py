"""
Pydantic models for admin access
"""

from pydantic import BaseModel, EmailStr
from typing import Optional


class AccessRequest(BaseModel):
    """Admin access form: sign in, or create the first admin"""
    name: Optional[str] = None
    email: EmailStr
    password: str
    confirm_password: str


class IdentityPublic(BaseModel):
    """Public identity info (no tokens)"""
    user_id: str
    email: Optional[str] = None
    name: Optional[str] = None
    is_admin: bool = False

    model_config = {
        "from_attributes": True,
    }


class AuthStatusResponse(BaseModel):
    """Access gate state for route guarding"""
    state: str
    authenticated: bool
    is_admin: bool
    user: Optional[IdentityPublic] = None
    redirect: Optional[str] = None  # sign-in surface when the dashboard is refused
