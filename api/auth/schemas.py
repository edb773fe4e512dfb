"""
Auth API schemas (request/response models).
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class EmailRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)


class CodeCheckRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    code: str = Field(..., min_length=1, max_length=16)


class RegisterRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=8, max_length=128)


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1, max_length=128)


class ResetPasswordRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    new_password: str = Field(..., min_length=8, max_length=128)


class SuccessResponse(BaseModel):
    success: bool = True
