"""
Account API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter

from . import schemas, service

router = APIRouter()


@router.post("/send-code", response_model=schemas.SuccessResponse)
async def send_code(request: schemas.EmailRequest) -> schemas.SuccessResponse:
    return await service.send_verification_code(request)


@router.post("/verify-code", response_model=schemas.SuccessResponse)
async def verify_code(request: schemas.CodeCheckRequest) -> schemas.SuccessResponse:
    return await service.verify_code(request)


@router.post("/forgot-password", response_model=schemas.SuccessResponse)
async def forgot_password(request: schemas.EmailRequest) -> schemas.SuccessResponse:
    return await service.forgot_password(request)


@router.post("/verify-reset-code", response_model=schemas.SuccessResponse)
async def verify_reset_code(request: schemas.CodeCheckRequest) -> schemas.SuccessResponse:
    return await service.verify_reset_code(request)


@router.post("/register", response_model=schemas.SuccessResponse)
async def register(request: schemas.RegisterRequest) -> schemas.SuccessResponse:
    return await service.register(request)


@router.post("/login", response_model=schemas.SuccessResponse)
async def login(request: schemas.LoginRequest) -> schemas.SuccessResponse:
    return await service.login(request)


@router.post("/reset-password", response_model=schemas.SuccessResponse)
async def reset_password(request: schemas.ResetPasswordRequest) -> schemas.SuccessResponse:
    return await service.reset_password(request)
