"""
Auth business logic.

Accounts live in Postgres; verification and reset codes live in the
in-memory `CodeRegistry` and are delivered by e-mail.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from core import mailer

from . import codes, repository, schemas, security

logger = logging.getLogger(__name__)


def _success() -> schemas.SuccessResponse:
    return schemas.SuccessResponse(success=True)


async def _require_user(email: str) -> dict:
    user_row = await repository.get_user_by_email(email)
    if user_row is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="This email is not registered.",
        )
    return user_row


async def _deliver_code(
    *,
    email: str,
    purpose: codes.Purpose,
    subject: str,
    text: str,
    failure_detail: str,
) -> None:
    try:
        await mailer.send_mail(to=email, subject=subject, text=text)
    except mailer.MailerError as exc:
        logger.error("code_delivery_failed email=%s subject=%r error=%s", email, subject, exc)
        # Undelivered codes are not kept.
        codes.registry().discard(email, purpose)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=failure_detail,
        ) from exc


def _consume_code(
    email: str,
    purpose: codes.Purpose,
    code: str,
    *,
    not_found_detail: str,
    mismatch_detail: str,
) -> None:
    try:
        codes.registry().verify(email, purpose, code)
    except codes.CodeNotFoundError as exc:
        logger.info("code_not_found email=%s purpose=%s", email, purpose.value)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=not_found_detail) from exc
    except codes.CodeMismatchError as exc:
        logger.info("code_mismatch email=%s purpose=%s", email, purpose.value)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=mismatch_detail) from exc


async def send_verification_code(payload: schemas.EmailRequest) -> schemas.SuccessResponse:
    email = security.normalize_email(payload.email)
    if await repository.get_user_by_email(email) is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="This email is already registered.",
        )

    code = codes.registry().issue(email, codes.Purpose.VERIFY)
    await _deliver_code(
        email=email,
        purpose=codes.Purpose.VERIFY,
        subject="Email Verification Code",
        text=f"Your verification code is: {code}",
        failure_detail="Failed to send verification code.",
    )
    return _success()


async def verify_code(payload: schemas.CodeCheckRequest) -> schemas.SuccessResponse:
    email = security.normalize_email(payload.email)
    _consume_code(
        email,
        codes.Purpose.VERIFY,
        payload.code,
        not_found_detail="No verification code found or it has expired.",
        mismatch_detail="Invalid verification code.",
    )
    return _success()


async def forgot_password(payload: schemas.EmailRequest) -> schemas.SuccessResponse:
    email = security.normalize_email(payload.email)
    await _require_user(email)

    code = codes.registry().issue(email, codes.Purpose.RESET)
    await _deliver_code(
        email=email,
        purpose=codes.Purpose.RESET,
        subject="Password Reset Code",
        text=f"Your password reset code is: {code}",
        failure_detail="Failed to send password reset code.",
    )
    return _success()


async def verify_reset_code(payload: schemas.CodeCheckRequest) -> schemas.SuccessResponse:
    email = security.normalize_email(payload.email)
    await _require_user(email)
    _consume_code(
        email,
        codes.Purpose.RESET,
        payload.code,
        not_found_detail="No reset code found or it has expired.",
        mismatch_detail="Invalid reset code.",
    )
    return _success()


async def register(payload: schemas.RegisterRequest) -> schemas.SuccessResponse:
    existing = await repository.get_user_by_email(payload.email)
    if existing is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email is already registered.",
        )

    password_hash = security.hash_password(payload.password)
    user_row = await repository.create_user(email=payload.email, password_hash=password_hash)
    logger.info("user_registered user_id=%s", user_row["id"])
    return _success()


async def login(payload: schemas.LoginRequest) -> schemas.SuccessResponse:
    user_row = await repository.get_user_by_email(payload.email)
    if user_row is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password.",
        )

    is_valid = security.verify_password(payload.password, str(user_row.get("password_hash") or ""))
    if not is_valid:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password.",
        )

    logger.info("login_succeeded user_id=%s", user_row["id"])
    return _success()


async def reset_password(payload: schemas.ResetPasswordRequest) -> schemas.SuccessResponse:
    user_row = await _require_user(payload.email)

    password_hash = security.hash_password(payload.new_password)
    updated = await repository.update_password_hash(user_id=int(user_row["id"]), password_hash=password_hash)
    if not updated:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="This email is not registered.",
        )

    logger.info("password_reset user_id=%s", user_row["id"])
    return _success()
