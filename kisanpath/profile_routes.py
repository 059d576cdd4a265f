"""Profile endpoints: coin/XP balance, language preference and registration details."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from .api_models import AccountPayload, LanguageUpdatePayload, LanguageUpdateRequest, ProfileUpdateRequest
from .db.session import STORE_ERRORS, session_scope
from .errors import DataUnavailable, WriteFailure
from .identity import current_user_id
from .languages import is_supported, normalize_language_code
from .lesson_models import UserAccount
from .repositories.profiles import profile_repository

router = APIRouter(prefix="/api/profile", tags=["profile"])
logger = logging.getLogger(__name__)


def _require_user(user_id: Optional[str]) -> str:
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Sign in to use your profile.")
    return user_id


def _account_payload(account: UserAccount) -> AccountPayload:
    return AccountPayload(**account.model_dump())


def _load_account(user_id: str) -> UserAccount:
    try:
        with session_scope(commit=False) as session:
            account = profile_repository.get_account(session, user_id)
    except STORE_ERRORS as exc:
        logger.error("Failed to load profile %s: %s", user_id, exc)
        raise DataUnavailable("Could not load your profile.") from exc
    if account is None:
        raise DataUnavailable(f"Profile '{user_id}' does not exist.", reason="not_found")
    return account


@router.get("/me", response_model=AccountPayload)
def get_my_account(user_id: Optional[str] = Depends(current_user_id)) -> AccountPayload:
    try:
        account = _load_account(_require_user(user_id))
    except DataUnavailable as exc:
        code = status.HTTP_404_NOT_FOUND if exc.reason == "not_found" else status.HTTP_503_SERVICE_UNAVAILABLE
        raise HTTPException(status_code=code, detail=str(exc)) from exc
    return _account_payload(account)


@router.put("/language", response_model=LanguageUpdatePayload)
def update_language(
    request: LanguageUpdateRequest,
    user_id: Optional[str] = Depends(current_user_id),
) -> LanguageUpdatePayload:
    try:
        language = normalize_language_code(request.language)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    if not is_supported(language):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Language '{language}' is not offered.",
        )
    if not user_id:
        # Guests keep the choice on the device only.
        return LanguageUpdatePayload(language=language, saved=False)
    try:
        with session_scope() as session:
            saved = profile_repository.set_language(session, user_id, language)
    except STORE_ERRORS as exc:
        logger.error("Error saving language for %s: %s", user_id, exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"message": str(WriteFailure("Could not save your language.")), "retryable": True},
        ) from exc
    return LanguageUpdatePayload(language=language, saved=saved)


@router.put("", response_model=AccountPayload)
def upsert_profile(
    request: ProfileUpdateRequest,
    user_id: Optional[str] = Depends(current_user_id),
) -> AccountPayload:
    owner = _require_user(user_id)
    try:
        with session_scope() as session:
            account = profile_repository.upsert(
                session,
                owner,
                full_name=request.full_name,
                mobile_no=request.mobile_no,
                agristack_id=request.agristack_id,
            )
    except STORE_ERRORS as exc:
        logger.error("Error upserting profile %s: %s", owner, exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"message": str(WriteFailure("Could not save your profile.")), "retryable": True},
        ) from exc
    return _account_payload(account)


__all__ = ["router"]
