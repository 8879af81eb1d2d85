"""
Account standing — internal service-to-service routes.

Called by the auth service on every login and by the upload pipeline before
accepting a file.  Not exposed through the public gateway; callers present
the shared X-Internal-Token.

Routes:
  POST /api/v1/internal/standing/{account_id}/login-check    403 when banned or inactive
  POST /api/v1/internal/standing/{account_id}/upload-check   422 when suspended / uploads disabled
"""
from __future__ import annotations

import secrets
import uuid

from fastapi import APIRouter, Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, get_settings
from app.database import get_db
from app.exceptions import Forbidden
from app.standing import controller as ctrl
from app.standing.schemas import StandingResponse


def verify_internal_token(
    x_internal_token: str | None = Header(None),
    settings: Settings = Depends(get_settings),
) -> None:
    # An empty configured token disables the check (local development).
    if settings.internal_api_token and not secrets.compare_digest(
        x_internal_token or "", settings.internal_api_token
    ):
        raise Forbidden("Invalid internal token.")


router = APIRouter(
    prefix="/internal/standing",
    tags=["internal-standing"],
    dependencies=[Depends(verify_internal_token)],
)


@router.post(
    "/{account_id}/login-check",
    response_model=StandingResponse,
    summary="[Internal] Standing check at login",
    description="Expires an overdue suspension first, then refuses banned or inactive accounts.",
)
async def login_check(
    account_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
) -> StandingResponse:
    return await ctrl.login_check(session, account_id)


@router.post(
    "/{account_id}/upload-check",
    response_model=StandingResponse,
    summary="[Internal] Standing check before an upload",
)
async def upload_check(
    account_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
) -> StandingResponse:
    return await ctrl.upload_check(session, account_id)
