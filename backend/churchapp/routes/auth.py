"""
ChurchApp Backend — Authentication Routes
===========================================

What:  POST /auth/login (public) and GET /auth/me.
Who:   Web, admin and mobile clients; the token goes into
       `Authorization: Bearer <token>` on every later call.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from churchapp.database import get_db_session
from churchapp.dependencies import authenticate
from churchapp.schemas.auth import CurrentUser, LoginRequest, LoginResponse
from churchapp.schemas.common import ErrorResponse
from churchapp.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        400: {"description": "Malformed body", "model": ErrorResponse},
        401: {"description": "Invalid credentials", "model": ErrorResponse},
    },
    summary="Log in with email and password",
    description=(
        "Returns a bearer token valid for 7 days plus the user and member views. "
        "Unknown email and wrong password produce the same 401 response."
    ),
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> LoginResponse:
    return await auth_service.login(db, body.email, body.password)


@router.get(
    "/me",
    response_model=CurrentUser,
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="Claims of the current token",
)
async def me(user: CurrentUser = Depends(authenticate)) -> CurrentUser:
    return user
