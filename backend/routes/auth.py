"""
Numeris - Routes Auth
Register / Login / Reset password, and the bearer-token dependencies used by
every private route.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.concurrency import run_in_threadpool

from config import is_object_id
from dependencies import (
    get_activity_logger,
    get_password_hasher,
    get_token_service,
    get_user_repository,
)
from errors import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from models.activity import USER_CREATED_ACCOUNT, USER_UPDATED_ACCOUNT
from models.auth import PasswordReset, UserCreate, UserLogin, new_user

logger = logging.getLogger("auth")

router = APIRouter(tags=["Auth"])

TOKEN_COOKIE = "token"


# ==================== HELPERS ====================

async def get_current_user(request: Request, tokens=Depends(get_token_service)) -> dict:
    """Claims of the bearer token: {"id", "email", "exp", "token"}."""
    header = request.headers.get("Authorization")
    if not header:
        raise UnauthorizedError("No token provided")

    parts = header.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        raise UnauthorizedError("Invalid authorization header")

    claims = tokens.parse(parts[1])
    claims["token"] = parts[1]
    return claims


async def get_owner_id(userID: str, user: dict = Depends(get_current_user)) -> str:
    """The {userID} path segment, once it is known to belong to the caller."""
    if not is_object_id(userID):
        raise ValidationError(f"invalid user id: {userID}")
    if userID != user["id"]:
        logger.warning(f"User {user['id']} tried to access account {userID}")
        raise UnauthorizedError("token does not grant access to this account")
    return userID


# ==================== REGISTER / LOGIN ====================

@router.post("/register", status_code=201)
async def register(
    data: UserCreate,
    users=Depends(get_user_repository),
    hasher=Depends(get_password_hasher),
    activity=Depends(get_activity_logger),
):
    """Inscription utilisateur."""
    password_hash = await run_in_threadpool(hasher.hash, data.password)
    user = new_user(data, password_hash)

    stored = await users.add_user(user, user.email)
    if stored.id != user.id:
        raise ConflictError("user already exists")

    activity.record(stored.id, USER_CREATED_ACCOUNT, {"email": stored.email})
    return {"message": "user created successfully", "user": stored.public()}


@router.post("/login")
async def login(
    data: UserLogin,
    response: Response,
    users=Depends(get_user_repository),
    hasher=Depends(get_password_hasher),
    tokens=Depends(get_token_service),
):
    """Connexion utilisateur."""
    try:
        user = await users.verify_login(data.email)
    except NotFoundError:
        raise UnauthorizedError("invalid login details")

    await run_in_threadpool(hasher.verify, user.password, data.password)

    token = tokens.issue(user.id, user.email)
    await users.save_token(user.id, token)

    response.headers["Authorization"] = f"Bearer {token}"
    response.set_cookie(
        TOKEN_COOKIE,
        token,
        max_age=int(tokens.ttl.total_seconds()),
        httponly=True,
        samesite="lax",
    )
    return {"message": "login successful", "token": token, "user": user.public()}


@router.post("/reset-password")
async def reset_password(
    data: PasswordReset,
    user: dict = Depends(get_current_user),
    users=Depends(get_user_repository),
    hasher=Depends(get_password_hasher),
    activity=Depends(get_activity_logger),
):
    if data.email != (user.get("email") or "").lower():
        raise UnauthorizedError("token does not grant access to this account")

    password_hash = await run_in_threadpool(hasher.hash, data.password)
    await users.update_password(data.email, password_hash)

    activity.record(user["id"], USER_UPDATED_ACCOUNT, {"field": "password"})
    return {"message": "password updated successfully"}


# ==================== PROFILE ====================

@router.get("/user/{userID}/profile")
async def get_profile(
    owner_id: str = Depends(get_owner_id),
    users=Depends(get_user_repository),
):
    """Profil de l'utilisateur connecté (sans mot de passe)."""
    user = await users.find_by_id(owner_id)
    return {"user": user.public()}
