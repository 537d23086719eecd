from __future__ import annotations

import secrets
from datetime import UTC, datetime, timedelta
from typing import Annotated, Any

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from loguru import logger
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings
from app.core.db import get_db
from app.models.player import Player
from app.services.player import PlayerService

bearer_scheme = HTTPBearer(auto_error=False)


def _get_jwt_secret() -> str:
    if settings.jwt_secret:
        return settings.jwt_secret

    # Dev fallback, cached so every token of this process shares it
    settings.jwt_secret = secrets.token_urlsafe(32)
    logger.warning("JWT_SECRET is not set; using an ephemeral secret, tokens die on restart")
    return settings.jwt_secret


def create_access_token(*, sub: str, is_admin: bool) -> str:
    """Mint an access token for player ``sub``.

    Players normally get their tokens from the login service. This is the
    claim layout both sides agree on: ``sub`` (player id), ``is_admin``,
    ``iat`` and ``exp``.
    """
    issued_at = datetime.now(UTC)
    expires_at = issued_at + timedelta(seconds=settings.access_token_ttl_seconds)
    claims: dict[str, Any] = {
        "sub": sub,
        "is_admin": is_admin,
        "iat": int(issued_at.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    return jwt.encode(claims, _get_jwt_secret(), algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """Raises ``jwt.InvalidTokenError`` when the token is invalid or expired."""
    return jwt.decode(token, _get_jwt_secret(), algorithms=[settings.jwt_algorithm])


def _player_id_from_claims(claims: dict[str, Any]) -> int:
    sub = claims.get("sub")
    if not sub:
        raise HTTPException(status_code=401, detail="無效的 Token 內容")
    try:
        return int(sub)
    except ValueError:
        raise HTTPException(status_code=401, detail="無效的主體") from None


async def get_current_player(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Player:
    """Resolve the player behind ``Authorization: Bearer <jwt>``.

    401 when the token is missing or invalid, 404 when the player no longer exists.
    """
    if not credentials or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=401, detail="未驗證")
    try:
        claims = decode_access_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token 已過期") from None
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="無效的 Token") from None

    player = await PlayerService(db).get_player(_player_id_from_claims(claims))
    if not player:
        raise HTTPException(status_code=404, detail="找不到玩家")
    return player


def require_admin(player: Annotated[Player, Depends(get_current_player)]) -> Player:
    """Checks the player row rather than the token claim, so revoking is immediate."""
    if not player.is_admin:
        raise HTTPException(status_code=403, detail="需要管理員權限")
    return player
