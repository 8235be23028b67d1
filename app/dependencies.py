"""FastAPI dependencies: database session, cache and the authenticated caller."""

from collections.abc import Callable, Coroutine
from typing import Annotated, Any
from uuid import UUID

import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.permissions import CallerContext, UserRole
from app.core.redis_client import CacheManager, get_redis_client
from app.core.security import token_subject
from app.database import get_db
from app.services.user_service import ProfileService, build_caller_context

logger = structlog.get_logger()

security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_cache_manager() -> CacheManager | None:
    """Profile cache backed by the shared Redis client."""
    return CacheManager(get_redis_client())


async def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> UUID:
    """
    Profile id of the bearer token.

    Raises:
        HTTPException: 401 if the token is missing, invalid or expired
    """
    if credentials is None:
        raise _unauthorized("Not authenticated")

    user_id = token_subject(credentials.credentials)
    if user_id is None:
        raise _unauthorized("Could not validate credentials")
    return user_id


async def get_caller(
    user_id: Annotated[UUID, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    cache_manager: Annotated[CacheManager | None, Depends(get_cache_manager)],
) -> CallerContext:
    """
    Resolve the authenticated user's profile into a caller context.

    Raises:
        HTTPException: 401 if the user has no profile
    """
    profile = await ProfileService(cache_manager).get_profile(db, user_id)
    if not profile:
        logger.info("caller_profile_missing", user_id=str(user_id))
        raise _unauthorized("User profile not found")

    caller = build_caller_context(profile)
    structlog.contextvars.bind_contextvars(user_id=str(caller.user_id), role=caller.role.value)
    return caller


def require_roles(
    *roles: UserRole,
) -> Callable[[CallerContext], Coroutine[Any, Any, CallerContext]]:
    """Build a dependency that only lets the given roles through."""

    async def dependency(caller: Annotated[CallerContext, Depends(get_caller)]) -> CallerContext:
        if not caller.has_role(*roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient role for this operation",
            )
        return caller

    return dependency


# Type aliases for dependency injection
DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
CacheManagerDep = Annotated[CacheManager | None, Depends(get_cache_manager)]
Caller = Annotated[CallerContext, Depends(get_caller)]
