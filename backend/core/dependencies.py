from typing import Optional
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db, get_session_factory
from core.exceptions import AuthenticationException, AuthorizationException
from core.utils.auth.jwt_auth import jwt_manager
from models.shop import Shop
from models.user import User
from services.fanout import NotificationFanout
from services.identity import IdentityDirectory
from services.negotiation import NegotiationResolver
from services.websockets import ConnectionManager

# Tokens are issued by the identity service; this API only verifies them.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/v1/auth/token", auto_error=False)


async def resolve_token_user(token: Optional[str], db: AsyncSession) -> Optional[User]:
    """Map a bearer token to a known account, or None."""
    if not token:
        return None
    user_id = jwt_manager.get_user_id_from_token(token)
    if not user_id:
        return None
    try:
        user_uuid = UUID(str(user_id))
    except ValueError:
        return None
    return await IdentityDirectory(db).get_user(user_uuid)


async def get_current_user(token: Optional[str] = Depends(oauth2_scheme), db: AsyncSession = Depends(get_db)) -> User:
    """Get current authenticated user"""
    if not token:
        raise AuthenticationException(message="Not authorized, no token")
    user = await resolve_token_user(token, db)
    if not user:
        raise AuthenticationException(message="Not authorized, token failed")
    return user


async def require_consumer(current_user: User = Depends(get_current_user)) -> User:
    """Require the consumer role"""
    if not current_user.is_consumer:
        raise AuthorizationException(message="Not authorized as a user")
    return current_user


async def require_shop_owner(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Shop:
    """Require the shop owner role and return the caller's shop"""
    if not current_user.is_shop_owner:
        raise AuthorizationException(message="Not authorized as a shop owner")
    shop = await IdentityDirectory(db).get_owned_shop(current_user.id)
    if not shop:
        raise AuthorizationException(message="Not authorized, no associated shop found for this owner.")
    return shop


def get_push_channel(request: Request) -> ConnectionManager:
    return request.app.state.push_channel


def get_notification_fanout(request: Request) -> NotificationFanout:
    return request.app.state.notification_fanout


def get_negotiation_resolver(
    fanout: NotificationFanout = Depends(get_notification_fanout),
) -> NegotiationResolver:
    return NegotiationResolver(get_session_factory(), fanout)
