"""
JWT authentication for websocket connections.

Browsers cannot set an Authorization header on a websocket handshake, so
the access token travels in the query string: ws/notifications/?token=<jwt>.
A session user set by AuthMiddlewareStack is kept when no token is given.
"""
import logging
from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware
from django.contrib.auth import get_user_model
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import AccessToken

logger = logging.getLogger(__name__)


@database_sync_to_async
def _user_for_token(raw_token: str):
    try:
        token = AccessToken(raw_token)
    except TokenError as exc:
        logger.info(f"Rejected websocket token: {exc}")
        return None
    return get_user_model().objects.filter(id=token.get("user_id"), is_active=True).first()


class JwtQueryAuthMiddleware(BaseMiddleware):
    async def __call__(self, scope, receive, send):
        query = parse_qs(scope.get("query_string", b"").decode())
        raw_token = (query.get("token") or [None])[0]
        if raw_token:
            user = await _user_for_token(raw_token)
            if user is not None:
                scope["user"] = user
        return await super().__call__(scope, receive, send)
