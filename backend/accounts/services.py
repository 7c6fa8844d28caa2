"""
Identity resolution for HTTP requests and live connections.

Access tokens carry the user's email as their identity claim
(see SIMPLE_JWT["USER_ID_CLAIM"]), so resolving a credential is two steps:
token -> email -> user record.
"""

import logging
from typing import Dict

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import DatabaseError
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings as jwt_settings
from rest_framework_simplejwt.tokens import AccessToken, RefreshToken

from common.exceptions import InternalError, NotFoundError, UnauthorizedError

User = get_user_model()
logger = logging.getLogger(__name__)


def issue_tokens(user) -> Dict[str, str]:
    """Generate a refresh/access token pair for the user."""
    refresh = RefreshToken.for_user(user)
    return {
        "refresh": str(refresh),
        "access": str(refresh.access_token),
    }


def resolve_identity(token: str) -> str:
    """
    Validate an access token and return the email it was issued for.

    Raises:
        UnauthorizedError: token is missing, malformed, expired or has no identity claim
    """
    if not token:
        raise UnauthorizedError("Token is required")

    try:
        access = AccessToken(token)
    except TokenError as e:
        logger.debug("Token validation failed: %s", e)
        raise UnauthorizedError("Invalid or expired token")

    email = access.get(jwt_settings.USER_ID_CLAIM)
    if not email:
        raise UnauthorizedError("Token has no identity claim")
    return email


def resolve_user_by_email(email: str):
    """
    Fetch the active user with this email.

    Raises:
        NotFoundError: no active user has this email
        InternalError: the lookup itself failed
    """
    try:
        return User.objects.get(email=email, is_active=True)
    except User.DoesNotExist:
        raise NotFoundError(f"User with email {email} not found")
    except DatabaseError:
        logger.exception("Failed to look up user %s", email)
        raise InternalError("Something went wrong while retrieving the user")


def resolve_user_by_id(user_id):
    """
    Fetch a user by primary key. Malformed ids are reported as not found.

    Raises:
        NotFoundError: no user has this id
        InternalError: the lookup itself failed
    """
    try:
        user = User.objects.filter(pk=user_id).first()
    except (ValidationError, ValueError):
        user = None
    except DatabaseError:
        logger.exception("Failed to look up user %s", user_id)
        raise InternalError("Something went wrong while retrieving the user")

    if user is None:
        raise NotFoundError(f"User {user_id} not found")
    return user
