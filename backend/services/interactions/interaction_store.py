"""
Like/dislike edge persistence.

Every operation either returns the stored result or raises one of the
common.exceptions kinds; ORM errors never leave this module untranslated.
"""

import logging
from typing import List, Type

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import DatabaseError, IntegrityError, models, transaction

from accounts.services import resolve_user_by_id
from common.exceptions import (
    ConflictError,
    InternalError,
    InvalidInputError,
    NotFoundError,
)
from interactions.models import Like, Dislike

logger = logging.getLogger(__name__)


def _require(value, message: str):
    if value is None or not str(value).strip():
        raise InvalidInputError(message)


def _check_page(take: int, skip: int):
    if take < 0 or skip < 0:
        raise InvalidInputError("Invalid pagination parameters")


def _find_edge(model: Type[models.Model], edge_id):
    """Return the edge or None; malformed ids count as missing."""
    try:
        return model.objects.filter(pk=edge_id).first()
    except (ValidationError, ValueError):
        return None


def _delete_edge(model: Type[models.Model], edge_id, label: str):
    _require(edge_id, f"{label} ID is required")

    try:
        with transaction.atomic():
            edge = _find_edge(model, edge_id)
            if edge is None:
                raise NotFoundError(f"{label} not found")
            edge.delete()
    except DatabaseError:
        logger.exception("Failed to delete %s %s", label.lower(), edge_id)
        raise InternalError(f"Something went wrong while deleting a {label.lower()}")

    logger.info("%s %s deleted", label, edge_id)


# ===================== Likes =====================

def create_like(actor_id, target_id) -> Like:
    """
    Record that actor liked target.

    Duplicate likes are stored as separate edges unless
    settings.LIKES_ALLOW_DUPLICATES is False, in which case a repeat
    like raises ConflictError the same way dislikes do.
    """
    _require(actor_id, "User ID and Liked By ID are required")
    _require(target_id, "User ID and Liked By ID are required")

    try:
        with transaction.atomic():
            actor = resolve_user_by_id(actor_id)
            target = resolve_user_by_id(target_id)

            if not settings.LIKES_ALLOW_DUPLICATES:
                if Like.objects.filter(liked_by=actor, user=target).exists():
                    raise ConflictError("This user has already liked the target user")

            like = Like.objects.create(user=target, liked_by=actor)
    except DatabaseError:
        logger.exception("Failed to create like %s -> %s", actor_id, target_id)
        raise InternalError("Something went wrong while creating a like")

    logger.info("Like %s created: %s -> %s", like.id, actor.id, target.id)
    return like


def delete_like(like_id) -> None:
    """Delete a like edge. Raises NotFoundError if it does not exist."""
    _delete_edge(Like, like_id, "Like")


def list_likes(actor_id, take: int = 20, skip: int = 0) -> List[Like]:
    """Likes given by actor, newest first."""
    _require(actor_id, "User ID is required")
    _check_page(take, skip)
    try:
        return list(Like.objects.filter(liked_by_id=actor_id)[skip:skip + take])
    except (ValidationError, ValueError):
        raise NotFoundError(f"User {actor_id} not found")
    except DatabaseError:
        logger.exception("Failed to list likes for %s", actor_id)
        raise InternalError("Something went wrong while fetching likes")


# ===================== Dislikes =====================

def create_dislike(actor_id, target_id) -> Dislike:
    """
    Record that actor disliked target.

    A pair can only be disliked once: the existing edge is looked up before
    insert, and the unique constraint turns a lost race into the same
    ConflictError.
    """
    _require(actor_id, "User ID and Disliked By ID are required")
    _require(target_id, "User ID and Disliked By ID are required")

    try:
        with transaction.atomic():
            actor = resolve_user_by_id(actor_id)
            target = resolve_user_by_id(target_id)

            if Dislike.objects.filter(disliked_by=actor, user=target).exists():
                raise ConflictError("This user has already disliked the target user")

            dislike = Dislike.objects.create(user=target, disliked_by=actor)
    except IntegrityError:
        raise ConflictError("This user has already disliked the target user")
    except DatabaseError:
        logger.exception("Failed to create dislike %s -> %s", actor_id, target_id)
        raise InternalError("Something went wrong while creating a dislike")

    logger.info("Dislike %s created: %s -> %s", dislike.id, actor.id, target.id)
    return dislike


def delete_dislike(dislike_id) -> None:
    """Delete a dislike edge. Existence is checked first so a missing edge is NotFoundError."""
    _delete_edge(Dislike, dislike_id, "Dislike")


def list_dislikes(actor_id, take: int = 20, skip: int = 0) -> List[Dislike]:
    """Dislikes given by actor, newest first."""
    _require(actor_id, "User ID is required")
    _check_page(take, skip)
    try:
        return list(Dislike.objects.filter(disliked_by_id=actor_id)[skip:skip + take])
    except (ValidationError, ValueError):
        raise NotFoundError(f"User {actor_id} not found")
    except DatabaseError:
        logger.exception("Failed to list dislikes for %s", actor_id)
        raise InternalError("Something went wrong while fetching dislikes")
