"""
Interaction orchestration.

Resolves the acting user, writes through the interaction store and, for
likes, hands a notification to the dispatcher once the write has committed.
A failed or skipped notification never affects the stored like.
"""

import logging
from dataclasses import dataclass
from functools import partial
from typing import Any, List, Optional

from django.db import transaction

from accounts.services import resolve_user_by_email
from common.exceptions import NotFoundError, UnauthorizedError
from realtime.notifications import get_notification_dispatcher
from services.matching import NearbyUser, find_nearby_users
from . import interaction_store

logger = logging.getLogger(__name__)


@dataclass
class InteractionResult:
    """Result object for interaction operations."""
    message: str
    edge: Optional[Any] = None


class InteractionGateway:
    """
    Entry point for like/dislike/nearby requests.

    Args:
        dispatcher: object with notify_liked(target_user_id, actor_user_id);
            defaults to the process-wide NotificationDispatcher
    """

    def __init__(self, dispatcher=None):
        self.dispatcher = dispatcher if dispatcher is not None else get_notification_dispatcher()

    # ---------------------- Identity ----------------------

    def resolve_actor(self, identity: str):
        """Turn an authenticated identity (email) into a user, or UnauthorizedError."""
        if not identity:
            raise UnauthorizedError("Unauthorized: Unable to find user")
        try:
            return resolve_user_by_email(identity)
        except NotFoundError:
            logger.warning("Can't find user with the email %s", identity)
            raise UnauthorizedError("Unauthorized: Unable to find user")

    # ---------------------- Likes ----------------------

    def like(self, identity: str, target_id) -> InteractionResult:
        actor = self.resolve_actor(identity)
        like = interaction_store.create_like(actor.id, target_id)

        # Runs immediately in autocommit mode, after COMMIT inside a transaction
        transaction.on_commit(
            partial(self._dispatch_like, like.user_id, actor.id), robust=True
        )

        return InteractionResult(message="Like created successfully", edge=like)

    def remove_like(self, like_id) -> InteractionResult:
        interaction_store.delete_like(like_id)
        return InteractionResult(message="Like deleted successfully")

    def likes_given(self, identity: str, take: int = 20, skip: int = 0) -> List:
        actor = self.resolve_actor(identity)
        return interaction_store.list_likes(actor.id, take=take, skip=skip)

    # ---------------------- Dislikes ----------------------

    def dislike(self, identity: str, target_id) -> InteractionResult:
        actor = self.resolve_actor(identity)
        dislike = interaction_store.create_dislike(actor.id, target_id)
        return InteractionResult(message="Dislike created successfully", edge=dislike)

    def remove_dislike(self, dislike_id) -> InteractionResult:
        interaction_store.delete_dislike(dislike_id)
        return InteractionResult(message="Dislike deleted successfully")

    def dislikes_given(self, identity: str, take: int = 20, skip: int = 0) -> List:
        actor = self.resolve_actor(identity)
        return interaction_store.list_dislikes(actor.id, take=take, skip=skip)

    # ---------------------- Discovery ----------------------

    def nearby(self, identity: str, threshold_km: Optional[float] = None) -> List[NearbyUser]:
        actor = self.resolve_actor(identity)
        return find_nearby_users(actor.id, threshold_km)

    # ---------------------- Notification ----------------------

    def _dispatch_like(self, target_user_id, actor_user_id):
        try:
            self.dispatcher.notify_liked(target_user_id, actor_user_id)
        except Exception:
            logger.exception(
                "Like notification for user %s by %s failed", target_user_id, actor_user_id
            )


def get_interaction_gateway() -> InteractionGateway:
    """Gateway wired to the process-wide dispatcher."""
    return InteractionGateway()
