"""
Interaction service - like/dislike edges and the notifications they trigger.

This module handles:
    - Creating and deleting likes and dislikes
    - Duplicate detection
    - Listing edges given by a user
    - Orchestrating write-then-notify for likes
"""

from .interaction_store import (
    create_like,
    delete_like,
    list_likes,
    create_dislike,
    delete_dislike,
    list_dislikes,
)
from .gateway import InteractionGateway, InteractionResult, get_interaction_gateway

__all__ = [
    # Store operations
    "create_like",
    "delete_like",
    "list_likes",
    "create_dislike",
    "delete_dislike",
    "list_dislikes",
    # Orchestration
    "InteractionGateway",
    "InteractionResult",
    "get_interaction_gateway",
]
