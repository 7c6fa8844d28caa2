"""
Services package - Business logic layer.

This package contains all business logic services that operate on Django models
but are decoupled from the HTTP/WebSocket layer.

Modules:
    - matching: Nearby user discovery
    - interactions: Like/dislike edges and like notifications
"""

# Expose commonly used functions at package level
from .matching import find_nearby_users, NearbyUser
from .interactions import (
    create_like,
    delete_like,
    list_likes,
    create_dislike,
    delete_dislike,
    list_dislikes,
    InteractionGateway,
    InteractionResult,
    get_interaction_gateway,
)

__all__ = [
    # Matching
    "find_nearby_users",
    "NearbyUser",
    # Interactions
    "create_like",
    "delete_like",
    "list_likes",
    "create_dislike",
    "delete_dislike",
    "list_dislikes",
    "InteractionGateway",
    "InteractionResult",
    "get_interaction_gateway",
]
