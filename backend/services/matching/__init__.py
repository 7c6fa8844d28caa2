"""
Proximity matching service.

This module handles:
    - Finding users within a radius of a reference user
"""

from .proximity import NearbyUser, find_nearby_users

__all__ = [
    "NearbyUser",
    "find_nearby_users",
]
