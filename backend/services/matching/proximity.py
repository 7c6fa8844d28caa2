"""
Find users near a reference user.

Every other user is scanned and kept if their great-circle distance is
strictly below the threshold. That is fine for small and moderate user
counts; larger deployments would need a spatial index (geohash grid or
R-tree) in front of this scan.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import DatabaseError

from accounts.services import resolve_user_by_id
from common.exceptions import InternalError, InvalidInputError
from common.utils import calculate_distance

User = get_user_model()
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NearbyUser:
    """A candidate user and its distance from the reference user."""
    user: User
    distance_km: float


def find_nearby_users(reference_user_id, threshold_km: Optional[float] = None) -> List[NearbyUser]:
    """
    Users within threshold_km of the reference user, closest first.

    The reference user is excluded by id, so another user at exactly the
    same coordinates is still returned.

    Args:
        reference_user_id: id of the user searching
        threshold_km: search radius, defaults to settings.NEARBY_RADIUS_KM

    Raises:
        InvalidInputError: missing id or non-positive threshold
        NotFoundError: reference user does not exist
        InternalError: persistence failure
    """
    if reference_user_id is None or not str(reference_user_id).strip():
        raise InvalidInputError("User ID is required")

    if threshold_km is None:
        threshold_km = settings.NEARBY_RADIUS_KM
    threshold_km = float(threshold_km)
    if threshold_km <= 0:
        raise InvalidInputError("Search radius must be positive")

    reference = resolve_user_by_id(reference_user_id)

    try:
        candidates = list(
            User.objects.exclude(pk=reference.pk).prefetch_related("images")
        )
    except DatabaseError:
        logger.exception("Failed to load candidates for user %s", reference.pk)
        raise InternalError("Something went wrong while finding nearby users")

    logger.debug("Scanning %d candidates for user %s", len(candidates), reference.pk)

    nearby: List[NearbyUser] = []
    for candidate in candidates:
        distance = calculate_distance(
            reference.latitude,
            reference.longitude,
            candidate.latitude,
            candidate.longitude,
        )
        if distance < threshold_km:
            nearby.append(NearbyUser(user=candidate, distance_km=distance))

    nearby.sort(key=lambda item: item.distance_km)

    logger.info(
        "Found %d nearby users within %skm of user %s",
        len(nearby), threshold_km, reference.pk
    )
    return nearby
