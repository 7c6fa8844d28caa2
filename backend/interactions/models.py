import uuid

from django.db import models
from django.conf import settings


class Like(models.Model):
    """Directed like edge: liked_by -> user.

    Duplicates are allowed at the schema level; see LIKES_ALLOW_DUPLICATES.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Target of the like
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='likes_received'
    )

    # Actor
    liked_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='likes_given'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'likes'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['liked_by', 'user'], name='like_actor_target_idx'),
        ]

    def __str__(self):
        return f"Like #{self.id} - {self.liked_by_id} -> {self.user_id}"


class Dislike(models.Model):
    """Directed dislike edge: disliked_by -> user. At most one per pair."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Target of the dislike
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='dislikes_received'
    )

    # Actor
    disliked_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='dislikes_given'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'dislikes'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['disliked_by', 'user'],
                name='unique_dislike_actor_target'
            )
        ]

    def __str__(self):
        return f"Dislike #{self.id} - {self.disliked_by_id} -> {self.user_id}"
