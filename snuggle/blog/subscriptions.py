"""
Blog subscriptions (followers / following).
"""

import logging
from typing import Optional, List, Dict

from supabase import Client

from .client import first_row


class SubscriptionService:
    """Service for user-to-user subscriptions."""

    def __init__(self, client: Client):
        self.client = client

    def _count(self, column: str, user_id: str) -> int:
        response = (
            self.client.table("subscriptions")
            .select("subscriber_id", count="exact")
            .eq(column, user_id)
            .execute()
        )
        return response.count or 0

    def get_counts(self, user_id: str) -> Optional[Dict[str, int]]:
        try:
            return {
                "followers": self._count("target_id", user_id),
                "following": self._count("subscriber_id", user_id),
            }
        except Exception as e:
            logging.error(f"Failed to get subscription counts for {user_id}: {e}")
            return None

    def get_following_ids(self, user_id: str) -> List[str]:
        try:
            response = (
                self.client.table("subscriptions")
                .select("target_id")
                .eq("subscriber_id", user_id)
                .execute()
            )
        except Exception as e:
            logging.error(f"Failed to get subscribed user IDs: {e}")
            return []
        return [row["target_id"] for row in (response.data or [])]

    def is_subscribed(self, subscriber_id: str, target_id: str) -> bool:
        response = (
            self.client.table("subscriptions")
            .select("subscriber_id")
            .eq("subscriber_id", subscriber_id)
            .eq("target_id", target_id)
            .limit(1)
            .execute()
        )
        return first_row(response) is not None

    def subscribe(self, subscriber_id: str, target_id: str) -> bool:
        """
        Subscribe to a user.

        Returns:
            True if a new subscription was created, False if it already existed.

        Raises:
            ValueError: Subscribing to yourself.
        """
        if subscriber_id == target_id:
            raise ValueError("Cannot subscribe to yourself")

        if self.is_subscribed(subscriber_id, target_id):
            return False

        self.client.table("subscriptions").insert({
            "subscriber_id": subscriber_id,
            "target_id": target_id,
        }).execute()
        return True

    def unsubscribe(self, subscriber_id: str, target_id: str) -> bool:
        if not self.is_subscribed(subscriber_id, target_id):
            return False

        (
            self.client.table("subscriptions")
            .delete()
            .eq("subscriber_id", subscriber_id)
            .eq("target_id", target_id)
            .execute()
        )
        return True
