"""
Comment threads under posts.
"""

import logging
from typing import Optional, List, Dict, Any

from supabase import Client

from .client import DataUnavailableError, first_row
from .posts import PrivatePostError


class CommentAccessError(Exception):
    """The user may not change this comment."""


class CommentService:
    """Service for comments and one level of replies."""

    def __init__(self, client: Client):
        self.client = client

    def _fetch(self, table: str, columns: str, row_id: str) -> Optional[Dict[str, Any]]:
        try:
            response = self.client.table(table).select(columns).eq("id", row_id).limit(1).execute()
        except Exception as e:
            logging.error(f"Failed to fetch {table} {row_id}: {e}")
            raise DataUnavailableError(f"Failed to load {table}") from e
        return first_row(response)

    def _readable_post(self, post_id: str, viewer_id: Optional[str]) -> Optional[Dict[str, Any]]:
        post = self._fetch("posts", "id, user_id, is_private", post_id)
        if post and post.get("is_private") and post.get("user_id") != viewer_id:
            raise PrivatePostError()
        return post

    def list_comments(self, post_id: str, viewer_id: Optional[str] = None) -> Optional[List[Dict[str, Any]]]:
        """
        List the comment threads of a post, oldest first.

        Returns:
            Top-level comments, each with ``profile`` and ``replies``, or None
            if the post does not exist. Replies whose parent is gone are dropped.

        Raises:
            PrivatePostError: The post is private and the viewer is not its author.
        """
        if not self._readable_post(post_id, viewer_id):
            return None

        try:
            rows = (
                self.client.table("comments")
                .select("id, post_id, user_id, parent_id, content, created_at")
                .eq("post_id", post_id)
                .order("created_at")
                .execute()
            ).data or []

            user_ids = list({row["user_id"] for row in rows})
            profiles = {}
            if user_ids:
                response = (
                    self.client.table("profiles")
                    .select("id, nickname, profile_image_url")
                    .in_("id", user_ids)
                    .execute()
                )
                profiles = {profile["id"]: profile for profile in (response.data or [])}
        except Exception as e:
            logging.error(f"Failed to load comments for {post_id}: {e}")
            raise DataUnavailableError("Failed to load comments") from e

        threads = {}
        for row in rows:
            profile = profiles.get(row["user_id"])
            comment = {
                **row,
                "profile": {
                    "nickname": profile.get("nickname"),
                    "profile_image_url": profile.get("profile_image_url"),
                } if profile else None,
            }
            if row.get("parent_id"):
                parent = threads.get(row["parent_id"])
                if parent:
                    parent["replies"].append(comment)
            else:
                comment["replies"] = []
                threads[row["id"]] = comment
        return list(threads.values())

    def add_comment(
        self,
        post_id: str,
        user_id: str,
        content: str,
        parent_id: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Add a comment, or a reply when ``parent_id`` is given.

        Returns:
            The created comment, or None if the post does not exist.

        Raises:
            ValueError: Empty content, or an unknown or nested parent.
            PrivatePostError: The post is private and the user is not its author.
        """
        content = (content or "").strip()
        if not content:
            raise ValueError("Empty comment")

        if not self._readable_post(post_id, user_id):
            return None

        if parent_id:
            parent = self._fetch("comments", "id, post_id, parent_id", parent_id)
            if not parent or parent.get("post_id") != post_id:
                raise ValueError("Parent comment not found")
            if parent.get("parent_id"):
                raise ValueError("Replies cannot be nested")

        row = {"post_id": post_id, "user_id": user_id, "parent_id": parent_id, "content": content}
        try:
            response = self.client.table("comments").insert(row).execute()
        except Exception as e:
            logging.error(f"Failed to add comment to {post_id}: {e}")
            raise DataUnavailableError("Failed to add comment") from e
        return first_row(response) or row

    def delete_comment(self, comment_id: str, user_id: str) -> Optional[bool]:
        """Delete a comment and its replies. None if it does not exist."""
        comment = self._fetch("comments", "id, user_id", comment_id)
        if not comment:
            return None
        if comment.get("user_id") != user_id:
            raise CommentAccessError("Only the author can delete this comment")

        try:
            self.client.table("comments").delete().eq("parent_id", comment_id).execute()
            self.client.table("comments").delete().eq("id", comment_id).execute()
        except Exception as e:
            logging.error(f"Failed to delete comment {comment_id}: {e}")
            raise DataUnavailableError("Failed to delete comment") from e
        return True
