"""
Post feed and post detail service.
"""

import logging
from typing import Optional, List, Dict, Any

from supabase import Client

from snuggle.constants import EDITABLE_POST_FIELDS, FEED_LIMIT
from snuggle.utils import format_preview_date
from .client import DataUnavailableError, first_row


class PostAccessError(Exception):
    """The viewer may not read or change this post."""


class PrivatePostError(PostAccessError):
    def __init__(self):
        super().__init__("Private")


class PostService:
    """Reads and edits posts stored in Supabase."""

    def __init__(self, client: Client):
        self.client = client

    def list_feed(self, limit: int = FEED_LIMIT) -> List[Dict[str, Any]]:
        """
        List the newest published public posts with blog and author profile.

        Args:
            limit: Maximum number of posts.

        Returns:
            Posts, each with a nested ``blogs`` entry (or None).
        """
        try:
            response = (
                self.client.table("posts")
                .select("id, title, content, thumbnail_url, created_at, blog_id")
                .eq("published", True)
                .eq("is_private", False)
                .order("created_at", desc=True)
                .limit(limit)
                .execute()
            )
        except Exception as e:
            logging.error(f"Error fetching posts: {e}")
            return []

        posts = response.data or []
        blog_ids = list({post["blog_id"] for post in posts if post.get("blog_id")})
        blogs = self._rows_by_id("blogs", "id, name, user_id", blog_ids)
        user_ids = list({blog["user_id"] for blog in blogs.values() if blog.get("user_id")})
        profiles = self._rows_by_id("profiles", "id, nickname, profile_image_url", user_ids)

        feed = []
        for post in posts:
            blog = blogs.get(post.get("blog_id"))
            entry = None
            if blog:
                profile = profiles.get(blog.get("user_id"))
                entry = {
                    "name": blog["name"],
                    "profiles": {
                        "nickname": profile.get("nickname"),
                        "profile_image_url": profile.get("profile_image_url"),
                    } if profile else None,
                }
            feed.append({
                "id": post["id"],
                "title": post["title"],
                "content": post.get("content"),
                "thumbnail_url": post.get("thumbnail_url"),
                "created_at": post["created_at"],
                "formatted_date": format_preview_date(post["created_at"]),
                "blogs": entry,
            })
        return feed

    def _rows_by_id(self, table: str, columns: str, ids: List[Any]) -> Dict[Any, Dict[str, Any]]:
        if not ids:
            return {}
        try:
            response = self.client.table(table).select(columns).in_("id", ids).execute()
        except Exception as e:
            logging.error(f"Failed to fetch {table}: {e}")
            return {}
        return {row["id"]: row for row in (response.data or [])}

    def _fetch_post(self, post_id: str) -> Optional[Dict[str, Any]]:
        try:
            response = self.client.table("posts").select("*").eq("id", post_id).limit(1).execute()
        except Exception as e:
            logging.error(f"Failed to fetch post {post_id}: {e}")
            raise DataUnavailableError("Failed to load post") from e
        return first_row(response)

    def get_post(self, post_id: str, viewer_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """
        Get a post with everything the post page renders.

        Args:
            post_id: Post ID.
            viewer_id: Signed-in user, if any.

        Returns:
            Post details, or None if the post does not exist.

        Raises:
            PrivatePostError: The post is private and the viewer is not its author.
        """
        post = self._fetch_post(post_id)
        if not post:
            return None

        if post.get("is_private") and post.get("user_id") != viewer_id:
            raise PrivatePostError()

        details = dict(post)
        details["blog"] = None
        details["profile"] = None
        details["categories"] = []
        details["like_count"] = 0
        details["is_liked"] = False
        details["prev_post"] = None
        details["next_post"] = None

        try:
            details["blog"] = first_row(
                self.client.table("blogs")
                .select("id, name, description, thumbnail_url, user_id")
                .eq("id", post["blog_id"])
                .limit(1)
                .execute()
            )
            details["profile"] = first_row(
                self.client.table("profiles")
                .select("nickname, profile_image_url")
                .eq("id", post["user_id"])
                .limit(1)
                .execute()
            )
            details["categories"] = self._get_categories(post_id)
            details["like_count"], details["is_liked"] = self._get_likes(post_id, viewer_id)
            details["prev_post"], details["next_post"] = self._get_neighbours(post)
        except Exception as e:
            logging.error(f"Failed to load details for post {post_id}: {e}")

        return details

    def _get_categories(self, post_id: str) -> List[Dict[str, Any]]:
        links = (
            self.client.table("post_categories")
            .select("category_id")
            .eq("post_id", post_id)
            .execute()
        )
        category_ids = [link["category_id"] for link in (links.data or [])]
        if not category_ids:
            return []
        response = self.client.table("categories").select("id, name").in_("id", category_ids).execute()
        return response.data or []

    def _get_likes(self, post_id: str, viewer_id: Optional[str]):
        response = (
            self.client.table("likes")
            .select("post_id", count="exact")
            .eq("post_id", post_id)
            .execute()
        )
        like_count = response.count or 0

        is_liked = False
        if viewer_id:
            mine = (
                self.client.table("likes")
                .select("post_id")
                .eq("post_id", post_id)
                .eq("user_id", viewer_id)
                .limit(1)
                .execute()
            )
            is_liked = first_row(mine) is not None
        return like_count, is_liked

    def _get_neighbours(self, post: Dict[str, Any]):
        # Older public post is "previous", newer is "next".
        def public_posts():
            return (
                self.client.table("posts")
                .select("id, title")
                .eq("blog_id", post["blog_id"])
                .eq("published", True)
                .eq("is_private", False)
            )

        prev_post = first_row(
            public_posts()
            .lt("created_at", post["created_at"])
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
        next_post = first_row(
            public_posts()
            .gt("created_at", post["created_at"])
            .order("created_at")
            .limit(1)
            .execute()
        )
        return prev_post, next_post

    def increment_view_count(self, post_id: str) -> Optional[int]:
        post = self._fetch_post(post_id)
        if not post:
            return None

        view_count = (post.get("view_count") or 0) + 1
        try:
            self.client.table("posts").update({"view_count": view_count}).eq("id", post_id).execute()
        except Exception as e:
            logging.error(f"View count error for {post_id}: {e}")
            raise DataUnavailableError("Failed to update view count") from e
        return view_count

    def toggle_like(self, post_id: str, user_id: str) -> Optional[Dict[str, Any]]:
        """
        Like the post, or take the like back if the user already liked it.

        Returns:
            ``{"is_liked", "like_count"}`` after the toggle, or None if the post does not exist.

        Raises:
            PrivatePostError: The post is private and the user is not its author.
        """
        post = self._fetch_post(post_id)
        if not post:
            return None
        if post.get("is_private") and post.get("user_id") != user_id:
            raise PrivatePostError()

        try:
            _, is_liked = self._get_likes(post_id, user_id)
            if is_liked:
                (
                    self.client.table("likes")
                    .delete()
                    .eq("post_id", post_id)
                    .eq("user_id", user_id)
                    .execute()
                )
            else:
                self.client.table("likes").insert({"post_id": post_id, "user_id": user_id}).execute()
            like_count, is_liked = self._get_likes(post_id, user_id)
        except Exception as e:
            logging.error(f"Failed to toggle like on {post_id}: {e}")
            raise DataUnavailableError("Failed to update like") from e
        return {"is_liked": is_liked, "like_count": like_count}

    def _check_author(self, post_id: str, user_id: str) -> Optional[Dict[str, Any]]:
        post = self._fetch_post(post_id)
        if not post:
            return None
        if post.get("user_id") != user_id:
            raise PostAccessError("Only the author can change this post")
        return post

    def update_post(self, post_id: str, user_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Update editable fields of a post.

        Raises:
            ValueError: No editable field in ``changes``.
            PostAccessError: ``user_id`` is not the author.
            DataUnavailableError: The update could not be written.
        """
        updates = {key: value for key, value in changes.items() if key in EDITABLE_POST_FIELDS}
        if not updates:
            raise ValueError("No editable fields")

        post = self._check_author(post_id, user_id)
        if not post:
            return None

        try:
            response = self.client.table("posts").update(updates).eq("id", post_id).execute()
        except Exception as e:
            logging.error(f"Failed to update post {post_id}: {e}")
            raise DataUnavailableError("Failed to update post") from e
        return first_row(response) or {**post, **updates}

    def delete_post(self, post_id: str, user_id: str) -> Optional[bool]:
        """Delete a post. None if it does not exist."""
        if not self._check_author(post_id, user_id):
            return None
        try:
            self.client.table("posts").delete().eq("id", post_id).execute()
        except Exception as e:
            logging.error(f"Failed to delete post {post_id}: {e}")
            raise DataUnavailableError("Failed to delete post") from e
        return True
