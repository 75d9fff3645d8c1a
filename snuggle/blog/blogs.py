"""
Blog home pages and the signed-in user's blogs.
"""

import logging
from typing import Optional, List, Dict, Any

from supabase import Client

from snuggle.utils import format_preview_date
from .client import DataUnavailableError, first_row


class BlogService:
    """Reads blogs and the posts listed on a blog's home page."""

    def __init__(self, client: Client):
        self.client = client

    def list_user_blogs(self, user_id: str) -> List[Dict[str, Any]]:
        try:
            response = (
                self.client.table("blogs")
                .select("id, name, description, thumbnail_url")
                .eq("user_id", user_id)
                .order("name")
                .execute()
            )
        except Exception as e:
            logging.error(f"Failed to fetch blogs of {user_id}: {e}")
            return []
        return response.data or []

    def get_blog(self, blog_id: str, viewer_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """
        Get a blog with its owner profile and published posts.

        Private posts are listed only when the viewer owns the blog.

        Args:
            blog_id: Blog ID.
            viewer_id: Signed-in user, if any.

        Returns:
            Blog with ``profile``, ``posts`` and ``post_count``, or None if the blog does not exist.

        Raises:
            DataUnavailableError: Supabase could not be queried.
        """
        try:
            blog = first_row(
                self.client.table("blogs")
                .select("id, user_id, name, description, thumbnail_url")
                .eq("id", blog_id)
                .limit(1)
                .execute()
            )
            if not blog:
                return None

            profile = first_row(
                self.client.table("profiles")
                .select("nickname, profile_image_url")
                .eq("id", blog["user_id"])
                .limit(1)
                .execute()
            )

            query = (
                self.client.table("posts")
                .select("id, title, content, thumbnail_url, is_private, view_count, created_at")
                .eq("blog_id", blog_id)
                .eq("published", True)
            )
            if viewer_id != blog["user_id"]:
                query = query.eq("is_private", False)
            posts = query.order("created_at", desc=True).execute().data or []
        except Exception as e:
            logging.error(f"Failed to load blog {blog_id}: {e}")
            raise DataUnavailableError("Failed to load blog") from e

        for post in posts:
            post["formatted_date"] = format_preview_date(post["created_at"])

        return {**blog, "profile": profile, "posts": posts, "post_count": len(posts)}
