"""
Supabase client helpers shared by the blog services.
"""

import logging
from typing import Any, Dict, Optional

from supabase import Client, create_client


class DataUnavailableError(Exception):
    """Raised when a Supabase query fails, as opposed to finding no row."""


def create_supabase_client(url: str, key: str) -> Optional[Client]:
    """
    Create a Supabase client.

    Args:
        url: Project URL.
        key: Service or anon key.

    Returns:
        Client, or None when the project is not configured.
    """
    if not (url and key):
        logging.error("Supabase URL or key is not set")
        return None
    try:
        return create_client(url, key)
    except Exception as e:
        logging.error(f"Failed to initialize Supabase client: {e}")
        return None


def first_row(response: Any) -> Optional[Dict[str, Any]]:
    """First row of a query response, or None."""
    data = getattr(response, "data", None)
    if isinstance(data, list):
        return data[0] if data else None
    return data or None


def get_blog_owner_id(client: Client, blog_id: str) -> Optional[str]:
    """
    Look up who owns a blog.

    Returns:
        Owner user ID, or None if the blog does not exist.

    Raises:
        DataUnavailableError: The blogs table could not be queried.
    """
    try:
        response = client.table("blogs").select("user_id").eq("id", blog_id).limit(1).execute()
    except Exception as e:
        logging.error(f"Failed to fetch blog {blog_id}: {e}")
        raise DataUnavailableError("Failed to load blog") from e
    blog = first_row(response)
    return blog["user_id"] if blog else None
