"""
Skin marketplace and per-blog skin settings.
"""

import logging
from typing import Optional, List, Dict, Any

from supabase import Client

from snuggle.constants import DEFAULT_LAYOUT_CONFIG, TEMPLATE_SECTION_KEYS
from snuggle.utils import merge_layout_config, merge_skin_variables, sanitize_css
from .client import DataUnavailableError, first_row


class SkinService:
    """Service for system skins and the skin applied to each blog."""

    def __init__(self, client: Client):
        self.client = client

    def list_system_skins(self) -> List[Dict[str, Any]]:
        try:
            response = (
                self.client.table("skins")
                .select("*")
                .eq("is_system", True)
                .order("created_at")
                .execute()
            )
        except Exception as e:
            logging.error(f"Failed to load skins: {e}")
            return []
        return response.data or []

    def get_skin(self, skin_id: str) -> Optional[Dict[str, Any]]:
        try:
            response = self.client.table("skins").select("*").eq("id", skin_id).limit(1).execute()
        except Exception as e:
            logging.error(f"Failed to fetch skin {skin_id}: {e}")
            raise DataUnavailableError("Failed to load skin") from e
        return first_row(response)

    def get_blog_skin(self, blog_id: str) -> Dict[str, Any]:
        """
        Get the skin applied to a blog, merged with the blog's overrides.

        Args:
            blog_id: Blog ID.

        Returns:
            Dict with ``skin_application``, ``skin``, ``css_variables`` and
            ``layout_config``. A blog without a skin gets the default layout.
        """
        result = {
            "skin_application": None,
            "skin": None,
            "css_variables": {},
            "layout_config": dict(DEFAULT_LAYOUT_CONFIG),
        }

        try:
            application = first_row(
                self.client.table("blog_skin_applications")
                .select("*")
                .eq("blog_id", blog_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logging.error(f"Failed to fetch blog skin for {blog_id}: {e}")
            raise DataUnavailableError("Failed to load blog skin") from e

        if not application:
            return result

        skin = self.get_skin(application["skin_id"]) if application.get("skin_id") else None
        result["skin_application"] = application
        result["skin"] = skin
        result["css_variables"] = merge_skin_variables(skin, application.get("custom_css_variables"))
        result["layout_config"] = merge_layout_config(skin, application.get("custom_layout_config"))
        return result

    def apply_skin(self, blog_id: str, skin_id: str) -> Optional[Dict[str, Any]]:
        """Apply a skin to a blog, clearing earlier per-blog overrides. None if the skin is unknown."""
        if not self.get_skin(skin_id):
            return None

        row = {
            "blog_id": blog_id,
            "skin_id": skin_id,
            "custom_css_variables": None,
            "custom_layout_config": None,
        }
        try:
            response = (
                self.client.table("blog_skin_applications")
                .upsert(row, on_conflict="blog_id")
                .execute()
            )
        except Exception as e:
            logging.error(f"Failed to apply skin {skin_id} to {blog_id}: {e}")
            raise DataUnavailableError("Failed to apply skin") from e
        return first_row(response) or row

    def get_custom_skin(self, blog_id: str) -> Optional[Dict[str, Any]]:
        try:
            response = (
                self.client.table("blog_custom_skins")
                .select("*")
                .eq("blog_id", blog_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logging.error(f"Failed to fetch custom skin for {blog_id}: {e}")
            raise DataUnavailableError("Failed to load custom skin") from e
        return first_row(response)

    def save_custom_skin(self, blog_id: str, sections: Dict[str, str]) -> Optional[Dict[str, Any]]:
        """
        Save template sections of a blog's custom skin.

        Args:
            blog_id: Blog ID.
            sections: Section key to content, e.g. ``{"custom_css": "..."}``.

        Raises:
            ValueError: Unknown section key or empty payload.
            DataUnavailableError: The skin could not be written.
        """
        unknown = [key for key in sections if key not in TEMPLATE_SECTION_KEYS]
        if unknown:
            raise ValueError(f"Unknown sections: {', '.join(sorted(unknown))}")
        if not sections:
            raise ValueError("No sections to save")

        row = {"blog_id": blog_id, **sections}
        if "custom_css" in row:
            row["custom_css"] = sanitize_css(row["custom_css"])

        try:
            response = (
                self.client.table("blog_custom_skins")
                .upsert(row, on_conflict="blog_id")
                .execute()
            )
        except Exception as e:
            logging.error(f"Failed to save custom skin for {blog_id}: {e}")
            raise DataUnavailableError("Failed to save custom skin") from e
        return first_row(response) or row
