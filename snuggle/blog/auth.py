"""
Supabase Auth: OAuth code exchange and bearer-token lookup.
"""

import logging
from typing import Optional
from urllib.parse import quote

from supabase import Client


class AuthService:
    """Wraps the Supabase Auth endpoints used by the site."""

    def __init__(self, client: Client, site_url: str):
        """
        Initialize auth service.

        Args:
            client: Supabase client.
            site_url: Public frontend URL that callback redirects point at.
        """
        self.client = client
        self.site_url = site_url.rstrip("/")

    def _safe_next(self, next_path: Optional[str]) -> str:
        if not next_path or not next_path.startswith("/") or next_path.startswith("//"):
            return "/"
        return next_path

    def exchange_code(
        self,
        code: Optional[str],
        next_path: Optional[str] = "/",
        code_verifier: Optional[str] = None,
    ) -> str:
        """
        Exchange an OAuth code for a session.

        Args:
            code: Authorization code from the provider redirect.
            next_path: Site path to land on after login.
            code_verifier: PKCE verifier, when the flow used one.

        Returns:
            Absolute URL to redirect the browser to.
        """
        if not code:
            return f"{self.site_url}/?error=no_code"

        params = {"auth_code": code}
        if code_verifier:
            params["code_verifier"] = code_verifier

        try:
            self.client.auth.exchange_code_for_session(params)
        except Exception as e:
            message = getattr(e, "message", None) or str(e)
            logging.error(f"Auth error: {message}")
            return f"{self.site_url}/?error={quote(message, safe='')}"

        return f"{self.site_url}{self._safe_next(next_path)}"

    def get_user_id(self, access_token: str) -> Optional[str]:
        """Resolve a Supabase access token to its user ID."""
        try:
            response = self.client.auth.get_user(access_token)
        except Exception as e:
            logging.error(f"Failed to verify access token: {e}")
            return None
        user = getattr(response, "user", None) if response else None
        return str(user.id) if user else None
