import re
from datetime import datetime
from typing import Any, Dict, Optional

from snuggle.constants import BLOCKED_CSS_PATTERNS, DEFAULT_LAYOUT_CONFIG

_BLOCKED_CSS = [re.compile(pattern, re.IGNORECASE) for pattern in BLOCKED_CSS_PATTERNS]


def sanitize_css(css: str) -> str:
    """Replace script-capable CSS constructs with a comment marker."""
    sanitized = css
    for pattern in _BLOCKED_CSS:
        sanitized = pattern.sub("/* blocked */", sanitized)
    return sanitized


def merge_skin_variables(
    skin: Optional[Dict[str, Any]],
    custom_variables: Optional[Dict[str, str]],
) -> Dict[str, str]:
    """Skin CSS variables overlaid by the blog's own overrides. Empty values are dropped."""
    merged: Dict[str, str] = {}
    if skin and skin.get("css_variables"):
        merged.update(skin["css_variables"])
    if custom_variables:
        merged.update(custom_variables)
    return {key: value for key, value in merged.items() if value}


def merge_layout_config(
    skin: Optional[Dict[str, Any]],
    custom_layout: Optional[Dict[str, Any]],
) -> Dict[str, Any]:
    merged = dict(DEFAULT_LAYOUT_CONFIG)
    if skin and skin.get("layout_config"):
        merged.update(skin["layout_config"])
    if custom_layout:
        merged.update(custom_layout)
    return merged


def format_preview_date(date_string: str) -> str:
    # Supabase timestamps may end in "Z", which fromisoformat rejects before 3.11
    date = datetime.fromisoformat(date_string.replace("Z", "+00:00"))
    return f"{date.year}년 {date.month}월 {date.day}일"
