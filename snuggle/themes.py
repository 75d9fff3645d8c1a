"""
CSS theme generation backed by a local Ollama model.
"""

import json
import logging
import re
from typing import Any, Dict, Optional

import ollama

from snuggle.constants import (
    COLOR_KEYWORDS,
    CREATIVE_GUIDELINES,
    REQUIRED_CSS,
    STYLE_KEYWORDS,
    THEME_PROMPT_FOOTER,
    THEME_PROMPT_HEADER,
)
from snuggle.utils import sanitize_css

# Used when the model returns almost-JSON, e.g. an unescaped quote inside the CSS.
CSS_FIELD_PATTERN = re.compile(r'"css"\s*:\s*"([\s\S]*?)(?:"\s*\}|"\s*,)')


class ThemeGenerationError(Exception):
    """Raised when Ollama fails or returns no usable CSS."""


def build_system_prompt() -> str:
    colors = "\n".join(
        f"- {keywords} → " + ", ".join(f"{role}: {value}" for role, value in palette.items())
        for keywords, palette in COLOR_KEYWORDS
    )
    styles = "\n".join(f"- {keywords} → {rules}" for keywords, rules in STYLE_KEYWORDS)
    guidelines = "\n".join(f"{i}. {line}" for i, line in enumerate(CREATIVE_GUIDELINES, start=1))

    return (
        f"{THEME_PROMPT_HEADER}\n\n"
        "=== USER REQUEST INTERPRETATION ===\n\n"
        f"COLOR KEYWORDS (한국어 → CSS colors):\n{colors}\n\n"
        f"STYLE KEYWORDS:\n{styles}\n\n"
        f"=== REQUIRED CSS STRUCTURE ===\n\n{REQUIRED_CSS}\n\n"
        f"=== CREATIVE GUIDELINES ===\n\n{guidelines}\n\n"
        f"{THEME_PROMPT_FOOTER}"
    )


def build_user_prompt(user_request: str) -> str:
    return f'Style request: "{user_request}"'


def extract_css(content: str) -> str:
    """
    Pull the ``css`` field out of a model response.

    Args:
        content: Raw message content, expected to be ``{"css": "..."}``.

    Returns:
        The CSS text, or an empty string when none can be found.
    """
    try:
        parsed = json.loads(content)
    except (json.JSONDecodeError, TypeError):
        match = CSS_FIELD_PATTERN.search(content or "")
        if not match:
            return ""
        return match.group(1).replace("\\n", "\n").replace('\\"', '"')

    if isinstance(parsed, dict) and isinstance(parsed.get("css"), str):
        return parsed["css"]
    return ""


class ThemeGenerator:
    """Generates blog CSS from a natural-language style request."""

    def __init__(
        self,
        client: Optional[ollama.AsyncClient],
        model: str,
        temperature: float = 0.7,
        num_predict: int = 4000,
    ):
        """
        Initialize theme generator.

        Args:
            client: Connected Ollama client, or None when Ollama is unreachable.
            model: Ollama model name.
            temperature: Sampling temperature.
            num_predict: Maximum tokens to generate.
        """
        self.client = client
        self.model = model
        self.temperature = temperature
        self.num_predict = num_predict

    async def request(self, system_prompt: str, user_prompt: str) -> str:
        """Send one non-streaming JSON chat request and return the message content."""
        if self.client is None:
            raise ThemeGenerationError("Ollama service is unavailable")

        logging.info(f"[Ollama] Requesting {self.model}...")
        try:
            response = await self.client.chat(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                stream=False,
                format="json",
                options={"temperature": self.temperature, "num_predict": self.num_predict},
            )
        except ollama.ResponseError as e:
            logging.error(f"Ollama responded with {e.status_code}: {e.error}")
            raise ThemeGenerationError(f"Ollama error: {e.status_code}") from e
        except Exception as e:
            logging.error(f"Ollama request failed: {e}")
            raise ThemeGenerationError(f"Ollama error: {e}") from e

        message = response.get("message")
        content = (message.get("content") if message else None) or ""
        logging.info(f"[Ollama] Response length: {len(content)}")
        return content

    async def generate_css(self, user_request: str) -> str:
        result = await self.request(build_system_prompt(), build_user_prompt(user_request))
        return extract_css(result)

    async def generate_theme(self, user_request: str) -> Dict[str, Any]:
        """
        Generate a theme for a style request.

        Only the ``custom_css`` section is produced; the HTML template is left
        to the frontend defaults.

        Raises:
            ThemeGenerationError: Ollama failed or returned no CSS.
        """
        logging.info(f'Theme request: "{user_request}"')

        css = await self.generate_css(user_request)
        logging.info(f"CSS done: {len(css)} chars")

        if not css:
            raise ThemeGenerationError("CSS 생성 실패")

        return {
            "message": f'"{user_request}" 스타일을 적용했어요!',
            "sections": {
                "custom_css": sanitize_css(css),
            },
        }

    async def check_health(self) -> Dict[str, Any]:
        """Report whether Ollama is reachable and the configured model is pulled."""
        unavailable = {"available": False, "model": self.model, "modelLoaded": False}
        if self.client is None:
            return unavailable

        try:
            tags = await self.client.list()
        except Exception as e:
            logging.error(f"Ollama health check failed: {e}")
            return unavailable

        names = [m.get("model") or m.get("name") or "" for m in (tags.get("models") or [])]
        model_loaded = any(
            name == self.model or name.startswith(f"{self.model}:") for name in names
        )
        return {"available": True, "model": self.model, "modelLoaded": model_loaded}
