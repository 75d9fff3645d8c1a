import json
import logging
from typing import Any, AsyncGenerator, Callable, Dict, List, Optional

from snuggle.themes import ThemeGenerationError, ThemeGenerator


def sse_event(payload: Dict[str, Any]) -> str:
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


def latest_user_message(messages: List[Dict[str, Any]]) -> Optional[str]:
    for message in reversed(messages):
        if message.get("role") == "user" and (message.get("content") or "").strip():
            return message["content"].strip()
    return None


async def theme_event_stream(
    generator: ThemeGenerator,
    messages: List[Dict[str, Any]],
    current_code: Optional[str] = None,
    on_theme: Optional[Callable[[str, Dict[str, Any]], None]] = None,
) -> AsyncGenerator[str, None]:
    # The whole theme is sent as a single chunk event; clients replace rather than append.
    user_request = latest_user_message(messages)
    if not user_request:
        yield sse_event({"type": "error", "error": "스타일 요청이 비어있습니다"})
        return

    if current_code:
        logging.info(f"[AI] Current sections payload: {len(current_code)} chars")

    yield sse_event({"type": "progress", "message": "CSS를 생성하고 있어요..."})

    try:
        theme = await generator.generate_theme(user_request)
    except ThemeGenerationError as e:
        yield sse_event({"type": "error", "error": str(e)})
        return
    except Exception as e:
        logging.error(f"An unexpected server error occurred: {e}")
        yield sse_event({"type": "error", "error": f"AI 처리 중 오류 발생: {e}"})
        return

    if on_theme:
        on_theme(user_request, theme)

    yield sse_event({"type": "chunk", "content": json.dumps(theme, ensure_ascii=False)})
    yield sse_event({"type": "done"})
