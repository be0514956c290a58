"""Shared helpers for Gemini responses: text extraction, fence stripping, citations."""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

from fridgechef.models.chat import GroundingChunk

logger = logging.getLogger(__name__)

# ```json ... ``` or ``` ... ``` wrapping the whole payload
_FENCE_RE = re.compile(r"^```[A-Za-z0-9_+-]*[ \t]*\r?\n?(.*?)\r?\n?```$", re.DOTALL)


def strip_code_fences(text: Optional[str]) -> str:
    """
    Remove a fenced code block wrapping the whole response.

    Handles an optional language tag (```json, ```JSON, ```javascript ...) and
    surrounding whitespace. Text that is not fenced is returned stripped.
    """
    t = (text or "").strip()
    match = _FENCE_RE.match(t)
    if match:
        return match.group(1).strip()
    return t


def get_response_text(response: Any) -> str:
    """
    Robust extraction of text from google-genai responses.

    Tries:
    1) response.text
    2) response.candidates[0].content.parts[*].text
    """
    try:
        t = getattr(response, "text", None)
        if isinstance(t, str) and t:
            return t
    except ValueError:
        # The SDK raises when a candidate carries no text part
        pass

    candidates = getattr(response, "candidates", None) or []
    if candidates:
        content = getattr(candidates[0], "content", None)
        parts = getattr(content, "parts", None) or []
        texts = [p.text for p in parts if isinstance(getattr(p, "text", None), str)]
        if texts:
            return "".join(texts)

    return ""


def extract_grounding_chunks(response: Any) -> List[GroundingChunk]:
    """
    Read web citations from response.candidates[0].grounding_metadata.grounding_chunks.

    Chunks without a web uri are skipped.
    """
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []

    metadata = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []

    citations: List[GroundingChunk] = []
    for chunk in chunks:
        web = getattr(chunk, "web", None)
        uri = getattr(web, "uri", None)
        if not uri:
            continue
        citations.append(GroundingChunk(uri=uri, title=getattr(web, "title", None)))
    return citations


def response_debug_summary(response: Any) -> Dict[str, Any]:
    """
    Safe, compact debug info (no huge dumps).
    Helps explain "HTTP 200 but empty text".
    """
    out: Dict[str, Any] = {}
    candidates = getattr(response, "candidates", None) or []
    out["candidates"] = len(candidates)
    if candidates:
        c0 = candidates[0]
        out["finish_reason"] = str(getattr(c0, "finish_reason", None))
        out["safety_ratings"] = str(getattr(c0, "safety_ratings", None))
        content = getattr(c0, "content", None)
        out["parts"] = len(getattr(content, "parts", None) or [])
    prompt_feedback = getattr(response, "prompt_feedback", None)
    if prompt_feedback is not None:
        out["prompt_feedback"] = str(prompt_feedback)
    return out


def log_empty_response(prefix: str, response: Any) -> None:
    summary = response_debug_summary(response)
    logger.warning("%s empty response text. summary=%s", prefix, summary)
