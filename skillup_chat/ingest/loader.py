# Knowledge base loader. Single place for "JSON file on disk -> KnowledgeBase dict".
# Read once per chat request; there is no cache and no fallback source.

import json
import logging
from pathlib import Path
from typing import Any

from skillup_chat.core.config import DEFAULT_KNOWLEDGE_BASE_PATH
from skillup_chat.core.errors import KnowledgeLoadError

logger = logging.getLogger(__name__)


def load_knowledge_base(path: str | Path | None = None) -> dict[str, Any]:
    """
    Read the institute knowledge base (courses, admissions, fees, policies).

    The document is free-form; the only requirement is a JSON object at the top.

    Raises:
        KnowledgeLoadError: If the file is missing, unreadable, not JSON, or not an object.
    """
    kb_path = Path(path) if path else DEFAULT_KNOWLEDGE_BASE_PATH
    try:
        raw = kb_path.read_text(encoding="utf-8")
    except OSError as e:
        raise KnowledgeLoadError(f"Knowledge base not readable: {kb_path} ({e})") from e
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise KnowledgeLoadError(f"Knowledge base is not valid JSON: {kb_path} ({e})") from e
    if not isinstance(data, dict):
        raise KnowledgeLoadError(f"Knowledge base must be a JSON object: {kb_path}")
    logger.info("[loader:load_knowledge_base] OUT path=%s keys=%d", kb_path.name, len(data))
    return data
