"""
Helpers for reading model replies.
"""
import json
import logging
import re

from halalcheck.errors import MalformedUpstreamReply

logger = logging.getLogger(__name__)

_NUMBERING_ONLY = re.compile(r"^\d+[.)]?\s*$")
_LIST_PREFIX = re.compile(r"^(?:[-*•]\s+|\d+[.)]\s+)")


def parse_json_reply(raw: str) -> dict:
    """Extract a JSON object from a reply (may contain markdown fences or chatter)."""
    if not raw or not raw.strip():
        raise MalformedUpstreamReply("empty reply")
    cleaned = re.sub(r"```(?:json)?\s*", "", raw).strip().rstrip("`")
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        start, end = cleaned.find("{"), cleaned.rfind("}")
        if start == -1 or end <= start:
            logger.warning("LLM_REPLY no JSON object in: %s", raw[:200])
            raise MalformedUpstreamReply("reply contains no JSON object")
        try:
            data = json.loads(cleaned[start:end + 1])
        except json.JSONDecodeError as e:
            logger.warning("LLM_REPLY could not parse JSON from: %s", raw[:200])
            raise MalformedUpstreamReply(f"invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise MalformedUpstreamReply("reply JSON is not an object")
    return data


def split_reply_lines(raw: str) -> list[str]:
    """
    Newline-delimited reply -> trimmed entries.
    Drops blank lines and pure numbering artifacts ("1."), strips list bullets ("- ", "2) ").
    """
    out: list[str] = []
    for line in (raw or "").splitlines():
        line = line.strip()
        if not line or _NUMBERING_ONLY.match(line):
            continue
        line = _LIST_PREFIX.sub("", line).strip()
        if line:
            out.append(line)
    return out
