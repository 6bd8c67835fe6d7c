"""Two-stage decoding of JSON embedded in model output.

Stage 1 parses the first balanced {...} or [...] span strictly.
Stage 2 (labeled-field extraction) recovers individual "key": "value"
pairs from text that is almost, but not quite, JSON.
"""

import json
import re
from typing import Any, Dict, Iterable, List, Optional

_OPENERS = {'{': '}', '[': ']'}


def strip_code_fences(content: str) -> str:
    """Remove markdown code fences an LLM may wrap around JSON."""
    if not content:
        return ""
    if '```json' in content:
        content = content.split('```json', 1)[1].split('```', 1)[0]
    elif '```' in content:
        parts = content.split('```')
        if len(parts) >= 3:
            content = parts[1]
    return content.strip()


def find_balanced_span(text: str, opener: str) -> Optional[str]:
    """Return the first balanced span starting with `opener`.

    Brackets inside JSON string literals are ignored. Returns None when no
    opener exists or the span never closes.
    """
    if not text or opener not in _OPENERS:
        return None
    closer = _OPENERS[opener]

    start = text.find(opener)
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == '\\':
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == opener:
            depth += 1
        elif ch == closer:
            depth -= 1
            if depth == 0:
                return text[start:i + 1]
    return None


def extract_json_object(content: str) -> Optional[Dict[str, Any]]:
    """Parse the first balanced {...} in `content`; None on any failure."""
    span = find_balanced_span(strip_code_fences(content), '{')
    if span is None:
        return None
    try:
        parsed = json.loads(span)
    except (json.JSONDecodeError, ValueError):
        return None
    return parsed if isinstance(parsed, dict) else None


def extract_json_array(content: str) -> Optional[List[Any]]:
    """Parse the first balanced [...] in `content`; None on any failure."""
    span = find_balanced_span(strip_code_fences(content), '[')
    if span is None:
        return None
    try:
        parsed = json.loads(span)
    except (json.JSONDecodeError, ValueError):
        return None
    return parsed if isinstance(parsed, list) else None


def extract_labeled_fields(content: str, keys: Iterable[str]) -> Dict[str, str]:
    """Recover `key: value` pairs from malformed JSON-like text.

    Handles unterminated objects, single-quoted or unquoted values and
    trailing garbage. Keys that cannot be found are omitted.
    """
    keys = list(keys)
    found = {}
    if not content:
        return found

    # A bare value ends only where another requested key begins
    next_key = '|'.join(re.escape(k) for k in keys)

    for key in keys:
        # Quoted value: "key": "some text" (stops at the next unescaped quote)
        quoted = re.search(
            r'["\']?' + re.escape(key) + r'["\']?\s*[:=]\s*"((?:[^"\\]|\\.)*)"?',
            content,
            re.IGNORECASE | re.DOTALL,
        )
        if quoted and quoted.group(1).strip():
            value = quoted.group(1)
        else:
            # Bare value runs to the next `, key:` pair, closing brace or end of line
            bare = re.search(
                r'["\']?' + re.escape(key) + r'["\']?\s*[:=]\s*'
                r'(.+?)(?=,\s*["\']?(?:' + next_key + r')["\']?\s*[:=]|[}\n]|$)',
                content,
                re.IGNORECASE,
            )
            if not bare:
                continue
            value = bare.group(1)

        value = value.replace('\\"', '"').replace('\\n', '\n')
        value = value.strip().strip('"\'{} ').strip()
        if value:
            found[key] = value

    return found
