from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from .config import CORE_NAMESPACE

# The attribute body is matched possessively (Python 3.11+) so a payload that
# never reaches its closing "} -->" fails in linear time instead of
# backtracking through every split of the text.
ATTRS_PATTERN = r"\{(?:[^}]+|\}+(?=\})|(?!\}\s+/?-->).)*+\}"

DELIMITER_RE = re.compile(
    r"<!--\s+(?P<closer>/)?wp:"
    r"(?P<namespace>[a-z][a-z0-9_-]*/)?(?P<name>[a-z][a-z0-9_-]*)\s+"
    r"(?:(?P<attrs>" + ATTRS_PATTERN + r")\s+)?"
    r"(?P<void>/)?-->",
    re.DOTALL,
)


class TokenType(str, Enum):
    opener = "block-opener"
    closer = "block-closer"
    void = "void-block"
    end = "no-more-tokens"


@dataclass(frozen=True)
class Token:
    type: TokenType
    name: Optional[str] = None
    attrs: Optional[Dict[str, Any]] = field(default=None, compare=False)
    start: int = -1
    length: int = 0

    @property
    def end(self) -> int:
        return self.start + self.length


END_TOKEN = Token(TokenType.end)


def decode_attributes(raw: Optional[str]) -> Dict[str, Any]:
    """Lenient decode: anything that is not a JSON object becomes ``{}``."""
    if raw is None:
        return {}
    try:
        decoded = json.loads(raw)
    except (ValueError, RecursionError):
        return {}
    if not isinstance(decoded, dict):
        return {}
    return decoded


def qualified_name(namespace: Optional[str], name: str) -> str:
    return f"{namespace or CORE_NAMESPACE}{name}"


def next_token(document: str, offset: int = 0) -> Token:
    match = DELIMITER_RE.search(document, offset)
    if match is None:
        return END_TOKEN

    start = match.start()
    length = match.end() - start
    name = qualified_name(match.group("namespace"), match.group("name"))

    if match.group("void") is not None:
        return Token(TokenType.void, name, decode_attributes(match.group("attrs")), start, length)
    if match.group("closer") is not None:
        return Token(TokenType.closer, name, None, start, length)
    return Token(TokenType.opener, name, decode_attributes(match.group("attrs")), start, length)
