"""Checks that read the raw document instead of the parsed tree.

The tree builder absorbs malformed structure (a missing closer simply extends
a block to the end of the document) and the tokenizer decodes broken
attribute JSON as an empty mapping. These scans look at every delimiter
directly so those cases still surface as diagnostics.
"""

from __future__ import annotations

import json
from collections import Counter
from dataclasses import dataclass
from typing import Iterator, Optional

from blocklint.core.diagnostics import DiagnosticCollector, error, warning
from blocklint.core.models import DiagnosticKind
from blocklint.core.tokenizer import DELIMITER_RE, qualified_name


@dataclass(frozen=True)
class RawDelimiter:
    name: str
    start: int
    closer: bool
    void: bool
    attrs: Optional[str]
    attrs_start: int

    @property
    def opener(self) -> bool:
        return not self.closer and not self.void


def scan_delimiters(content: str) -> Iterator[RawDelimiter]:
    for match in DELIMITER_RE.finditer(content):
        yield RawDelimiter(
            name=qualified_name(match.group("namespace"), match.group("name")),
            start=match.start(),
            closer=match.group("closer") is not None and match.group("void") is None,
            void=match.group("void") is not None,
            attrs=match.group("attrs"),
            attrs_start=match.start("attrs"),
        )


def check_unclosed_blocks(content: str, collector: DiagnosticCollector) -> None:
    opened: Counter[str] = Counter()
    closed: Counter[str] = Counter()
    for delimiter in scan_delimiters(content):
        if delimiter.opener:
            opened[delimiter.name] += 1
        elif delimiter.closer:
            closed[delimiter.name] += 1

    for name, count in opened.items():
        closed_count = closed[name]
        if count > closed_count:
            collector.add(
                error(
                    DiagnosticKind.unclosed_block,
                    f"Unclosed block found: '{name}' (opened {count} times, closed {closed_count} times)",
                    name,
                    opened=count,
                    closed=closed_count,
                )
            )


def check_orphaned_closers(content: str, collector: DiagnosticCollector) -> None:
    seen_openers: set[str] = set()
    for delimiter in scan_delimiters(content):
        if delimiter.opener:
            seen_openers.add(delimiter.name)
        elif delimiter.closer and delimiter.name not in seen_openers:
            collector.add(
                warning(
                    DiagnosticKind.orphaned_closer,
                    f"Closing tag without opening tag: '{delimiter.name}'",
                    delimiter.name,
                    position=delimiter.start,
                )
            )


def _reject_constant(name: str) -> None:
    raise ValueError(f"Invalid JSON constant: {name}")


def check_malformed_json(content: str, collector: DiagnosticCollector) -> None:
    for delimiter in scan_delimiters(content):
        if delimiter.closer or delimiter.attrs is None:
            continue
        try:
            json.loads(delimiter.attrs, parse_constant=_reject_constant)
        except json.JSONDecodeError as exc:
            reason = exc.msg
        except ValueError as exc:
            reason = str(exc)
        except RecursionError:
            reason = "Maximum nesting depth exceeded"
        else:
            continue
        collector.add(
            error(
                DiagnosticKind.malformed_json_attributes,
                f"Malformed JSON in block attributes: {reason}",
                delimiter.name,
                json_error=reason,
                position=delimiter.attrs_start,
                json_string=delimiter.attrs,
            )
        )
