from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List

from blocklint.core.config import LinterConfig
from blocklint.core.diagnostics import DiagnosticCollector, error, warning
from blocklint.core.models import Block, Diagnostic, DiagnosticKind, Severity

_NUMERIC_RE = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")

AttributeCheckHandler = Callable[[Block], List[Diagnostic]]


@dataclass
class AttributeCheck:
    name: str
    block_name: str
    description: str
    handler: AttributeCheckHandler


class AttributeRuleRegistry:
    def __init__(self) -> None:
        self._checks: Dict[str, List[AttributeCheck]] = {}
        self._names: set[str] = set()

    def register(self, check: AttributeCheck) -> None:
        name = check.name.strip()
        if not name:
            raise ValueError("AttributeCheck name must be non-empty")
        if name in self._names:
            raise ValueError(f"AttributeCheck already registered: {name}")
        self._names.add(name)
        self._checks.setdefault(check.block_name, []).append(check)

    def get(self, block_name: str) -> List[AttributeCheck]:
        return list(self._checks.get(block_name, []))

    def has(self, block_name: str) -> bool:
        return block_name in self._checks

    def list(self) -> List[AttributeCheck]:
        return [check for checks in self._checks.values() for check in checks]


def is_numeric(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    return isinstance(value, str) and _NUMERIC_RE.match(value) is not None


def is_blank(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0
    if isinstance(value, str):
        return value == "" or value == "0"
    if isinstance(value, (list, dict)):
        return len(value) == 0
    return False


def in_range(value: Any, low: float, high: float) -> bool:
    """Numeric range check that never converts JSON integers to float."""
    if not is_numeric(value):
        return False
    number = float(value) if isinstance(value, str) else value
    return low <= number <= high


def bounded_numeric(
    attribute: str,
    low: float,
    high: float,
    severity: Severity,
    message: str,
) -> AttributeCheckHandler:
    """Build a handler flagging ``attribute`` when it is present but not a number in [low, high]."""
    factory = error if severity == Severity.error else warning

    def handler(block: Block) -> List[Diagnostic]:
        if attribute not in block.attributes:
            return []
        value = block.attributes[attribute]
        if in_range(value, low, high):
            return []
        return [
            factory(
                DiagnosticKind.invalid_attribute_value,
                message.format(value=value),
                block.name,
            )
        ]

    return handler


def requires_any(attributes: Iterable[str], message: str) -> AttributeCheckHandler:
    keys = tuple(attributes)

    def handler(block: Block) -> List[Diagnostic]:
        if all(is_blank(block.attributes.get(key)) for key in keys):
            return [warning(DiagnosticKind.missing_required_attribute, message, block.name)]
        return []

    return handler


DEFAULT_ATTRIBUTE_CHECKS: List[AttributeCheck] = [
    AttributeCheck(
        name="image_source",
        block_name="core/image",
        description="Images need a url or an attachment id.",
        handler=requires_any(("url", "id"), "Image block missing 'url' or 'id' attribute"),
    ),
    AttributeCheck(
        name="heading_level",
        block_name="core/heading",
        description="Heading level must be a number between 1 and 6.",
        handler=bounded_numeric("level", 1, 6, Severity.error, "Invalid heading level: {value}"),
    ),
    AttributeCheck(
        name="columns_count",
        block_name="core/columns",
        description="Column counts outside 1-6 are unusual.",
        handler=bounded_numeric(
            "columns", 1, 6, Severity.warning, "Unusual column count: {value}"
        ),
    ),
]


def default_attribute_registry(
    extra_checks: Iterable[AttributeCheck] | None = None,
) -> AttributeRuleRegistry:
    registry = AttributeRuleRegistry()
    for check in DEFAULT_ATTRIBUTE_CHECKS:
        registry.register(check)
    if extra_checks:
        for check in extra_checks:
            registry.register(check)
    return registry


def attribute_size(attributes: Dict[str, Any]) -> int:
    return len(json.dumps(attributes, separators=(",", ":"), ensure_ascii=False).encode("utf-8"))


def check_attributes(
    block: Block,
    config: LinterConfig,
    registry: AttributeRuleRegistry,
    collector: DiagnosticCollector,
) -> None:
    if not block.attributes or not config.validate_json:
        return

    size = attribute_size(block.attributes)
    if size > config.max_attribute_size:
        collector.add(
            error(
                DiagnosticKind.attribute_size_exceeded,
                f"Attributes for block '{block.name}' exceed maximum size",
                block.name,
                size=size,
                max_size=config.max_attribute_size,
            )
        )

    for check in registry.get(block.name or ""):
        collector.extend(check.handler(block))
