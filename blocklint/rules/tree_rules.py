from __future__ import annotations

import re
from typing import List, Tuple

from blocklint.core.config import CORE_NAMESPACE, LinterConfig
from blocklint.core.diagnostics import DiagnosticCollector, error, warning
from blocklint.core.models import Block, DiagnosticKind
from blocklint.core.parser import iter_blocks
from blocklint.rules.attribute_rules import AttributeRuleRegistry, check_attributes

BLOCK_NAME_RE = re.compile(r"^[a-z][a-z0-9-]*(/[a-z][a-z0-9-]*)?$")
_TAG_RE = re.compile(r"<!--.*?-->|<[^>]*>", re.DOTALL)


def count_blocks(blocks: List[Block]) -> int:
    return sum(1 for _ in iter_blocks(blocks))


def check_block_count(blocks: List[Block], config: LinterConfig, collector: DiagnosticCollector) -> int:
    count = count_blocks(blocks)
    if count > config.max_block_count:
        collector.add(
            error(
                DiagnosticKind.max_blocks_exceeded,
                f"Total block count ({count}) exceeds maximum ({config.max_block_count})",
                count=count,
            )
        )
    return count


def check_depth(block: Block, depth: int, config: LinterConfig, collector: DiagnosticCollector) -> None:
    if depth > config.max_nesting_depth:
        collector.add(
            error(
                DiagnosticKind.max_depth_exceeded,
                f"Block '{block.name}' exceeds maximum nesting depth of {config.max_nesting_depth}",
                block.name,
                depth=depth,
                max_depth=config.max_nesting_depth,
            )
        )


def check_block_name(name: str, config: LinterConfig, collector: DiagnosticCollector) -> None:
    if config.validate_namespaces and not BLOCK_NAME_RE.match(name):
        collector.add(
            error(DiagnosticKind.invalid_block_name, f"Invalid block name format: '{name}'", name)
        )
        return

    if config.allowed_blocks and name not in config.allowed_blocks:
        collector.add(
            error(
                DiagnosticKind.forbidden_block,
                f"Block '{name}' is not in the allowed blocks list",
                name,
            )
        )

    if name in config.forbidden_blocks:
        collector.add(error(DiagnosticKind.forbidden_block, f"Block '{name}' is forbidden", name))

    if (
        config.validate_namespaces
        and name.startswith(CORE_NAMESPACE)
        and name not in config.core_blocks
    ):
        collector.add(warning(DiagnosticKind.unknown_core_block, f"Unknown core block: '{name}'", name))


def visible_text(markup: str) -> str:
    return _TAG_RE.sub("", markup).strip()


def check_empty_block(block: Block, config: LinterConfig, collector: DiagnosticCollector) -> None:
    if block.void or block.children or block.name in config.empty_block_exemptions:
        return
    if not visible_text(block.inner_markup):
        collector.add(
            warning(DiagnosticKind.empty_block, f"Empty block found: '{block.name}'", block.name)
        )


def check_parent_child(
    name: str, ancestors: Tuple[str, ...], config: LinterConfig, collector: DiagnosticCollector
) -> None:
    required = config.parent_child_relationships.get(name)
    if not required:
        return
    if any(parent in required for parent in ancestors):
        return
    collector.add(
        error(
            DiagnosticKind.invalid_parent_child_relationship,
            f"Block '{name}' requires a parent block of type: {', '.join(required)}",
            name,
            required_parents=list(required),
            current_parents=list(ancestors),
        )
    )


def check_block(
    block: Block,
    depth: int,
    ancestors: Tuple[str, ...],
    config: LinterConfig,
    registry: AttributeRuleRegistry,
    collector: DiagnosticCollector,
) -> None:
    name = block.name or ""
    check_depth(block, depth, config, collector)
    check_block_name(name, config, collector)
    check_attributes(block, config, registry, collector)
    if config.check_empty_blocks:
        check_empty_block(block, config, collector)
    if config.validate_parent_child_relationships:
        check_parent_child(name, ancestors, config, collector)


def walk_blocks(
    blocks: List[Block],
    config: LinterConfig,
    registry: AttributeRuleRegistry,
    collector: DiagnosticCollector,
) -> None:
    """Run the per-block rules in document order.

    Top-level nodes sit at depth 0 and each child one level below its parent.
    The ancestor chain only holds named blocks.
    """
    pending: List[Tuple[Block, int, Tuple[str, ...]]] = [(block, 0, ()) for block in reversed(blocks)]
    while pending:
        block, depth, ancestors = pending.pop()
        if not block.is_freeform:
            check_block(block, depth, ancestors, config, registry, collector)
        if block.children:
            chain = ancestors + (block.name,) if block.name else ancestors
            pending.extend((child, depth + 1, chain) for child in reversed(block.children))
