from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from blocklint.rules.attribute_rules import AttributeRuleRegistry, default_attribute_registry
from blocklint.rules.raw_text_rules import (
    check_malformed_json,
    check_orphaned_closers,
    check_unclosed_blocks,
)
from blocklint.rules.tree_rules import check_block_count, walk_blocks

from .config import LinterConfig
from .diagnostics import DiagnosticCollector, coerce_diagnostic, error, warning
from .models import Block, Diagnostic, DiagnosticKind, LintResult, RuleOutcome, Severity
from .parser import BlockParser

LOGGER = logging.getLogger(__name__)

CustomRule = Callable[[str, List[Block], "BlockLinter"], Any]
ContentTransform = Callable[[str, Tuple[Diagnostic, ...], Tuple[Diagnostic, ...]], Any]


class BlockLinter:
    """Parses a document and runs the built-in and registered rules over it.

    The linter keeps no state between runs: each call to :meth:`lint` builds
    its own tree and diagnostic collector, so one instance can be shared
    across threads once its rules and transforms are registered.
    """

    def __init__(
        self,
        config: Optional[LinterConfig] = None,
        attribute_registry: Optional[AttributeRuleRegistry] = None,
    ) -> None:
        self.config = config or LinterConfig()
        self.attribute_registry = attribute_registry or default_attribute_registry()
        self._custom_rules: List[CustomRule] = []
        self._content_transforms: List[ContentTransform] = []

    def add_custom_rule(self, rule: CustomRule) -> None:
        if not callable(rule):
            raise TypeError("custom rule must be callable")
        self._custom_rules.append(rule)

    def add_content_transform(self, transform: ContentTransform) -> None:
        if not callable(transform):
            raise TypeError("content transform must be callable")
        self._content_transforms.append(transform)

    @property
    def custom_rules(self) -> Tuple[CustomRule, ...]:
        return tuple(self._custom_rules)

    @property
    def content_transforms(self) -> Tuple[ContentTransform, ...]:
        return tuple(self._content_transforms)

    def parse(self, content: str) -> List[Block]:
        return BlockParser().parse(content)

    def lint_file(self, path: str | Path) -> LintResult:
        source_path = Path(path)
        if not source_path.is_file():
            return LintResult(
                passed=False,
                errors=[
                    error(
                        DiagnosticKind.file_not_found,
                        f"File not found: {source_path}",
                        source=str(source_path),
                    )
                ],
                source=str(source_path),
            )
        content = source_path.read_text(encoding="utf-8")
        return self.lint(content, source=str(source_path))

    def lint(self, content: str, source: str = "input") -> LintResult:
        config = self.config
        collector = DiagnosticCollector()
        LOGGER.debug("lint_started", extra={"source": source, "size": len(content)})

        size = len(content.encode("utf-8"))
        if config.max_document_size and size > config.max_document_size:
            collector.add(
                error(
                    DiagnosticKind.document_size_exceeded,
                    f"Document size ({size} bytes) exceeds maximum ({config.max_document_size})",
                    size=size,
                    max_size=config.max_document_size,
                    source=source,
                )
            )
            return self._result(collector, content, source, 0)

        blocks = self.parse(content)

        block_count = check_block_count(blocks, config, collector)
        walk_blocks(blocks, config, self.attribute_registry, collector)
        if config.require_closing_tags:
            check_unclosed_blocks(content, collector)
            check_orphaned_closers(content, collector)
        if config.check_malformed_json:
            check_malformed_json(content, collector)

        self._run_custom_rules(content, blocks, collector, source)
        modified = self._run_content_transforms(content, collector, source)

        result = self._result(collector, modified, source, block_count)
        LOGGER.debug(
            "lint_completed",
            extra={
                "source": source,
                "passed": result.passed,
                "errors": len(result.errors),
                "warnings": len(result.warnings),
            },
        )
        return result

    def get_modified_content(
        self,
        content: str,
        errors: Sequence[Diagnostic] = (),
        warnings: Sequence[Diagnostic] = (),
    ) -> str:
        """Apply the content transforms to ``content`` outside of a lint run.

        Transform failures are logged and skipped.
        """
        modified = content
        error_snapshot = tuple(item.model_copy(deep=True) for item in errors)
        warning_snapshot = tuple(item.model_copy(deep=True) for item in warnings)
        for transform in self._content_transforms:
            try:
                result = transform(modified, error_snapshot, warning_snapshot)
            except Exception:  # noqa: BLE001
                LOGGER.warning("content_transform_failed", exc_info=True)
                continue
            if isinstance(result, str):
                modified = result
        return modified

    def _run_custom_rules(
        self,
        content: str,
        blocks: List[Block],
        collector: DiagnosticCollector,
        source: str,
    ) -> None:
        for rule in self._custom_rules:
            try:
                outcome = rule(content, blocks, self)
                collected = _outcome_diagnostics(outcome)
            except Exception as exc:  # noqa: BLE001
                LOGGER.warning("custom_rule_failed", exc_info=True, extra={"source": source})
                collector.add(
                    error(
                        DiagnosticKind.custom_validator_error,
                        f"Custom validator failed: {exc}",
                        source=source,
                    )
                )
                continue
            collector.extend(collected)

    def _run_content_transforms(
        self, content: str, collector: DiagnosticCollector, source: str
    ) -> str:
        modified = content
        errors = tuple(item.model_copy(deep=True) for item in collector.errors)
        warnings = tuple(item.model_copy(deep=True) for item in collector.warnings)
        failures: List[Diagnostic] = []
        for transform in self._content_transforms:
            try:
                result = transform(modified, errors, warnings)
            except Exception as exc:  # noqa: BLE001
                LOGGER.warning("content_transform_failed", exc_info=True, extra={"source": source})
                failures.append(
                    warning(
                        DiagnosticKind.post_validation_callback_error,
                        f"Post-validation callback failed: {exc}",
                        source=source,
                    )
                )
                continue
            if isinstance(result, str):
                modified = result
        collector.extend(failures)
        return modified

    @staticmethod
    def _result(
        collector: DiagnosticCollector, content: str, source: str, block_count: int
    ) -> LintResult:
        return LintResult(
            passed=collector.passed,
            errors=list(collector.errors),
            warnings=list(collector.warnings),
            content=content,
            source=source,
            block_count=block_count,
        )


def _outcome_diagnostics(outcome: Any) -> List[Diagnostic]:
    if outcome is None:
        return []
    if isinstance(outcome, RuleOutcome):
        return [coerce_diagnostic(item, Severity.error) for item in outcome.errors] + [
            coerce_diagnostic(item, Severity.warning) for item in outcome.warnings
        ]
    if not isinstance(outcome, dict):
        return []
    diagnostics: List[Diagnostic] = []
    try:
        for item in outcome.get("errors") or []:
            diagnostics.append(coerce_diagnostic(item, Severity.error))
        for item in outcome.get("warnings") or []:
            diagnostics.append(coerce_diagnostic(item, Severity.warning))
    except ValidationError as exc:
        raise ValueError(f"invalid diagnostic returned by custom rule: {exc}") from exc
    return diagnostics
