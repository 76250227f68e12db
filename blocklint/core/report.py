from __future__ import annotations

from typing import List, Sequence

from .models import Diagnostic, LintResult


def _section(title: str, diagnostics: Sequence[Diagnostic], verbose: bool) -> List[str]:
    lines = [f"\n{title} ({len(diagnostics)}):\n"]
    for diagnostic in diagnostics:
        lines.append(f"  - [{diagnostic.kind.value}] {diagnostic.message}")
        if verbose and diagnostic.block:
            lines.append(f"    Block: {diagnostic.block}")
    return lines


def format_results(result: LintResult, verbose: bool = False) -> str:
    lines: List[str] = []
    if result.errors:
        lines.extend(_section("ERRORS", result.errors, verbose))
    if result.warnings:
        lines.extend(_section("WARNINGS", result.warnings, verbose))
    if not result.errors and not result.warnings:
        lines.append("\nNo issues found!")
    return "\n".join(lines)
