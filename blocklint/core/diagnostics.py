from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from .models import Diagnostic, DiagnosticKind, Severity


def error(kind: DiagnosticKind, message: str, block: Optional[str] = None, **fields: Any) -> Diagnostic:
    return Diagnostic(kind=kind, severity=Severity.error, message=message, block=block, **fields)


def warning(kind: DiagnosticKind, message: str, block: Optional[str] = None, **fields: Any) -> Diagnostic:
    return Diagnostic(kind=kind, severity=Severity.warning, message=message, block=block, **fields)


def coerce_diagnostic(item: Any, severity: Severity) -> Diagnostic:
    """Accept a Diagnostic or a plain mapping from a custom rule.

    The list a diagnostic was reported in decides its severity; mappings
    without a ``kind`` are tagged ``custom``.
    """
    if isinstance(item, Diagnostic):
        return item.model_copy(update={"severity": severity})
    if isinstance(item, dict):
        payload: Dict[str, Any] = {"kind": DiagnosticKind.custom, **item, "severity": severity}
        return Diagnostic.model_validate(payload)
    raise TypeError(f"unsupported diagnostic type: {type(item).__name__}")


class DiagnosticCollector:
    def __init__(self) -> None:
        self.errors: List[Diagnostic] = []
        self.warnings: List[Diagnostic] = []

    def add(self, diagnostic: Diagnostic) -> None:
        if diagnostic.severity == Severity.error:
            self.errors.append(diagnostic)
        else:
            self.warnings.append(diagnostic)

    def extend(self, diagnostics: Sequence[Diagnostic]) -> None:
        for diagnostic in diagnostics:
            self.add(diagnostic)

    @property
    def passed(self) -> bool:
        return len(self.errors) == 0
