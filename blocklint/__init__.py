from blocklint.core.config import LinterConfig, load_config
from blocklint.core.linter import BlockLinter
from blocklint.core.models import Block, Diagnostic, DiagnosticKind, LintResult, Severity
from blocklint.core.parser import parse_blocks

__version__ = "0.1.0"

__all__ = [
    "Block",
    "BlockLinter",
    "Diagnostic",
    "DiagnosticKind",
    "LintResult",
    "LinterConfig",
    "Severity",
    "load_config",
    "parse_blocks",
]
