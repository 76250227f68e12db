__all__ = [
    "models",
    "config",
    "errors",
    "tokenizer",
    "parser",
    "diagnostics",
    "linter",
    "report",
    "schemas",
    "logging",
]
