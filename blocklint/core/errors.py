from __future__ import annotations


class LinterError(Exception):
    def __init__(self, detail: str, status_code: int = 400) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


class ConfigError(LinterError):
    pass
