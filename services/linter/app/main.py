from __future__ import annotations

import os
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from prometheus_client import Counter, make_asgi_app
from pydantic import BaseModel

from blocklint.core import logging as core_logging
from blocklint.core.config import LinterConfig, config_from_mapping, load_config
from blocklint.core.errors import LinterError
from blocklint.core.linter import BlockLinter
from blocklint.core.models import LintResult

core_logging.configure_logging("linter")
logger = core_logging.get_logger("linter")

BLOCKLINT_CONFIG_PATH = os.getenv("BLOCKLINT_CONFIG_PATH", "")

app = FastAPI(title="Block Linter")
app.mount("/metrics", make_asgi_app())

lint_requests_total = Counter("blocklint_requests_total", "Lint requests", ["source"])
failed_documents_total = Counter(
    "blocklint_failed_documents_total", "Linted documents with at least one error"
)

default_config = load_config(BLOCKLINT_CONFIG_PATH) if BLOCKLINT_CONFIG_PATH else LinterConfig()
default_linter = BlockLinter(default_config)


class LintRequest(BaseModel):
    content: str
    source: str = "input"
    config: Optional[Dict[str, Any]] = None


@app.get("/healthz")
def healthz() -> Dict[str, str]:
    return {"status": "ok"}


@app.post("/lint", response_model=LintResult)
def lint(request: LintRequest) -> LintResult:
    linter = default_linter
    if request.config is not None:
        try:
            linter = BlockLinter(config_from_mapping(request.config))
        except LinterError as exc:
            raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
    lint_requests_total.labels(source="request_config" if request.config else "default").inc()
    result = linter.lint(request.content, source=request.source)
    if not result.passed:
        failed_documents_total.inc()
    core_logging.log_event(
        logger,
        "lint_completed",
        {
            "source": request.source,
            "passed": result.passed,
            "errors": len(result.errors),
            "warnings": len(result.warnings),
        },
    )
    return result
