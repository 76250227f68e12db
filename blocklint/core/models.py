from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    error = "error"
    warning = "warning"


class DiagnosticKind(str, Enum):
    # admission
    max_blocks_exceeded = "max_blocks_exceeded"
    max_depth_exceeded = "max_depth_exceeded"
    attribute_size_exceeded = "attribute_size_exceeded"
    document_size_exceeded = "document_size_exceeded"
    # grammar
    invalid_block_name = "invalid_block_name"
    malformed_json_attributes = "malformed_json_attributes"
    unclosed_block = "unclosed_block"
    orphaned_closer = "orphaned_closer"
    # semantic
    forbidden_block = "forbidden_block"
    invalid_parent_child_relationship = "invalid_parent_child_relationship"
    invalid_attribute_value = "invalid_attribute_value"
    # advisory
    unknown_core_block = "unknown_core_block"
    empty_block = "empty_block"
    missing_required_attribute = "missing_required_attribute"
    # extensions
    custom = "custom"
    custom_validator_error = "custom_validator_error"
    post_validation_callback_error = "post_validation_callback_error"
    # input
    file_not_found = "file_not_found"


class Block(BaseModel):
    """A node of the parsed document.

    ``name`` is ``None`` for freeform text. ``inner_content`` interleaves the
    literal spans of ``inner_markup`` with one ``None`` per entry of
    ``children``, in document order. ``opener_markup`` and ``closer_markup``
    keep the delimiter text as written in the source; they are ``None`` for
    blocks built in code, and ``closer_markup`` stays ``None`` for void and
    unclosed blocks.
    """

    name: Optional[str] = None
    attributes: Dict[str, Any] = Field(default_factory=dict)
    children: List["Block"] = Field(default_factory=list)
    inner_markup: str = ""
    inner_content: List[Optional[str]] = Field(default_factory=list)
    void: bool = False
    opener_markup: Optional[str] = Field(default=None, exclude=True, repr=False)
    closer_markup: Optional[str] = Field(default=None, exclude=True, repr=False)

    @property
    def is_freeform(self) -> bool:
        return self.name is None


class Diagnostic(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: DiagnosticKind
    severity: Severity
    message: str
    block: Optional[str] = None
    count: Optional[int] = None
    depth: Optional[int] = None
    max_depth: Optional[int] = None
    size: Optional[int] = None
    max_size: Optional[int] = None
    position: Optional[int] = None
    opened: Optional[int] = None
    closed: Optional[int] = None
    required_parents: Optional[List[str]] = None
    current_parents: Optional[List[str]] = None
    json_string: Optional[str] = None
    json_error: Optional[str] = None
    source: Optional[str] = None


class RuleOutcome(BaseModel):
    errors: List[Diagnostic] = Field(default_factory=list)
    warnings: List[Diagnostic] = Field(default_factory=list)


class LintResult(BaseModel):
    passed: bool
    errors: List[Diagnostic] = Field(default_factory=list)
    warnings: List[Diagnostic] = Field(default_factory=list)
    content: str = ""
    source: str = "input"
    block_count: int = 0


Block.model_rebuild()
