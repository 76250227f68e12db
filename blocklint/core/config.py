from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Tuple

import yaml
from jsonschema import Draft202012Validator
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError

LOGGER = logging.getLogger(__name__)

CORE_NAMESPACE = "core/"

DEFAULT_CORE_BLOCKS: Tuple[str, ...] = (
    "core/paragraph", "core/heading", "core/list", "core/quote",
    "core/image", "core/gallery", "core/video", "core/audio",
    "core/columns", "core/column", "core/group", "core/button",
    "core/buttons", "core/separator", "core/spacer", "core/code",
    "core/preformatted", "core/pullquote", "core/table", "core/verse",
    "core/embed", "core/file", "core/media-text", "core/more",
    "core/nextpage", "core/block", "core/html", "core/shortcode",
    "core/archives", "core/categories", "core/latest-comments",
    "core/latest-posts", "core/calendar", "core/rss", "core/search",
    "core/tag-cloud", "core/navigation", "core/navigation-link",
    "core/site-logo", "core/site-title", "core/site-tagline",
    "core/query", "core/post-template", "core/post-title",
    "core/post-content", "core/post-excerpt", "core/post-featured-image",
    "core/post-date", "core/post-author", "core/post-terms",
    "core/loginout", "core/social-links", "core/social-link",
    "core/navigation-submenu", "core/comments", "core/comment-template",
    "core/comment-author-name", "core/comment-date", "core/comment-content",
    "core/comment-reply-link", "core/comments-title", "core/comments-pagination",
    "core/comments-pagination-previous", "core/comments-pagination-numbers",
    "core/comments-pagination-next", "core/post-comments-form",
    "core/query-pagination", "core/query-pagination-previous",
    "core/query-pagination-numbers", "core/query-pagination-next",
    "core/query-no-results", "core/query-title", "core/term-description",
    "core/archive-title", "core/cover", "core/template-part", "core/pattern",
    "core/widget-area", "core/legacy-widget", "core/avatar",
)

DEFAULT_PARENT_CHILD_RELATIONSHIPS: Dict[str, Tuple[str, ...]] = {
    "core/column": ("core/columns",),
    "core/navigation-link": ("core/navigation", "core/navigation-submenu"),
    "core/navigation-submenu": ("core/navigation",),
    "core/social-link": ("core/social-links",),
    "core/button": ("core/buttons",),
    "core/post-template": ("core/query",),
    "core/query-pagination": ("core/query",),
    "core/query-pagination-previous": ("core/query-pagination",),
    "core/query-pagination-numbers": ("core/query-pagination",),
    "core/query-pagination-next": ("core/query-pagination",),
    "core/query-no-results": ("core/query",),
    "core/comment-template": ("core/comments",),
    "core/comment-author-name": ("core/comment-template",),
    "core/comment-date": ("core/comment-template",),
    "core/comment-content": ("core/comment-template",),
    "core/comment-reply-link": ("core/comment-template",),
    "core/comments-pagination": ("core/comments",),
    "core/comments-pagination-previous": ("core/comments-pagination",),
    "core/comments-pagination-numbers": ("core/comments-pagination",),
    "core/comments-pagination-next": ("core/comments-pagination",),
    "core/post-comments-form": ("core/comments",),
    "core/comments-title": ("core/comments",),
}

DEFAULT_EMPTY_BLOCK_EXEMPTIONS: Tuple[str, ...] = ("core/spacer", "core/separator")


class LinterConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_nesting_depth: int = 10
    max_block_count: int = 1000
    max_attribute_size: int = 10000
    max_document_size: int = 0
    allowed_blocks: Tuple[str, ...] = ()
    forbidden_blocks: Tuple[str, ...] = ()
    check_empty_blocks: bool = True
    validate_namespaces: bool = True
    validate_parent_child_relationships: bool = True
    check_malformed_json: bool = True
    require_closing_tags: bool = True
    validate_json: bool = True
    core_blocks: Tuple[str, ...] = DEFAULT_CORE_BLOCKS
    parent_child_relationships: Dict[str, Tuple[str, ...]] = Field(
        default_factory=lambda: dict(DEFAULT_PARENT_CHILD_RELATIONSHIPS)
    )
    empty_block_exemptions: Tuple[str, ...] = DEFAULT_EMPTY_BLOCK_EXEMPTIONS


_NAME_LIST = {"type": "array", "items": {"type": "string"}}

CONFIG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "max_nesting_depth": {"type": "integer", "minimum": 0},
        "max_block_count": {"type": "integer", "minimum": 0},
        "max_attribute_size": {"type": "integer", "minimum": 0},
        "max_document_size": {"type": "integer", "minimum": 0},
        "allowed_blocks": _NAME_LIST,
        "forbidden_blocks": _NAME_LIST,
        "check_empty_blocks": {"type": "boolean"},
        "validate_namespaces": {"type": "boolean"},
        "validate_parent_child_relationships": {"type": "boolean"},
        "check_malformed_json": {"type": "boolean"},
        "require_closing_tags": {"type": "boolean"},
        "validate_json": {"type": "boolean"},
        "core_blocks": _NAME_LIST,
        "parent_child_relationships": {
            "type": "object",
            "additionalProperties": _NAME_LIST,
        },
        "empty_block_exemptions": _NAME_LIST,
    },
}


def config_from_mapping(data: Dict[str, Any]) -> LinterConfig:
    """Build a config from a plain mapping, keeping defaults for missing keys."""
    errors = sorted(
        Draft202012Validator(CONFIG_SCHEMA).iter_errors(data),
        key=lambda error: [str(part) for part in error.path],
    )
    if errors:
        details = "; ".join(
            f"{'/'.join(str(part) for part in error.path) or '<root>'}: {error.message}"
            for error in errors
        )
        raise ConfigError(f"invalid_config:{details}")
    known = set(LinterConfig.model_fields)
    unknown = sorted(key for key in data if key not in known)
    if unknown:
        LOGGER.warning("config_unknown_keys", extra={"keys": unknown})
    try:
        return LinterConfig(**{key: value for key, value in data.items() if key in known})
    except ValidationError as exc:
        raise ConfigError(f"invalid_config:{exc}") from exc


def load_config(path: str | Path) -> LinterConfig:
    config_path = Path(path)
    if not config_path.is_file():
        raise ConfigError(f"config_not_found:{config_path}", status_code=404)
    try:
        with open(config_path, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid_config:{exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("invalid_config:root must be a mapping")
    section = data.get("blocklint")
    if isinstance(section, dict):
        data = section
    return config_from_mapping(data)
