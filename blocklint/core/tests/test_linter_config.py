import json

import pytest
from pydantic import ValidationError

from blocklint.core.config import (
    DEFAULT_CORE_BLOCKS,
    DEFAULT_PARENT_CHILD_RELATIONSHIPS,
    LinterConfig,
    config_from_mapping,
    load_config,
)
from blocklint.core.errors import ConfigError


def test_defaults() -> None:
    config = LinterConfig()

    assert config.max_nesting_depth == 10
    assert config.max_block_count == 1000
    assert config.max_attribute_size == 10000
    assert config.max_document_size == 0
    assert config.allowed_blocks == ()
    assert config.forbidden_blocks == ()
    assert config.check_empty_blocks is True
    assert config.require_closing_tags is True
    assert len(DEFAULT_CORE_BLOCKS) == 80
    assert len(DEFAULT_PARENT_CHILD_RELATIONSHIPS) == 22
    assert config.parent_child_relationships["core/column"] == ("core/columns",)


def test_config_is_frozen() -> None:
    config = LinterConfig()

    with pytest.raises(ValidationError):
        config.max_nesting_depth = 3


def test_load_yaml_with_section(tmp_path) -> None:
    path = tmp_path / "blocklint.yaml"
    path.write_text(
        "blocklint:\n"
        "  max_nesting_depth: 4\n"
        "  forbidden_blocks:\n"
        "    - core/html\n"
        "  parent_child_relationships:\n"
        "    acme/slide:\n"
        "      - acme/slider\n"
    )

    config = load_config(path)

    assert config.max_nesting_depth == 4
    assert config.forbidden_blocks == ("core/html",)
    assert config.parent_child_relationships == {"acme/slide": ("acme/slider",)}
    assert config.max_block_count == 1000


def test_load_json_file(tmp_path) -> None:
    path = tmp_path / "blocklint.json"
    path.write_text(json.dumps({"check_empty_blocks": False, "allowed_blocks": ["core/paragraph"]}))

    config = load_config(str(path))

    assert config.check_empty_blocks is False
    assert config.allowed_blocks == ("core/paragraph",)


def test_empty_file_gives_defaults(tmp_path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("")

    assert load_config(path) == LinterConfig()


def test_missing_file(tmp_path) -> None:
    with pytest.raises(ConfigError) as excinfo:
        load_config(tmp_path / "missing.yaml")

    assert excinfo.value.status_code == 404
    assert excinfo.value.detail.startswith("config_not_found:")


def test_non_mapping_root(tmp_path) -> None:
    path = tmp_path / "list.yaml"
    path.write_text("- core/paragraph\n")

    with pytest.raises(ConfigError) as excinfo:
        load_config(path)

    assert excinfo.value.status_code == 400
    assert "root must be a mapping" in excinfo.value.detail


def test_invalid_yaml(tmp_path) -> None:
    path = tmp_path / "broken.yaml"
    path.write_text("max_nesting_depth: [1, 2\n")

    with pytest.raises(ConfigError) as excinfo:
        load_config(path)

    assert excinfo.value.detail.startswith("invalid_config:")


def test_schema_violation_names_the_field() -> None:
    with pytest.raises(ConfigError) as excinfo:
        config_from_mapping({"max_nesting_depth": "deep"})

    assert "max_nesting_depth" in excinfo.value.detail


def test_negative_limit_is_rejected() -> None:
    with pytest.raises(ConfigError):
        config_from_mapping({"max_block_count": -1})


def test_unknown_keys_are_ignored() -> None:
    config = config_from_mapping({"max_block_count": 5, "validate_context_usage": True})

    assert config.max_block_count == 5
    assert not hasattr(config, "validate_context_usage")
