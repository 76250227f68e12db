from blocklint.core.tokenizer import END_TOKEN, TokenType, decode_attributes, next_token


def test_opener_defaults_to_core_namespace() -> None:
    doc = "<!-- wp:paragraph -->"
    token = next_token(doc, 0)

    assert token.type == TokenType.opener
    assert token.name == "core/paragraph"
    assert token.attrs == {}
    assert token.start == 0
    assert token.length == len(doc)


def test_void_token_with_attributes() -> None:
    token = next_token('<!-- wp:core/image {"url":"x.png"} /-->')

    assert token.type == TokenType.void
    assert token.name == "core/image"
    assert token.attrs == {"url": "x.png"}


def test_closer_with_custom_namespace() -> None:
    token = next_token("text <!-- /wp:my-plugin/card -->")

    assert token.type == TokenType.closer
    assert token.name == "my-plugin/card"
    assert token.attrs is None
    assert token.start == 5


def test_search_starts_at_offset() -> None:
    doc = "a<!-- wp:core/quote -->b<!-- /wp:core/quote -->"
    token = next_token(doc, 2)

    assert token.type == TokenType.closer
    assert token.start == doc.index("<!-- /wp:core/quote")
    assert token.end == len(doc)


def test_no_delimiter_returns_end_token() -> None:
    assert next_token("<p>plain html</p>") == END_TOKEN
    assert next_token("<!-- wp:core/paragraph-->") == END_TOKEN
    assert next_token("<!-- wp:core/paragraph -->", 1) == END_TOKEN


def test_malformed_attributes_decode_to_empty_mapping() -> None:
    token = next_token("<!-- wp:core/foo {bad json} -->")

    assert token.type == TokenType.opener
    assert token.name == "core/foo"
    assert token.attrs == {}


def test_nested_attribute_objects() -> None:
    token = next_token('<!-- wp:core/group {"style":{"color":{"text":"red"}}} -->')

    assert token.type == TokenType.opener
    assert token.attrs == {"style": {"color": {"text": "red"}}}


def test_unterminated_payload_is_not_a_token() -> None:
    doc = "<!-- wp:core/paragraph {" + "x" * 50000

    assert next_token(doc) == END_TOKEN


def test_decode_attributes_rejects_non_objects() -> None:
    assert decode_attributes(None) == {}
    assert decode_attributes("[1, 2]") == {}
    assert decode_attributes('{"level": 2}') == {"level": 2}


def test_integer_beyond_conversion_limit_decodes_to_empty_mapping() -> None:
    token = next_token('<!-- wp:core/heading {"level":' + "9" * 5000 + "} -->")

    assert token.type == TokenType.opener
    assert token.attrs == {}
