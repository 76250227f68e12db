from blocklint.core.models import Block
from blocklint.core.parser import BlockParser, iter_blocks, parse_blocks, serialize_block, serialize_blocks

CANONICAL_DOC = (
    "<p>lead</p>\n"
    '<!-- wp:core/group {"layout":{"type":"flex"}} -->\n<div class="g">'
    "<!-- wp:core/paragraph -->\n<p>Hi</p>\n<!-- /wp:core/paragraph -->"
    '<!-- wp:core/image {"url":"x.png"} /-->'
    "<!-- wp:core/spacer /-->"
    "</div>\n<!-- /wp:core/group -->\n"
    "tail"
)


def test_text_without_delimiters_is_one_freeform_node() -> None:
    blocks = parse_blocks("<p>hello world</p>")

    assert blocks == [
        Block(name=None, inner_markup="<p>hello world</p>", inner_content=["<p>hello world</p>"])
    ]


def test_empty_document_has_no_nodes() -> None:
    assert parse_blocks("") == []


def test_empty_paragraph() -> None:
    blocks = parse_blocks("<!-- wp:core/paragraph --><!-- /wp:core/paragraph -->")

    assert len(blocks) == 1
    assert blocks[0].name == "core/paragraph"
    assert blocks[0].inner_markup == ""
    assert blocks[0].inner_content == []
    assert blocks[0].children == []


def test_nested_blocks_interleave_inner_content() -> None:
    doc = (
        "<!-- wp:core/columns --><div>"
        "<!-- wp:core/column -->A<!-- /wp:core/column -->"
        "</div><!-- /wp:core/columns -->"
    )
    blocks = parse_blocks(doc)

    assert [block.name for block in blocks] == ["core/columns"]
    columns = blocks[0]
    assert columns.inner_content == ["<div>", None, "</div>"]
    assert columns.inner_markup == "<div></div>"
    assert [child.name for child in columns.children] == ["core/column"]
    assert columns.children[0].inner_markup == "A"


def test_leading_and_trailing_freeform() -> None:
    blocks = parse_blocks("intro<!-- wp:core/paragraph -->P<!-- /wp:core/paragraph -->outro")

    assert [block.name for block in blocks] == [None, "core/paragraph", None]
    assert blocks[0].inner_markup == "intro"
    assert blocks[2].inner_markup == "outro"


def test_top_level_void_block_after_text() -> None:
    blocks = parse_blocks("x<!-- wp:core/spacer /-->")

    assert blocks[0].is_freeform
    assert blocks[0].inner_markup == "x"
    assert blocks[1].name == "core/spacer"
    assert blocks[1].void is True


def test_unclosed_block_extends_to_end_of_document() -> None:
    blocks = parse_blocks("<!-- wp:core/paragraph -->text")

    assert len(blocks) == 1
    assert blocks[0].name == "core/paragraph"
    assert blocks[0].inner_markup == "text"


def test_unclosed_nested_blocks_unwind_to_top_level() -> None:
    blocks = parse_blocks("<!-- wp:core/group --><!-- wp:core/paragraph -->text")

    assert [block.name for block in blocks] == ["core/paragraph", "core/group"]
    assert blocks[0].inner_markup == "text"
    assert blocks[1].children == []
    assert blocks[1].inner_markup == "<!-- wp:core/paragraph -->text"


def test_closer_without_open_block_turns_rest_into_freeform() -> None:
    doc = "a<!-- /wp:core/paragraph -->b"

    assert parse_blocks(doc) == [Block(name=None, inner_markup=doc, inner_content=[doc])]


def test_stray_closer_after_block_stops_structured_parsing() -> None:
    blocks = parse_blocks(
        "<!-- wp:core/quote -->y<!-- /wp:core/quote --><!-- /wp:core/list -->"
        "<!-- wp:core/paragraph -->tail<!-- /wp:core/paragraph -->"
    )

    assert [block.name for block in blocks] == ["core/quote", None]
    assert blocks[1].inner_markup.startswith("<!-- /wp:core/list -->")


def test_closer_name_is_not_matched_against_open_block() -> None:
    blocks = parse_blocks("<!-- wp:core/quote -->q<!-- /wp:core/list -->")

    assert [block.name for block in blocks] == ["core/quote"]
    assert blocks[0].inner_markup == "q"


def test_one_placeholder_per_child() -> None:
    for block in iter_blocks(parse_blocks(CANONICAL_DOC)):
        assert block.inner_content.count(None) == len(block.children)


def test_canonical_document_round_trips() -> None:
    blocks = parse_blocks(CANONICAL_DOC)

    assert serialize_blocks(blocks) == CANONICAL_DOC
    group = blocks[1]
    start = CANONICAL_DOC.index("<!-- wp:core/group")
    end = CANONICAL_DOC.index("<!-- /wp:core/group -->") + len("<!-- /wp:core/group -->")
    assert serialize_block(group) == CANONICAL_DOC[start:end]


def test_parser_instance_is_reusable() -> None:
    parser = BlockParser()
    parser.parse("<!-- wp:core/paragraph -->a<!-- /wp:core/paragraph -->")
    blocks = parser.parse("plain")

    assert [block.inner_markup for block in blocks] == ["plain"]
    assert parser.stack == []


def test_delimiters_are_written_back_as_in_source() -> None:
    doc = (
        "<!-- wp:paragraph -->x<!-- /wp:paragraph -->"
        '<!--  wp:core/heading   {"level": 2}  -->H<!-- /wp:heading -->'
        '<!-- wp:image { "url" : "a.png" }  /-->'
    )
    blocks = parse_blocks(doc)

    assert serialize_blocks(blocks) == doc
    assert serialize_block(blocks[0]) == "<!-- wp:paragraph -->x<!-- /wp:paragraph -->"
    assert blocks[1].attributes == {"level": 2}


def test_mismatched_closer_is_written_back_unchanged() -> None:
    doc = "<!-- wp:core/quote -->q<!-- /wp:core/list -->"

    assert serialize_blocks(parse_blocks(doc)) == doc


def test_unclosed_block_serializes_without_a_closer() -> None:
    doc = "<!-- wp:core/paragraph -->text"

    assert serialize_blocks(parse_blocks(doc)) == doc


def test_blocks_built_in_code_get_canonical_delimiters() -> None:
    block = Block(
        name="core/group",
        attributes={"tag": "section"},
        children=[Block(name="core/spacer", attributes={"height": "10px"}, void=True)],
        inner_content=["<div>", None, "</div>"],
        inner_markup="<div></div>",
    )

    assert serialize_block(block) == (
        '<!-- wp:core/group {"tag":"section"} --><div>'
        '<!-- wp:core/spacer {"height":"10px"} /-->'
        "</div><!-- /wp:core/group -->"
    )


def test_deeply_nested_tree_serializes() -> None:
    doc = "<!-- wp:core/group -->" * 5000 + "x" + "<!-- /wp:core/group -->" * 5000
    blocks = parse_blocks(doc)

    assert len(blocks) == 1
    assert serialize_block(blocks[0]) == doc
