from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

from .models import Block
from .tokenizer import Token, TokenType, next_token


@dataclass
class StackFrame:
    block: Block
    token_start: int
    token_length: int
    prev_offset: int
    leading_html_start: Optional[int] = None


def _freeform(markup: str) -> Block:
    return Block(name=None, inner_markup=markup, inner_content=[markup])


def _append_markup(block: Block, markup: str) -> None:
    if markup:
        block.inner_markup += markup
        block.inner_content.append(markup)


class BlockParser:
    """Tolerant stack machine turning a document into a list of top-level nodes.

    Malformed delimiter sequences never raise: unclosed blocks are finalized
    at the end of the document, and a closer seen with nothing open turns the
    remainder of the document into freeform text. A closer always closes the
    block on top of the stack, whatever name it carries.
    """

    def __init__(self) -> None:
        self.document = ""
        self.offset = 0
        self.output: List[Block] = []
        self.stack: List[StackFrame] = []

    def parse(self, document: str) -> List[Block]:
        self.document = document
        self.offset = 0
        self.output = []
        self.stack = []

        while self._proceed():
            continue

        return self.output

    def _proceed(self) -> bool:
        token = next_token(self.document, self.offset)
        depth = len(self.stack)
        leading_html_start = (
            self.offset if token.type is not TokenType.end and token.start > self.offset else None
        )

        if token.type is TokenType.end:
            if depth == 0:
                self._add_freeform()
            else:
                while self.stack:
                    self._add_block_from_stack()
            return False

        if token.type is TokenType.void:
            block = Block(
                name=token.name,
                attributes=token.attrs or {},
                void=True,
                opener_markup=self.document[token.start : token.end],
            )
            if depth == 0:
                if leading_html_start is not None:
                    self.output.append(
                        _freeform(self.document[leading_html_start : token.start])
                    )
                self.output.append(block)
            else:
                self._add_inner_block(block, token.start, token.length)
            self.offset = token.end
            return True

        if token.type is TokenType.opener:
            self.stack.append(
                StackFrame(
                    block=Block(
                        name=token.name,
                        attributes=token.attrs or {},
                        opener_markup=self.document[token.start : token.end],
                    ),
                    token_start=token.start,
                    token_length=token.length,
                    prev_offset=token.end,
                    leading_html_start=leading_html_start if depth == 0 else None,
                )
            )
            self.offset = token.end
            return True

        # closer
        if depth == 0:
            self._add_freeform()
            return False

        self.stack[-1].block.closer_markup = self.document[token.start : token.end]

        if depth == 1:
            self._add_block_from_stack(token.start)
            self.offset = token.end
            return True

        stack_top = self.stack.pop()
        _append_markup(stack_top.block, self.document[stack_top.prev_offset : token.start])
        stack_top.prev_offset = token.end
        self._add_inner_block(
            stack_top.block, stack_top.token_start, stack_top.token_length, token.end
        )
        self.offset = token.end
        return True

    def _add_freeform(self) -> None:
        if self.offset >= len(self.document):
            return
        self.output.append(_freeform(self.document[self.offset :]))

    def _add_inner_block(
        self,
        block: Block,
        token_start: int,
        token_length: int,
        last_offset: Optional[int] = None,
    ) -> None:
        parent = self.stack[-1]
        parent.block.children.append(block)
        _append_markup(parent.block, self.document[parent.prev_offset : token_start])
        parent.block.inner_content.append(None)
        parent.prev_offset = last_offset if last_offset is not None else token_start + token_length

    def _add_block_from_stack(self, end_offset: Optional[int] = None) -> None:
        stack_top = self.stack.pop()
        if end_offset is None:
            markup = self.document[stack_top.prev_offset :]
        else:
            markup = self.document[stack_top.prev_offset : end_offset]
        _append_markup(stack_top.block, markup)

        if stack_top.leading_html_start is not None:
            self.output.append(
                _freeform(self.document[stack_top.leading_html_start : stack_top.token_start])
            )

        self.output.append(stack_top.block)


def parse_blocks(document: str) -> List[Block]:
    return BlockParser().parse(document)


def iter_blocks(blocks: List[Block]):
    """Yield every named block in document order, parents before children."""
    pending = list(reversed(blocks))
    while pending:
        block = pending.pop()
        if not block.is_freeform:
            yield block
        pending.extend(reversed(block.children))


def _encode_attributes(attributes: Dict[str, Any]) -> str:
    return json.dumps(attributes, separators=(",", ":"), ensure_ascii=False)


def _delimiters(block: Block) -> Tuple[str, str]:
    if block.opener_markup is not None:
        return block.opener_markup, block.closer_markup or ""

    attrs = f"{_encode_attributes(block.attributes)} " if block.attributes else ""
    if block.void:
        return f"<!-- wp:{block.name} {attrs}/-->", ""
    return f"<!-- wp:{block.name} {attrs}-->", f"<!-- /wp:{block.name} -->"


def serialize_blocks(blocks: List[Block]) -> str:
    """Write blocks back out.

    Parsed blocks reuse their delimiter text as written, so a document
    reproduces its source exactly. Blocks built in code get canonical
    delimiters with compact JSON attributes.
    """
    parts: List[str] = []
    pending: List[Union[str, Block]] = list(reversed(blocks))
    while pending:
        item = pending.pop()
        if isinstance(item, str):
            parts.append(item)
            continue
        if item.is_freeform:
            parts.append(item.inner_markup)
            continue

        opener, closer = _delimiters(item)
        parts.append(opener)
        children = iter(item.children)
        body = [next(children) if chunk is None else chunk for chunk in item.inner_content]
        pending.append(closer)
        pending.extend(reversed(body))
    return "".join(parts)


def serialize_block(block: Block) -> str:
    return serialize_blocks([block])
