"""Дерево содержимого документа.

Формат совместим с JSON, который отдает редактор на базе ProseMirror/Tiptap:
узел ``doc`` содержит блочные узлы, текстовые блоки содержат inline-узлы,
форматирование хранится в ``marks`` текстовых узлов.
"""
import html
import json
from typing import Any, Dict, Iterator, List, Literal, Optional

from pydantic import BaseModel, ValidationError, model_validator

from doceditor.domains.editor.exceptions import SerializationError

NodeType = Literal[
    "doc",
    "paragraph",
    "heading",
    "bulletList",
    "orderedList",
    "listItem",
    "blockquote",
    "codeBlock",
    "horizontalRule",
    "text",
    "hardBreak",
]
MarkType = Literal["bold", "italic", "underline", "code", "strike"]

TEXTBLOCK_TYPES = {"paragraph", "heading", "codeBlock"}
INLINE_TYPES = {"text", "hardBreak"}
LEAF_TYPES = {"text", "hardBreak", "horizontalRule"}
ALIGNMENTS = {"left", "center", "right", "justify"}

BLOCK_SEPARATOR = "\n\n"

_MARK_TAGS = {
    "bold": "strong",
    "italic": "em",
    "underline": "u",
    "code": "code",
    "strike": "s",
}


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class Mark(BaseModel):
    type: MarkType
    attrs: Optional[Dict[str, Any]] = None


class ContentNode(BaseModel):
    """Узел дерева содержимого"""
    type: NodeType
    attrs: Optional[Dict[str, Any]] = None
    content: Optional[List["ContentNode"]] = None
    marks: Optional[List[Mark]] = None
    text: Optional[str] = None

    @model_validator(mode="after")
    def check_structure(self) -> "ContentNode":
        if self.type == "text":
            if not self.text:
                raise ValueError("Text node must carry non-empty text")
        else:
            if self.text is not None:
                raise ValueError(f"'{self.type}' node cannot carry text")
            if self.marks:
                raise ValueError(f"'{self.type}' node cannot carry marks")

        if self.type in LEAF_TYPES and self.content:
            raise ValueError(f"'{self.type}' node cannot have children")

        for child in self.content or []:
            if child.type == "doc":
                raise ValueError("'doc' node can only be the root")
            if self.type in TEXTBLOCK_TYPES and child.type not in INLINE_TYPES:
                raise ValueError(f"'{self.type}' node can only contain inline nodes")
            if self.type not in TEXTBLOCK_TYPES and child.type in INLINE_TYPES:
                raise ValueError(f"'{self.type}' node can only contain block nodes")

        attrs = self.attrs or {}
        if self.type == "heading":
            level = attrs.get("level", 1)
            if not _is_int(level) or not 1 <= level <= 6:
                raise ValueError("Heading level must be between 1 and 6")
        if self.type == "orderedList":
            start = attrs.get("start", 1)
            if not _is_int(start) or start < 1:
                raise ValueError("Ordered list start must be a positive integer")
        align = attrs.get("textAlign")
        if align is not None and align not in ALIGNMENTS:
            raise ValueError(f"Unsupported text alignment: {align}")
        return self

    @property
    def is_textblock(self) -> bool:
        return self.type in TEXTBLOCK_TYPES

    def mark_types(self) -> List[str]:
        return [mark.type for mark in self.marks or []]


ContentTree = ContentNode


def paragraph(text: str = "", **attrs) -> ContentNode:
    content = [ContentNode(type="text", text=text)] if text else None
    return ContentNode(type="paragraph", attrs=attrs or None, content=content)


def make_document(*blocks: ContentNode) -> ContentTree:
    return ContentNode(type="doc", content=list(blocks))


def placeholder_tree(text: str) -> ContentTree:
    """Каноническое дерево, которым заменяется пустое содержимое при загрузке"""
    return make_document(paragraph(text))


def serialize(tree: ContentTree) -> str:
    """Сериализация дерева в строку для хранилища"""
    if tree.type != "doc":
        raise SerializationError(f"Root node must be 'doc', got '{tree.type}'")
    try:
        return json.dumps(tree.model_dump(exclude_none=True), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Content tree is not serializable: {e}") from e


def deserialize(raw: str) -> ContentTree:
    """Разбор сохраненной строки обратно в дерево"""
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Stored content is not valid JSON: {e}") from e

    try:
        tree = ContentNode.model_validate(data)
    except ValidationError as e:
        raise SerializationError(f"Stored content is not a valid content tree: {e}") from e

    if tree.type != "doc":
        raise SerializationError(f"Root node must be 'doc', got '{tree.type}'")
    return tree


def iter_textblocks(node: ContentNode) -> Iterator[ContentNode]:
    """Текстовые блоки дерева в порядке документа"""
    if node.is_textblock:
        yield node
        return
    for child in node.content or []:
        yield from iter_textblocks(child)


def inline_text(block: ContentNode) -> str:
    parts = []
    for child in block.content or []:
        if child.type == "text":
            parts.append(child.text)
        elif child.type == "hardBreak":
            parts.append("\n")
    return "".join(parts)


def plain_text(tree: ContentTree) -> str:
    """Текстовая проекция дерева: текстовые блоки через пустую строку, без разметки"""
    return BLOCK_SEPARATOR.join(inline_text(block) for block in iter_textblocks(tree))


def _render_inline(node: ContentNode) -> str:
    if node.type == "hardBreak":
        return "<br>"
    rendered = html.escape(node.text, quote=False)
    for mark in reversed(node.marks or []):
        tag = _MARK_TAGS[mark.type]
        rendered = f"<{tag}>{rendered}</{tag}>"
    return rendered


def _align_style(node: ContentNode) -> str:
    align = (node.attrs or {}).get("textAlign")
    if align and align != "left":
        return f' style="text-align: {align}"'
    return ""


def render_html(node: ContentNode) -> str:
    """HTML-представление дерева для экспорта"""
    if node.type in INLINE_TYPES:
        return _render_inline(node)

    inner = "".join(render_html(child) for child in node.content or [])
    attrs = node.attrs or {}

    if node.type == "doc":
        return inner
    if node.type == "paragraph":
        return f"<p{_align_style(node)}>{inner}</p>"
    if node.type == "heading":
        level = attrs.get("level", 1)
        return f"<h{level}{_align_style(node)}>{inner}</h{level}>"
    if node.type == "bulletList":
        return f"<ul>{inner}</ul>"
    if node.type == "orderedList":
        start = int(attrs.get("start", 1))
        start_attr = f' start="{start}"' if start != 1 else ""
        return f"<ol{start_attr}>{inner}</ol>"
    if node.type == "listItem":
        return f"<li>{inner}</li>"
    if node.type == "blockquote":
        return f"<blockquote>{inner}</blockquote>"
    if node.type == "codeBlock":
        language = attrs.get("language")
        class_attr = f' class="language-{html.escape(str(language))}"' if language else ""
        return f"<pre><code{class_attr}>{html.escape(inline_text(node), quote=False)}</code></pre>"
    if node.type == "horizontalRule":
        return "<hr>"
    raise SerializationError(f"Cannot render node of type '{node.type}'")
