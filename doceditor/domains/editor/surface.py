"""Поверхность ввода: компонент, который владеет деревом содержимого во время редактирования.

Контроллер управляет ей через команды и получает уведомление на каждое изменение
дерева. ``HeadlessEditor`` - реализация без интерфейса, работающая в процессе.
"""
import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple

from doceditor.domains.editor.commands import (
    FormattingCommand, History, SetAlignment, SetBlock, ToggleMark
)
from doceditor.domains.editor.content import (
    ContentNode, ContentTree, Mark, inline_text, iter_textblocks, plain_text, serialize
)
from doceditor.domains.editor.exceptions import EditorStateError

logger = logging.getLogger(__name__)

UpdateListener = Callable[["InputSurface"], None]

_BLOCK_NODE_TYPES = {
    "paragraph": "paragraph",
    "heading": "heading",
    "quote": "blockquote",
    "code": "codeBlock",
    "bullet_list": "bulletList",
    "ordered_list": "orderedList",
}


class InputSurface(ABC):
    """Контракт поверхности ввода"""

    def __init__(self):
        self._listeners: List[UpdateListener] = []

    def on_update(self, listener: UpdateListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: UpdateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit_update(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    @abstractmethod
    def initialize(self, tree: ContentTree) -> None:
        """Заполнение поверхности деревом без уведомления об изменении"""

    @abstractmethod
    def select(self, start: int, end: Optional[int] = None) -> None:
        """Выделение блоков верхнего уровня с start по end включительно"""

    @abstractmethod
    def replace_content(self, tree: ContentTree) -> None:
        """Правка пользователя; всегда сопровождается уведомлением"""

    @abstractmethod
    def apply(self, command: FormattingCommand) -> bool:
        """Выполнение команды; возвращает активность команды после выполнения"""

    @abstractmethod
    def is_active(self, command: FormattingCommand) -> bool:
        ...

    @abstractmethod
    def get_tree(self) -> ContentTree:
        ...

    @abstractmethod
    def get_serialized_tree(self) -> str:
        ...

    @abstractmethod
    def get_plain_text(self) -> str:
        ...


class HeadlessEditor(InputSurface):
    """Редактор без интерфейса: дерево, выделение по блокам верхнего уровня и история"""

    def __init__(self):
        super().__init__()
        self._tree: Optional[ContentTree] = None
        self._undo: List[ContentTree] = []
        self._redo: List[ContentTree] = []
        self._selection: Tuple[int, int] = (0, 0)

    @property
    def initialized(self) -> bool:
        return self._tree is not None

    @property
    def selection(self) -> Tuple[int, int]:
        return self._selection

    def initialize(self, tree: ContentTree) -> None:
        self._tree = tree.model_copy(deep=True)
        self._undo.clear()
        self._redo.clear()
        self._selection = (0, 0)

    def replace_content(self, tree: ContentTree) -> None:
        """Правка пользователя: дерево заменяется целиком"""
        current = self._require_tree()
        if tree.type != "doc":
            raise ValueError(f"Root node must be 'doc', got '{tree.type}'")
        self._commit(current, tree.model_copy(deep=True))

    def select(self, start: int, end: Optional[int] = None) -> None:
        blocks = self._require_tree().content or []
        end = start if end is None else end
        if start > end:
            start, end = end, start
        if start < 0 or end >= len(blocks):
            raise IndexError(f"Selection {start}..{end} is outside of {len(blocks)} blocks")
        self._selection = (start, end)

    def apply(self, command: FormattingCommand) -> bool:
        current = self._require_tree()

        if isinstance(command, History):
            self._step_history(command.action)
            return self.is_active(command)

        updated = current.model_copy(deep=True)
        if isinstance(command, ToggleMark):
            self._toggle_mark(updated, command)
        elif isinstance(command, SetBlock):
            self._set_block(updated, command)
        elif isinstance(command, SetAlignment):
            self._set_alignment(updated, command)
        else:
            raise TypeError(f"Unsupported command: {command!r}")

        if updated != current:
            self._commit(current, updated)
        return self.is_active(command)

    def is_active(self, command: FormattingCommand) -> bool:
        tree = self._require_tree()

        if isinstance(command, History):
            return bool(self._undo) if command.action == "undo" else bool(self._redo)

        blocks = self._selected_blocks(tree)
        if isinstance(command, ToggleMark):
            text_nodes = [node for block in blocks for node in self._markable_text(block)]
            return bool(text_nodes) and all(command.mark in node.mark_types() for node in text_nodes)
        if isinstance(command, SetBlock):
            return bool(blocks) and all(self._block_matches(block, command) for block in blocks)
        if isinstance(command, SetAlignment):
            textblocks = [tb for block in blocks for tb in self._alignable(block)]
            return bool(textblocks) and all(
                (tb.attrs or {}).get("textAlign", "left") == command.align for tb in textblocks
            )
        raise TypeError(f"Unsupported command: {command!r}")

    def get_tree(self) -> ContentTree:
        return self._require_tree().model_copy(deep=True)

    def get_serialized_tree(self) -> str:
        return serialize(self._require_tree())

    def get_plain_text(self) -> str:
        return plain_text(self._require_tree())

    def _require_tree(self) -> ContentTree:
        if self._tree is None:
            raise EditorStateError("Input surface is not initialized")
        return self._tree

    def _commit(self, previous: ContentTree, updated: ContentTree) -> None:
        self._undo.append(previous)
        self._redo.clear()
        self._tree = updated
        self._clamp_selection()
        self._emit_update()

    def _step_history(self, action: str) -> None:
        source, target = (self._undo, self._redo) if action == "undo" else (self._redo, self._undo)
        if not source:
            return
        target.append(self._tree)
        self._tree = source.pop()
        self._clamp_selection()
        logger.debug(f"History {action}, {len(self._undo)} undo / {len(self._redo)} redo steps left")
        self._emit_update()

    def _clamp_selection(self) -> None:
        last = max(len(self._tree.content or []) - 1, 0)
        start, end = self._selection
        self._selection = (min(start, last), min(end, last))

    def _selected_blocks(self, tree: ContentTree) -> List[ContentNode]:
        start, end = self._selection
        return (tree.content or [])[start:end + 1]

    @staticmethod
    def _markable_text(block: ContentNode) -> List[ContentNode]:
        return [
            node
            for tb in iter_textblocks(block)
            if tb.type != "codeBlock"
            for node in tb.content or []
            if node.type == "text"
        ]

    @staticmethod
    def _alignable(block: ContentNode) -> List[ContentNode]:
        return [tb for tb in iter_textblocks(block) if tb.type != "codeBlock"]

    @staticmethod
    def _block_matches(block: ContentNode, command: SetBlock) -> bool:
        if block.type != _BLOCK_NODE_TYPES[command.block]:
            return False
        if command.block == "heading":
            return (block.attrs or {}).get("level", 1) == command.level
        return True

    def _toggle_mark(self, tree: ContentTree, command: ToggleMark) -> None:
        remove = self.is_active(command)
        for block in self._selected_blocks(tree):
            for node in self._markable_text(block):
                if remove:
                    node.marks = [m for m in node.marks or [] if m.type != command.mark] or None
                elif command.mark not in node.mark_types():
                    node.marks = (node.marks or []) + [Mark(type=command.mark)]

    def _set_alignment(self, tree: ContentTree, command: SetAlignment) -> None:
        for block in self._selected_blocks(tree):
            for tb in self._alignable(block):
                attrs = dict(tb.attrs or {})
                attrs["textAlign"] = command.align
                tb.attrs = attrs

    def _set_block(self, tree: ContentTree, command: SetBlock) -> None:
        start, end = self._selection
        blocks = tree.content or []
        for index in range(start, min(end, len(blocks) - 1) + 1):
            if not self._block_matches(blocks[index], command):
                blocks[index] = _convert_block(blocks[index], command)


def _collect_inline(block: ContentNode) -> List[ContentNode]:
    """Inline-содержимое блока; несколько текстовых блоков склеиваются через перенос строки"""
    inline: List[ContentNode] = []
    for index, tb in enumerate(iter_textblocks(block)):
        if index and inline:
            inline.append(ContentNode(type="hardBreak"))
        inline.extend(node.model_copy(deep=True) for node in tb.content or [])
    return inline


def _convert_block(block: ContentNode, command: SetBlock) -> ContentNode:
    inline = _collect_inline(block)
    first = next(iter_textblocks(block), None)
    align = (first.attrs or {}).get("textAlign") if first is not None else None
    align_attrs = {"textAlign": align} if align else {}

    para = ContentNode(type="paragraph", attrs=align_attrs or None, content=inline or None)

    if command.block == "paragraph":
        return para
    if command.block == "heading":
        return ContentNode(
            type="heading", attrs={**align_attrs, "level": command.level}, content=inline or None
        )
    if command.block == "code":
        text = inline_text(ContentNode(type="paragraph", content=inline or None))
        return ContentNode(
            type="codeBlock", content=[ContentNode(type="text", text=text)] if text else None
        )
    if command.block == "quote":
        return ContentNode(type="blockquote", content=[para])
    item = ContentNode(type="listItem", content=[para])
    return ContentNode(type=_BLOCK_NODE_TYPES[command.block], content=[item])
