from doceditor.domains.editor.entities import (
    DocumentRecord, DocumentMetrics, EditorContext, ErrorKind, SessionSnapshot,
    SessionState, SessionStatus, StatusReport, Theme, ViewFlags
)
from doceditor.domains.editor.exceptions import (
    EditorError, LoadError, TitleCommitError, ContentCommitError,
    SerializationError, EditorStateError
)
from doceditor.domains.editor.commands import (
    FormattingCommand, ToggleMark, SetBlock, SetAlignment, History, parse_command
)
from doceditor.domains.editor.content import ContentNode, ContentTree, serialize, deserialize, plain_text
from doceditor.domains.editor.controller import DocumentSessionController
from doceditor.domains.editor.surface import InputSurface, HeadlessEditor
from doceditor.domains.editor.store import DocumentStore

__all__ = [
    "DocumentRecord", "DocumentMetrics", "EditorContext", "ErrorKind", "SessionSnapshot",
    "SessionState", "SessionStatus", "StatusReport", "Theme", "ViewFlags",
    "EditorError", "LoadError", "TitleCommitError", "ContentCommitError",
    "SerializationError", "EditorStateError",
    "FormattingCommand", "ToggleMark", "SetBlock", "SetAlignment", "History", "parse_command",
    "ContentNode", "ContentTree", "serialize", "deserialize", "plain_text",
    "DocumentSessionController",
    "InputSurface", "HeadlessEditor",
    "DocumentStore",
]
