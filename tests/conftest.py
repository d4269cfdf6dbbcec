"""Shared fixtures for editing session tests."""
import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock

import pytest

from doceditor.domains.editor.content import make_document, paragraph, serialize
from doceditor.domains.editor.entities import DocumentRecord

CREATED_AT = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)
UPDATED_AT = datetime(2024, 3, 5, 18, 0, tzinfo=timezone.utc)
SAVED_AT = datetime(2024, 3, 6, 12, 0, tzinfo=timezone.utc)


def make_record(**overrides) -> DocumentRecord:
    """Return a document record, merged with *overrides*."""
    base = {
        "id": uuid.uuid4(),
        "title": "Draft",
        "content": "",
        "created_at": CREATED_AT,
        "updated_at": UPDATED_AT,
        "project_id": uuid.uuid4(),
        "owner_id": uuid.uuid4(),
    }
    base.update(overrides)
    return DocumentRecord(**base)


@pytest.fixture
def record():
    return make_record()


@pytest.fixture
def filled_record():
    tree = make_document(paragraph("Existing body text"), paragraph("Second block"))
    return make_record(content=serialize(tree))


@pytest.fixture
def mock_store(record):
    """Mock document store: get returns the record, every write succeeds."""
    store = Mock()
    store.get = AsyncMock(return_value=record)
    store.update_title = AsyncMock(return_value=SAVED_AT)
    store.update_content = AsyncMock(return_value=SAVED_AT)
    store.create = AsyncMock(return_value=record)
    store.list_by_project = AsyncMock(return_value=[record])
    return store
