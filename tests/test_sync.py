"""
ContentSyncEngine Tests

Every change notification serializes the tree, refreshes metrics and fires
one independent write; writes are neither queued nor coalesced.
"""

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from doceditor.domains.editor.content import make_document, paragraph, serialize
from doceditor.domains.editor.entities import ErrorKind, SessionState
from doceditor.domains.editor.exceptions import SerializationError
from doceditor.domains.editor.surface import HeadlessEditor
from doceditor.domains.editor.sync import ContentSyncEngine


@pytest.fixture
def state():
    return SessionState()


@pytest.fixture
def surface():
    editor = HeadlessEditor()
    editor.initialize(make_document(paragraph("start")))
    return editor


class TestContentSyncEngine:
    @pytest.mark.asyncio
    async def test_each_change_fires_one_write(self, state, surface):
        commit = AsyncMock(return_value=True)
        engine = ContentSyncEngine(state, commit)
        engine.attach(surface)

        surface.replace_content(make_document(paragraph("a")))
        surface.replace_content(make_document(paragraph("a b")))
        surface.replace_content(make_document(paragraph("a b c")))
        await engine.wait_for_pending_writes()

        assert commit.await_count == 3
        assert commit.await_args.args[0] == serialize(make_document(paragraph("a b c")))
        assert state.metrics.word_count == 3
        assert engine.pending_writes == 0

    @pytest.mark.asyncio
    async def test_writes_do_not_wait_for_each_other(self, state, surface):
        first_started = asyncio.Event()
        release_first = asyncio.Event()
        completed = []

        async def commit(serialized):
            if not first_started.is_set():
                first_started.set()
                await release_first.wait()
            completed.append(serialized)
            return True

        engine = ContentSyncEngine(state, commit)
        engine.attach(surface)

        surface.replace_content(make_document(paragraph("older")))
        surface.replace_content(make_document(paragraph("newer")))
        await asyncio.sleep(0)
        await asyncio.sleep(0)

        assert engine.pending_writes == 1
        assert completed == [serialize(make_document(paragraph("newer")))]

        release_first.set()
        await engine.wait_for_pending_writes()
        assert completed[-1] == serialize(make_document(paragraph("older")))

    @pytest.mark.asyncio
    async def test_serialization_error_blocks_only_that_write(self, state):
        commit = AsyncMock(return_value=True)
        engine = ContentSyncEngine(state, commit)
        broken = Mock()
        broken.get_serialized_tree.side_effect = SerializationError("cannot serialize")
        broken.get_plain_text.return_value = "still counted"

        engine.handle_update(broken)
        await engine.wait_for_pending_writes()

        commit.assert_not_awaited()
        assert state.last_error.kind == ErrorKind.SERIALIZATION
        assert state.metrics.word_count == 2

    @pytest.mark.asyncio
    async def test_detach_stops_writes(self, state, surface):
        commit = AsyncMock(return_value=True)
        engine = ContentSyncEngine(state, commit)
        engine.attach(surface)
        engine.detach()

        surface.replace_content(make_document(paragraph("ignored")))
        await engine.wait_for_pending_writes()

        commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_reattach_moves_to_new_surface(self, state, surface):
        commit = AsyncMock(return_value=True)
        engine = ContentSyncEngine(state, commit)
        engine.attach(surface)

        other = HeadlessEditor()
        other.initialize(make_document())
        engine.attach(other)

        surface.replace_content(make_document(paragraph("old surface")))
        other.replace_content(make_document(paragraph("new surface")))
        await engine.wait_for_pending_writes()

        assert commit.await_count == 1
        assert commit.await_args.args[0] == serialize(make_document(paragraph("new surface")))

    def test_change_outside_event_loop_is_reported(self, state, surface):
        commit = AsyncMock(return_value=True)
        engine = ContentSyncEngine(state, commit)
        engine.attach(surface)

        surface.replace_content(make_document(paragraph("offline edit")))

        commit.assert_not_called()
        assert engine.pending_writes == 0
        assert state.last_error.kind == ErrorKind.CONTENT_COMMIT
        assert state.metrics.word_count == 2
        assert surface.get_plain_text() == "offline edit"
