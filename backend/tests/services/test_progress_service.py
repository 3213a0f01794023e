"""Tests for ProgressService: advance, recompute and feedback."""
from unittest.mock import AsyncMock

import pytest

from app.core.exceptions import RecordNotFoundError, StorageError
from app.domain.enums import Feedback, FeynmanStep, MessageRole
from app.schemas.entities import MessageCreate
from app.services.progress_service import ProgressService

pytestmark = pytest.mark.unit


@pytest.mark.asyncio
async def test_good_feedback_on_explain_advances(storage, teaching_session):
    """User teaches Newton's law, approves the AI reply, session moves to review."""
    sid = teaching_session.id
    await storage.create_message(
        MessageCreate(session_id=sid, role=MessageRole.USER, content="teach me Newton's law")
    )
    await storage.create_message(
        MessageCreate(session_id=sid, role=MessageRole.AI, content="...", feynman_step=FeynmanStep.EXPLAIN)
    )

    result = await ProgressService(storage).record_feedback(sid, Feedback.GOOD, "...")

    assert result.advanced is True
    assert result.progress.current_step == FeynmanStep.REVIEW
    assert FeynmanStep.EXPLAIN in result.progress.steps_completed
    assert result.notice.title == "Good Explanation"

    stored = await storage.get_session(sid)
    assert stored.current_step == FeynmanStep.REVIEW
    assert stored.steps_completed == [FeynmanStep.EXPLAIN]


@pytest.mark.asyncio
async def test_good_feedback_after_explain_changes_nothing(storage, teaching_session):
    await storage.update_session(teaching_session.id, {"current_step": FeynmanStep.SIMPLIFY})

    result = await ProgressService(storage).record_feedback(teaching_session.id, Feedback.GOOD)

    assert result.advanced is False
    assert result.progress.current_step == FeynmanStep.SIMPLIFY


@pytest.mark.asyncio
async def test_confused_feedback_is_informational(storage, teaching_session):
    result = await ProgressService(storage).record_feedback(teaching_session.id, Feedback.CONFUSED, "huh?")

    assert result.advanced is False
    assert result.notice.title == "Still Confused"
    assert (await storage.get_session(teaching_session.id)).current_step == FeynmanStep.EXPLAIN


@pytest.mark.asyncio
async def test_advance_to_completion(storage, teaching_session):
    service = ProgressService(storage)
    for _ in range(4):
        result = await service.advance(teaching_session.id)

    assert result.persisted is True
    assert result.progress.current_step == FeynmanStep.ANALOGIZE
    assert result.progress.all_complete is True
    assert result.progress.percent == 100
    assert result.notice.title == "Feynman Process Completed"


@pytest.mark.asyncio
async def test_advance_retains_state_when_persistence_fails(storage, teaching_session):
    storage.update_session = AsyncMock(side_effect=StorageError("disk full"))

    result = await ProgressService(storage).advance(teaching_session.id)

    assert result.persisted is False
    assert result.error == "disk full"
    assert result.progress.current_step == FeynmanStep.REVIEW
    assert result.confirmed.current_step == FeynmanStep.EXPLAIN


@pytest.mark.asyncio
async def test_advance_unknown_session(storage):
    with pytest.raises(RecordNotFoundError):
        await ProgressService(storage).advance(999)


@pytest.mark.asyncio
async def test_recompute_persists_transcript_state(storage, teaching_session):
    sid = teaching_session.id
    for step in (FeynmanStep.EXPLAIN, FeynmanStep.REVIEW, FeynmanStep.SIMPLIFY):
        await storage.create_message(
            MessageCreate(session_id=sid, role=MessageRole.AI, content=step.value, feynman_step=step)
        )

    service = ProgressService(storage)
    first = await service.recompute(sid)
    second = await service.recompute(sid)

    assert first == second
    assert first.current_step == FeynmanStep.SIMPLIFY
    assert first.steps_completed == [FeynmanStep.EXPLAIN, FeynmanStep.REVIEW, FeynmanStep.SIMPLIFY]
    assert (await storage.get_session(sid)).current_step == FeynmanStep.SIMPLIFY


@pytest.mark.asyncio
async def test_snapshot_steps_view(storage, teaching_session):
    snapshot = await ProgressService(storage).snapshot(teaching_session.id)

    assert snapshot.session_id == teaching_session.id
    assert [s.id for s in snapshot.steps] == list(FeynmanStep)
    assert snapshot.percent == 0


@pytest.mark.asyncio
async def test_recompute_after_feedback_keeps_advanced_step(storage, teaching_session):
    """The explain-tagged reply that earned "good" must not pull the session back."""
    sid = teaching_session.id
    await storage.create_message(
        MessageCreate(session_id=sid, role=MessageRole.AI, content="...", feynman_step=FeynmanStep.EXPLAIN)
    )
    service = ProgressService(storage)

    await service.record_feedback(sid, Feedback.GOOD, "...")
    progress = await service.recompute(sid)

    assert progress.current_step == FeynmanStep.REVIEW
    assert progress.steps_completed == [FeynmanStep.EXPLAIN]
    assert (await storage.get_session(sid)).current_step == FeynmanStep.REVIEW


@pytest.mark.asyncio
async def test_recompute_after_advance_keeps_advanced_step(storage, teaching_session):
    sid = teaching_session.id
    await storage.create_message(
        MessageCreate(session_id=sid, role=MessageRole.AI, content="...", feynman_step=FeynmanStep.EXPLAIN)
    )
    service = ProgressService(storage)

    await service.advance(sid)
    await service.advance(sid)
    progress = await service.recompute(sid)

    assert progress.current_step == FeynmanStep.SIMPLIFY
    assert progress.steps_completed == [FeynmanStep.EXPLAIN, FeynmanStep.REVIEW]
