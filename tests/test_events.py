"""Tests for workflow events."""

from __future__ import annotations

import pytest

from litestar_chatflows.core.context import utcnow
from litestar_chatflows.core.definition import WorkflowDefinition
from litestar_chatflows.core.events import (
    HandlerFailed,
    StateEntered,
    StateExited,
    ValidationFailed,
    WorkflowCancelled,
    WorkflowCompleted,
    WorkflowEvent,
    WorkflowFailed,
    WorkflowPaused,
    WorkflowResumed,
    WorkflowStarted,
)
from litestar_chatflows.engine.engine import WorkflowEngine
from litestar_chatflows.engine.registry import WorkflowRegistry
from litestar_chatflows.store.memory import InMemoryContextStore


@pytest.mark.unit
class TestWorkflowEvents:
    """Tests for event types and payloads."""

    @pytest.mark.parametrize(
        ("event_class", "event_type"),
        [
            (WorkflowStarted, "workflow.started"),
            (WorkflowCompleted, "workflow.completed"),
            (WorkflowCancelled, "workflow.cancelled"),
            (WorkflowFailed, "workflow.failed"),
            (WorkflowPaused, "workflow.paused"),
            (WorkflowResumed, "workflow.resumed"),
            (StateEntered, "state.entered"),
            (StateExited, "state.exited"),
            (ValidationFailed, "validation.failed"),
            (HandlerFailed, "handler.failed"),
        ],
    )
    def test_event_types(self, event_class: type[WorkflowEvent], event_type: str) -> None:
        """Test every event carries its dotted type."""
        assert event_class.event_type == event_type
        assert issubclass(event_class, WorkflowEvent)

    def test_payload(self) -> None:
        """Test the payload holds every field but not the event type."""
        timestamp = utcnow()
        event = StateEntered(
            user_id="237690000000",
            workflow_id="name_collection",
            timestamp=timestamp,
            state_id="validate_name",
            previous_state="ask_name",
        )

        assert event.payload() == {
            "user_id": "237690000000",
            "workflow_id": "name_collection",
            "timestamp": timestamp,
            "state_id": "validate_name",
            "previous_state": "ask_name",
        }

    def test_optional_fields(self) -> None:
        """Test optional fields default to None."""
        event = WorkflowFailed(user_id="u", workflow_id="w", timestamp=utcnow(), error="timeout")
        assert event.failed_state is None


@pytest.mark.unit
@pytest.mark.asyncio
class TestEngineWithoutEventBus:
    """Tests for an engine without an event bus."""

    async def test_runs_without_bus(self, survey_workflow: WorkflowDefinition, user_id: str) -> None:
        """Test events are dropped silently when no bus is configured."""
        engine = WorkflowEngine(WorkflowRegistry(), InMemoryContextStore())
        engine.register_workflow(survey_workflow)
        context = await engine.start_workflow(user_id, "survey")

        result = await engine.execute_until_input(user_id, context, "hi")

        assert result.message == "What is your name?"
