"""Tests for the workflow engine."""

from __future__ import annotations

import asyncio
from datetime import timedelta
from typing import TYPE_CHECKING

import pytest

from litestar_chatflows.core.context import WorkflowContext, utcnow
from litestar_chatflows.core.definition import State, Transition, WorkflowDefinition
from litestar_chatflows.core.results import HandlerFailure, HandlerResult, HandlerSuccess
from litestar_chatflows.core.types import StateType, ValidationType, WorkflowStatus
from litestar_chatflows.engine.config import EngineConfig
from litestar_chatflows.engine.engine import WorkflowEngine
from litestar_chatflows.exceptions import WorkflowInactiveError, WorkflowNotActiveError, WorkflowNotFoundError
from litestar_chatflows.store.memory import InMemoryContextStore
from litestar_chatflows.validation.rules import ValidationRule
from tests.conftest import ExplodingHandler, RecordingHandler

if TYPE_CHECKING:
    from litestar_chatflows.engine.registry import HandlerRegistry, WorkflowRegistry
    from tests.conftest import MockEventBus


class SlowHandler:
    """Handler tracking how many calls overlap."""

    name = "work"

    def __init__(self) -> None:
        self.active = 0
        self.peak = 0
        self.calls = 0

    async def execute(self, context: WorkflowContext, user_input: str | None = None) -> HandlerResult:
        self.calls += 1
        self.active += 1
        self.peak = max(self.peak, self.active)
        await asyncio.sleep(0.01)
        self.active -= 1
        return HandlerSuccess(output="worked")


class UnreliableStore(InMemoryContextStore):
    """In-memory store whose next saves can be made to fail."""

    def __init__(self) -> None:
        super().__init__()
        self.failures = 0

    async def save_workflow_context(self, user_id: str, context: WorkflowContext) -> None:
        if self.failures:
            self.failures -= 1
            msg = "connection to the database lost"
            raise ConnectionError(msg)
        await super().save_workflow_context(user_id, context)


async def _started(engine: WorkflowEngine, user_id: str, workflow_id: str) -> WorkflowContext:
    context = await engine.start_workflow(user_id, workflow_id)
    await engine.execute_step(user_id, context, "hello")
    return context


@pytest.mark.unit
@pytest.mark.asyncio
class TestWorkflowLifecycle:
    """Tests for starting, pausing, resuming and cancelling workflows."""

    async def test_start_workflow(self, engine: WorkflowEngine, user_id: str, memory_store: InMemoryContextStore) -> None:
        """Test a new context starts in the initial state and is persisted."""
        context = await engine.start_workflow(user_id, "survey", {"channel": "whatsapp"})

        assert context.current_state == "ask_name"
        assert context.status == WorkflowStatus.ACTIVE
        assert context.data == {"channel": "whatsapp"}
        assert context.metadata["workflow_name"] == "Survey"
        assert context.record_id is not None
        assert await engine.get_active_workflow(user_id) == context
        assert memory_store.save_count == 1

    async def test_start_unknown_workflow(self, engine: WorkflowEngine, user_id: str) -> None:
        """Test starting an unregistered workflow fails."""
        with pytest.raises(WorkflowNotFoundError):
            await engine.start_workflow(user_id, "nope")

    async def test_start_inactive_workflow(self, engine: WorkflowEngine, user_id: str) -> None:
        """Test switched off workflows cannot be started and are not listed."""
        engine.register_workflow(
            WorkflowDefinition(
                id="legacy",
                name="Legacy",
                initial_state="only",
                states=(State(id="only", type=StateType.OUTPUT, prompt="Bye"),),
                is_active=False,
            )
        )
        with pytest.raises(WorkflowInactiveError):
            await engine.start_workflow(user_id, "legacy")
        assert [definition.id for definition in engine.get_available_workflows()] == ["survey", "pipeline"]
        assert engine.has_workflow("legacy")
        assert engine.get_first_step("survey").id == "ask_name"

    async def test_start_supersedes_current_workflow(
        self,
        engine: WorkflowEngine,
        user_id: str,
        memory_store: InMemoryContextStore,
        mock_event_bus: MockEventBus,
    ) -> None:
        """Test starting a workflow cancels the one in progress."""
        first = await _started(engine, user_id, "survey")
        second = await engine.start_workflow(user_id, "pipeline")

        [archived] = memory_store.archived(user_id)
        assert archived.workflow_id == "survey"
        assert archived.status == WorkflowStatus.CANCELLED
        assert archived.error_message == "New workflow started"
        assert (await engine.get_active_workflow(user_id)).workflow_id == second.workflow_id
        assert "workflow.cancelled" in mock_event_bus.types()

        with pytest.raises(WorkflowNotActiveError) as exc_info:
            await engine.execute_step(user_id, first, "Awa")
        assert exc_info.value.status == "superseded"

    async def test_pause_and_resume(self, engine: WorkflowEngine, user_id: str, mock_event_bus: MockEventBus) -> None:
        """Test paused contexts reject steps until resumed."""
        context = await _started(engine, user_id, "survey")

        assert await engine.pause_workflow(user_id) is True
        assert await engine.pause_workflow(user_id) is False
        assert await engine.get_active_workflow(user_id) is None
        with pytest.raises(WorkflowNotActiveError) as exc_info:
            await engine.execute_step(user_id, context, "Awa")
        assert exc_info.value.status == "paused"

        assert await engine.resume_workflow(user_id) is True
        assert await engine.resume_workflow(user_id) is False
        result = await engine.execute_step(user_id, context, "Awa")
        assert result.success
        assert result.next_state == "ask_age"
        assert mock_event_bus.types()[1:3] == ["workflow.paused", "workflow.resumed"]

    async def test_cancel_workflow(
        self,
        engine: WorkflowEngine,
        user_id: str,
        memory_store: InMemoryContextStore,
        mock_event_bus: MockEventBus,
    ) -> None:
        """Test cancelling archives the context with the reason."""
        await _started(engine, user_id, "survey")

        assert await engine.cancel_workflow(user_id, "User typed stop") is True
        assert await engine.get_active_workflow(user_id) is None
        [archived] = memory_store.archived(user_id)
        assert archived.status == WorkflowStatus.CANCELLED
        assert archived.error_message == "User typed stop"
        assert archived.completed_at is not None
        assert mock_event_bus.events[-1][0] == "workflow.cancelled"
        assert mock_event_bus.events[-1][1]["reason"] == "User typed stop"

        assert await engine.cancel_workflow(user_id) is False

    async def test_update_workflow_status(
        self, engine: WorkflowEngine, user_id: str, memory_store: InMemoryContextStore
    ) -> None:
        """Test forcing statuses; terminal ones archive the context."""
        assert await engine.update_workflow_status(user_id, "paused") is False
        await _started(engine, user_id, "survey")

        assert await engine.update_workflow_status(user_id, "paused") is True
        assert (await memory_store.load_workflow_context(user_id)).status == WorkflowStatus.PAUSED
        assert await engine.update_workflow_status(user_id, WorkflowStatus.FAILED) is True
        assert await memory_store.load_workflow_context(user_id) is None
        assert memory_store.archived(user_id)[0].status == WorkflowStatus.FAILED

    async def test_continue_without_workflow(self, engine: WorkflowEngine, user_id: str) -> None:
        """Test continuing returns nothing when no workflow is active."""
        assert await engine.continue_workflow(user_id, "hello") is None


@pytest.mark.unit
@pytest.mark.asyncio
class TestInputStates:
    """Tests for input states and validation."""

    async def test_first_visit_prompts(self, engine: WorkflowEngine, user_id: str) -> None:
        """Test the first message to an input state only returns its prompt."""
        context = await engine.start_workflow(user_id, "survey")
        result = await engine.execute_step(user_id, context, "bonjour")

        assert result.success
        assert result.stay_in_state
        assert result.message == "What is your name?"
        assert context.current_state == "ask_name"
        assert "name" not in context.data
        assert context.history[-1].output == "What is your name?"

    async def test_valid_answer_advances(self, engine: WorkflowEngine, user_id: str, mock_event_bus: MockEventBus) -> None:
        """Test a valid answer stores the value and moves to the next state."""
        context = await _started(engine, user_id, "survey")
        result = await engine.execute_step(user_id, context, "  Awa ")

        assert result.success
        assert result.next_state == "ask_age"
        assert result.data == {"name": "Awa"}
        assert context.data["name"] == "Awa"
        assert context.current_state == "ask_age"
        assert mock_event_bus.types() == ["workflow.started", "state.exited", "state.entered"]
        assert mock_event_bus.events[-1][1]["state_id"] == "ask_age"
        assert mock_event_bus.events[-1][1]["previous_state"] == "ask_name"

    async def test_invalid_answer_stays(self, engine: WorkflowEngine, user_id: str, mock_event_bus: MockEventBus) -> None:
        """Test an invalid answer keeps the state and reports the validation message."""
        context = await _started(engine, user_id, "survey")
        result = await engine.execute_step(user_id, context, "A")

        assert not result.success
        assert result.stay_in_state
        assert result.error == "validation_failed"
        assert result.message == "Must be at least 2 characters long"
        assert context.current_state == "ask_name"
        assert context.status == WorkflowStatus.ACTIVE
        assert context.history[-1].success is False
        event_type, payload = mock_event_bus.events[-1]
        assert event_type == "validation.failed"
        assert payload["fields"] == ["name"]

    async def test_whole_survey(self, engine: WorkflowEngine, user_id: str, mock_event_bus: MockEventBus) -> None:
        """Test a complete conversation driven by execute_until_input."""
        context = await engine.start_workflow(user_id, "survey")

        assert (await engine.execute_until_input(user_id, context, "hi")).message == "What is your name?"
        assert (await engine.execute_until_input(user_id, context, "Awa")).message == "How old are you, Awa?"
        invalid = await engine.execute_until_input(user_id, context, "old")
        assert invalid.message == "Invalid integer"
        final = await engine.execute_until_input(user_id, context, "30")

        assert final.completed
        assert final.message == "Thanks Awa!"
        assert context.status == WorkflowStatus.COMPLETED
        assert context.data == {"name": "Awa", "age": 30}
        assert context.completed_at is not None
        assert mock_event_bus.types()[-1] == "workflow.completed"
        assert await engine.get_active_workflow(user_id) is None

    async def test_finished_context_rejects_steps(self, engine: WorkflowEngine, user_id: str) -> None:
        """Test a stale copy of a finished context cannot be stepped again."""
        context = await engine.start_workflow(user_id, "pipeline")
        stale = WorkflowContext.from_dict(context.to_dict())
        for message in ("go", "go"):
            await engine.execute_until_input(user_id, context, message)
        assert context.status == WorkflowStatus.COMPLETED

        with pytest.raises(WorkflowNotActiveError) as exc_info:
            await engine.execute_step(user_id, stale, "again")
        assert exc_info.value.status == "finished"

    async def test_input_without_rules_stores_raw_answer(self, engine: WorkflowEngine, user_id: str) -> None:
        """Test an input state without rules keeps the raw answer under its id."""
        context = await _started(engine, user_id, "pipeline")
        await engine.execute_step(user_id, context, "anything at all")
        assert context.data["start"] == "anything at all"
        assert context.current_state == "mid"

    async def test_decision_without_rules_stores_answer_as_decision(self, engine: WorkflowEngine, user_id: str) -> None:
        """Test a decision state prompts first, then routes on the raw answer."""
        engine.register_workflow(
            WorkflowDefinition(
                id="route",
                name="Route",
                initial_state="choose",
                states=(
                    State(id="choose", type=StateType.DECISION, prompt="Left or right?"),
                    State(id="left", type=StateType.OUTPUT, prompt="Going left", next_state="completed"),
                    State(id="right", type=StateType.OUTPUT, prompt="Going right", next_state="completed"),
                ),
                transitions=(
                    Transition(source="choose", target="left", condition="data.decision == 'left'"),
                    Transition(source="choose", target="right", condition="data.decision == 'right'"),
                ),
            )
        )
        context = await engine.start_workflow(user_id, "route")

        first = await engine.execute_step(user_id, context, "hello")
        assert first.stay_in_state
        assert first.message == "Left or right?"
        assert "decision" not in context.data

        result = await engine.execute_step(user_id, context, "left")

        assert result.success
        assert result.next_state == "left"
        assert context.data["decision"] == "left"
        assert "choose" not in context.data
        assert context.current_state == "left"


@pytest.mark.unit
@pytest.mark.asyncio
class TestProcessingStates:
    """Tests for processing states and handlers."""

    async def test_missing_handler_passes_through(self, engine: WorkflowEngine, user_id: str) -> None:
        """Test an unregistered handler is skipped and the workflow continues."""
        context = await _started(engine, user_id, "pipeline")
        result = await engine.execute_until_input(user_id, context, "go")

        assert result.completed
        assert result.message == "Done"

    async def test_handler_output_and_data(self, engine: WorkflowEngine, user_id: str) -> None:
        """Test handler output is returned and its data merged."""
        handler = RecordingHandler("work", HandlerSuccess(output="Working on it", data={"ticket": "T-1"}))
        engine.register_handler(handler)
        context = await _started(engine, user_id, "pipeline")

        result = await engine.execute_until_input(user_id, context, "go")

        assert handler.calls == ["go"]
        assert result.message == "Working on it\n\nDone"
        assert context.data["ticket"] == "T-1"
        assert context.status == WorkflowStatus.COMPLETED

    async def test_handler_failure_stays_in_state(
        self,
        engine: WorkflowEngine,
        user_id: str,
        failing_handler: RecordingHandler,
        mock_event_bus: MockEventBus,
    ) -> None:
        """Test a business failure keeps the state and the context active."""
        engine.register_handler(failing_handler)
        context = await _started(engine, user_id, "pipeline")

        result = await engine.execute_until_input(user_id, context, "go")

        assert not result.success
        assert result.message == "Service unavailable"
        assert context.current_state == "mid"
        assert context.status == WorkflowStatus.ACTIVE
        assert context.data.get("mid") is None
        event_type, payload = mock_event_bus.events[-1]
        assert event_type == "handler.failed"
        assert payload["handler"] == "work"
        assert payload["error"] == "Service unavailable"

    async def test_handler_exception(self, engine: WorkflowEngine, user_id: str, mock_event_bus: MockEventBus) -> None:
        """Test a raising handler yields the generic error message."""
        engine.register_handler(ExplodingHandler("work"))
        context = await _started(engine, user_id, "pipeline")

        result = await engine.execute_until_input(user_id, context, "go")

        assert not result.success
        assert result.message == EngineConfig().generic_error_message
        assert context.current_state == "mid"
        assert context.status == WorkflowStatus.ACTIVE
        _, payload = mock_event_bus.events[-1]
        assert payload["error"] == "database unreachable"
        assert payload["error_type"] == "RuntimeError"

    async def test_unknown_next_state_fails_workflow(
        self,
        engine: WorkflowEngine,
        user_id: str,
        memory_store: InMemoryContextStore,
        mock_event_bus: MockEventBus,
    ) -> None:
        """Test a handler pointing at an undeclared state fails the workflow."""
        engine.register_handler(RecordingHandler("work", HandlerSuccess(next_state="nowhere")))
        context = await _started(engine, user_id, "pipeline")

        result = await engine.execute_until_input(user_id, context, "go")

        assert not result.success
        assert "nowhere" in result.error
        assert context.status == WorkflowStatus.FAILED
        assert memory_store.archived(user_id)[0].error_message == result.error
        assert mock_event_bus.types()[-1] == "workflow.failed"

    async def test_concurrent_steps_are_serialized(self, engine: WorkflowEngine, user_id: str) -> None:
        """Test two messages of the same user never run a handler concurrently."""
        handler = SlowHandler()
        engine.register_handler(handler)
        context = await _started(engine, user_id, "pipeline")
        await engine.execute_step(user_id, context, "go")
        assert context.current_state == "mid"

        first, second = await asyncio.gather(
            engine.execute_step(user_id, context, "a"),
            engine.execute_step(user_id, context, "b"),
        )

        assert handler.peak == 1
        assert handler.calls == 1
        assert first.next_state == "end"
        assert second.completed

    async def test_hooks(self, engine: WorkflowEngine, user_id: str) -> None:
        """Test on_enter and on_exit handlers run around a state."""
        enter = RecordingHandler("audit_enter")
        leave = RecordingHandler("audit_exit")
        engine.register_handler(enter)
        engine.register_handler(leave)
        engine.register_workflow(
            WorkflowDefinition(
                id="hooked",
                name="Hooked",
                initial_state="notice",
                states=(
                    State(
                        id="notice",
                        type=StateType.OUTPUT,
                        prompt="Heads up",
                        on_enter="audit_enter",
                        on_exit="audit_exit",
                    ),
                ),
            )
        )
        context = await engine.start_workflow(user_id, "hooked")

        result = await engine.execute_step(user_id, context, None)

        assert result.completed
        assert result.message == "Heads up"
        assert enter.calls == [None]
        assert leave.calls == [None]

    async def test_ai_state_placeholder(self, engine: WorkflowEngine, user_id: str) -> None:
        """Test an AI state without a handler answers with the placeholder."""
        engine.register_workflow(
            WorkflowDefinition(
                id="assistant",
                name="Assistant",
                initial_state="chat",
                states=(State(id="chat", type=StateType.AI_PROCESSING),),
            )
        )
        context = await engine.start_workflow(user_id, "assistant")

        result = await engine.execute_step(user_id, context, "What does Takaful cover?")

        assert result.success
        assert result.stay_in_state
        assert result.message == "AI processing..."
        assert context.current_state == "chat"

    @pytest.fixture
    def assistant_workflow(self) -> WorkflowDefinition:
        """AI state answering through the ``ai`` handler, then saying goodbye."""
        return WorkflowDefinition(
            id="assistant",
            name="Assistant",
            initial_state="chat",
            states=(
                State(id="chat", type=StateType.AI_PROCESSING, handler="ai", next_state="bye"),
                State(id="advisor", type=StateType.INPUT, prompt="An advisor will answer you."),
                State(id="bye", type=StateType.OUTPUT, prompt="Goodbye", next_state="completed"),
            ),
        )

    async def test_ai_state_handler_success(
        self, engine: WorkflowEngine, user_id: str, assistant_workflow: WorkflowDefinition
    ) -> None:
        """Test an AI handler answer is returned and its data merged."""
        handler = RecordingHandler("ai", HandlerSuccess(output="Takaful covers hospital stays.", data={"topic": "health"}))
        engine.register_handler(handler)
        engine.register_workflow(assistant_workflow)
        context = await engine.start_workflow(user_id, "assistant")

        result = await engine.execute_step(user_id, context, "What does Takaful cover?")

        assert handler.calls == ["What does Takaful cover?"]
        assert result.success
        assert result.message == "Takaful covers hospital stays."
        assert result.next_state == "bye"
        assert context.data["topic"] == "health"
        assert context.current_state == "bye"

    async def test_ai_state_handler_next_state(
        self, engine: WorkflowEngine, user_id: str, assistant_workflow: WorkflowDefinition
    ) -> None:
        """Test an AI handler can redirect the conversation."""
        engine.register_handler(RecordingHandler("ai", HandlerSuccess(output="Let me find an advisor.", next_state="advisor")))
        engine.register_workflow(assistant_workflow)
        context = await engine.start_workflow(user_id, "assistant")

        result = await engine.execute_step(user_id, context, "I want a human")

        assert result.next_state == "advisor"
        assert context.current_state == "advisor"

    async def test_ai_state_handler_failure(
        self, engine: WorkflowEngine, user_id: str, assistant_workflow: WorkflowDefinition
    ) -> None:
        """Test an AI handler failure keeps the state and reports the error."""
        engine.register_handler(RecordingHandler("ai", HandlerFailure(error="The assistant is unavailable.")))
        engine.register_workflow(assistant_workflow)
        context = await engine.start_workflow(user_id, "assistant")

        result = await engine.execute_step(user_id, context, "Hello?")

        assert not result.success
        assert result.message == "The assistant is unavailable."
        assert context.current_state == "chat"
        assert context.status == WorkflowStatus.ACTIVE


@pytest.mark.unit
@pytest.mark.asyncio
class TestChaining:
    """Tests for execute_until_input."""

    @pytest.fixture
    def confirm_workflow(self, engine: WorkflowEngine) -> WorkflowDefinition:
        definition = WorkflowDefinition(
            id="confirm",
            name="Confirm",
            initial_state="ask",
            states=(
                State(id="ask", type=StateType.INPUT, prompt="Tell me something", next_state="check"),
                State(
                    id="check",
                    type=StateType.VALIDATION,
                    prompt="Send a number to confirm",
                    validation=(ValidationRule(field="code", type=ValidationType.INTEGER, required=True),),
                    next_state="completed",
                ),
            ),
        )
        engine.register_workflow(definition)
        return definition

    async def test_stops_before_validation_state(
        self, engine: WorkflowEngine, user_id: str, confirm_workflow: WorkflowDefinition
    ) -> None:
        """Test chaining stops at a validation state and appends its prompt."""
        context = await engine.start_workflow(user_id, "confirm")
        await engine.execute_until_input(user_id, context, "hi")

        result = await engine.execute_until_input(user_id, context, "a story")
        assert result.message == "Send a number to confirm"
        assert context.current_state == "check"

        invalid = await engine.execute_until_input(user_id, context, "soon")
        assert invalid.message == "Invalid integer\n\nSend a number to confirm"
        assert context.current_state == "check"

        done = await engine.execute_until_input(user_id, context, "42")
        assert done.completed
        assert context.data == {"ask": "a story", "code": 42}

    async def test_max_steps(self, engine: WorkflowEngine, user_id: str) -> None:
        """Test the number of chained steps is bounded."""
        context = await _started(engine, user_id, "pipeline")

        result = await engine.execute_until_input(user_id, context, "go", max_steps=1)

        assert result.next_state == "mid"
        assert result.message == ""
        assert context.current_state == "mid"


@pytest.mark.unit
@pytest.mark.asyncio
class TestTimeoutsAndRollback:
    """Tests for state timeouts and rollback."""

    async def test_timeout_fails_workflow(
        self, engine: WorkflowEngine, user_id: str, mock_event_bus: MockEventBus
    ) -> None:
        """Test answering after a state's timeout fails the workflow."""
        engine.register_workflow(
            WorkflowDefinition(
                id="quiz",
                name="Quiz",
                initial_state="question",
                states=(State(id="question", type=StateType.INPUT, prompt="2 + 2?", timeout=60),),
            )
        )
        context = await _started(engine, user_id, "quiz")
        context.state_entered_at = utcnow() - timedelta(minutes=5)

        result = await engine.execute_step(user_id, context, "4")

        assert not result.success
        assert result.error == "timeout"
        assert result.message == EngineConfig().timeout_message
        assert context.status == WorkflowStatus.FAILED
        assert context.error_message == "timeout"
        assert mock_event_bus.events[-1][1]["failed_state"] == "question"

    async def test_answer_within_timeout(self, engine: WorkflowEngine, user_id: str) -> None:
        """Test answering in time completes normally."""
        engine.register_workflow(
            WorkflowDefinition(
                id="quiz",
                name="Quiz",
                initial_state="question",
                states=(State(id="question", type=StateType.INPUT, prompt="2 + 2?", timeout=60),),
            )
        )
        context = await _started(engine, user_id, "quiz")

        result = await engine.execute_step(user_id, context, "4")

        assert result.completed
        assert context.data == {"question": "4"}

    async def test_rollback_one_step(self, engine: WorkflowEngine, user_id: str) -> None:
        """Test rolling back returns to the previous state and re-prompts it."""
        context = await engine.start_workflow(user_id, "survey")
        for message in ("hi", "Awa"):
            await engine.execute_until_input(user_id, context, message)
        assert context.current_state == "ask_age"

        result = await engine.rollback(user_id)

        assert result.success
        assert result.next_state == "ask_name"
        assert result.message == "What is your name?"
        assert result.context.data["name"] == "Awa"
        restored = await engine.get_active_workflow(user_id)
        assert restored.current_state == "ask_name"
        assert len(restored.history) == 2

        answer = await engine.execute_until_input(user_id, restored, "Binta")
        assert answer.message == "How old are you, Binta?"

    async def test_rollback_to_initial_state(self, engine: WorkflowEngine, user_id: str) -> None:
        """Test rolling back past the first entry returns to the initial state."""
        context = await engine.start_workflow(user_id, "survey")
        for message in ("hi", "Awa"):
            await engine.execute_until_input(user_id, context, message)

        result = await engine.rollback(user_id, steps=10)

        assert result.next_state == "ask_name"
        assert result.context.history == []

    async def test_nothing_to_rollback(self, engine: WorkflowEngine, user_id: str) -> None:
        """Test rolling back without history fails gracefully."""
        result = await engine.rollback(user_id)
        assert not result.success
        assert result.error == "nothing_to_rollback"
        assert result.message == EngineConfig().rollback_failed_message

        await engine.start_workflow(user_id, "survey")
        assert (await engine.rollback(user_id)).error == "nothing_to_rollback"


@pytest.mark.unit
@pytest.mark.asyncio
class TestPersistenceErrors:
    """Tests for steps whose context cannot be saved."""

    @pytest.fixture
    def unreliable_store(self) -> UnreliableStore:
        """Store failing the saves it is told to."""
        return UnreliableStore()

    @pytest.fixture
    def unreliable_engine(
        self,
        workflow_registry: WorkflowRegistry,
        handler_registry: HandlerRegistry,
        unreliable_store: UnreliableStore,
        survey_workflow: WorkflowDefinition,
    ) -> WorkflowEngine:
        """Engine persisting through the unreliable store."""
        engine = WorkflowEngine(workflow_registry, unreliable_store, handlers=handler_registry)
        engine.register_workflow(survey_workflow)
        return engine

    async def test_failed_save_propagates_and_restores_context(
        self, unreliable_engine: WorkflowEngine, unreliable_store: UnreliableStore, user_id: str
    ) -> None:
        """Test a step that cannot be saved raises and leaves the context unchanged."""
        context = await unreliable_engine.start_workflow(user_id, "survey")
        before = context.to_dict()
        unreliable_store.failures = 1

        with pytest.raises(ConnectionError):
            await unreliable_engine.execute_step(user_id, context, "hello")

        assert context.to_dict() == before
        assert context.history == []
        stored = await unreliable_store.load_workflow_context(user_id)
        assert stored is not None
        assert stored.history == []

    async def test_retry_after_failed_save_is_a_first_visit(
        self, unreliable_engine: WorkflowEngine, unreliable_store: UnreliableStore, user_id: str
    ) -> None:
        """Test the message after a failed save is not taken as the answer to an unsent prompt."""
        context = await unreliable_engine.start_workflow(user_id, "survey")
        unreliable_store.failures = 1
        with pytest.raises(ConnectionError):
            await unreliable_engine.execute_step(user_id, context, "hello")

        result = await unreliable_engine.execute_step(user_id, context, "Alice")

        assert result.stay_in_state
        assert result.message == "What is your name?"
        assert context.current_state == "ask_name"
        assert "name" not in context.data
        assert len(context.history) == 1

    async def test_failed_save_of_answer_keeps_state(
        self, unreliable_engine: WorkflowEngine, unreliable_store: UnreliableStore, user_id: str
    ) -> None:
        """Test an answer whose save fails can be given again."""
        context = await _started(unreliable_engine, user_id, "survey")
        unreliable_store.failures = 1

        with pytest.raises(ConnectionError):
            await unreliable_engine.execute_step(user_id, context, "Awa")
        assert context.current_state == "ask_name"
        assert "name" not in context.data

        result = await unreliable_engine.execute_step(user_id, context, "Awa")
        assert result.next_state == "ask_age"
        assert context.data["name"] == "Awa"
