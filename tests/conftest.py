"""Shared test fixtures for litestar-chatflows test suite."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest

from litestar_chatflows.core.results import HandlerFailure, HandlerSuccess

if TYPE_CHECKING:
    from litestar_chatflows.core.context import WorkflowContext
    from litestar_chatflows.core.definition import WorkflowDefinition
    from litestar_chatflows.core.results import HandlerResult
    from litestar_chatflows.engine.engine import WorkflowEngine
    from litestar_chatflows.engine.registry import HandlerRegistry, WorkflowRegistry
    from litestar_chatflows.store.memory import InMemoryContextStore

USER_ID = "237690000000"


class MockEventBus:
    """Mock event bus for testing."""

    def __init__(self) -> None:
        """Initialize mock event bus."""
        self.events: list[tuple[str, dict[str, Any]]] = []

    async def emit(self, event_type: str, **kwargs: Any) -> None:
        """Emit an event."""
        self.events.append((event_type, kwargs))

    def types(self) -> list[str]:
        """Event types in emission order."""
        return [event_type for event_type, _ in self.events]


class RecordingHandler:
    """Handler returning a fixed result and recording its calls."""

    def __init__(self, name: str, result: HandlerResult | None = None) -> None:
        self.name = name
        self.result = result if result is not None else HandlerSuccess()
        self.calls: list[str | None] = []

    async def execute(self, context: WorkflowContext, user_input: str | None = None) -> HandlerResult:
        self.calls.append(user_input)
        return self.result


class ExplodingHandler:
    """Handler raising on every call."""

    def __init__(self, name: str = "explode") -> None:
        self.name = name

    async def execute(self, context: WorkflowContext, user_input: str | None = None) -> HandlerResult:
        msg = "database unreachable"
        raise RuntimeError(msg)


@pytest.fixture
def user_id() -> str:
    """Sample conversation key."""
    return USER_ID


@pytest.fixture
def mock_event_bus() -> MockEventBus:
    """Create mock event bus.

    Returns:
        MockEventBus instance
    """
    return MockEventBus()


@pytest.fixture
def memory_store() -> InMemoryContextStore:
    """Create an empty in-memory context store."""
    from litestar_chatflows.store.memory import InMemoryContextStore

    return InMemoryContextStore()


@pytest.fixture
def workflow_registry() -> WorkflowRegistry:
    """Create an empty workflow registry."""
    from litestar_chatflows.engine.registry import WorkflowRegistry

    return WorkflowRegistry()


@pytest.fixture
def handler_registry() -> HandlerRegistry:
    """Create an empty handler registry."""
    from litestar_chatflows.engine.registry import HandlerRegistry

    return HandlerRegistry()


@pytest.fixture
def survey_workflow() -> WorkflowDefinition:
    """Three-state workflow: ask a name, ask an age, then finish.

    Returns:
        WorkflowDefinition with two input states and a closing output state
    """
    from litestar_chatflows.core.definition import State, WorkflowDefinition
    from litestar_chatflows.core.types import StateType, ValidationType
    from litestar_chatflows.validation.rules import ValidationRule

    return WorkflowDefinition(
        id="survey",
        name="Survey",
        initial_state="ask_name",
        states=(
            State(
                id="ask_name",
                type=StateType.INPUT,
                prompt="What is your name?",
                validation=(ValidationRule(field="name", type=ValidationType.STRING, required=True, min=2),),
                next_state="ask_age",
            ),
            State(
                id="ask_age",
                type=StateType.INPUT,
                prompt="How old are you, {{name}}?",
                validation=(ValidationRule(field="age", type=ValidationType.INTEGER, required=True, min=0, max=130),),
                next_state="thanks",
            ),
            State(id="thanks", type=StateType.OUTPUT, prompt="Thanks {{name}}!", next_state="completed"),
        ),
    )


@pytest.fixture
def pipeline_workflow() -> WorkflowDefinition:
    """Workflow ``start`` (input) -> ``mid`` (processing) -> ``end`` (output)."""
    from litestar_chatflows.core.definition import State, WorkflowDefinition
    from litestar_chatflows.core.types import StateType

    return WorkflowDefinition(
        id="pipeline",
        name="Pipeline",
        initial_state="start",
        states=(
            State(id="start", type=StateType.INPUT, prompt="Send anything", next_state="mid"),
            State(id="mid", type=StateType.PROCESSING, handler="work", next_state="end"),
            State(id="end", type=StateType.OUTPUT, prompt="Done", next_state="completed"),
        ),
    )


@pytest.fixture
def engine(
    workflow_registry: WorkflowRegistry,
    handler_registry: HandlerRegistry,
    memory_store: InMemoryContextStore,
    mock_event_bus: MockEventBus,
    survey_workflow: WorkflowDefinition,
    pipeline_workflow: WorkflowDefinition,
) -> WorkflowEngine:
    """Create a workflow engine with the survey and pipeline workflows registered.

    Returns:
        WorkflowEngine backed by an in-memory store and a mock event bus
    """
    from litestar_chatflows.engine.engine import WorkflowEngine

    engine = WorkflowEngine(workflow_registry, memory_store, handlers=handler_registry, event_bus=mock_event_bus)
    engine.register_workflow(survey_workflow)
    engine.register_workflow(pipeline_workflow)
    return engine


@pytest.fixture
def failing_handler() -> RecordingHandler:
    """Handler reporting a business failure."""
    return RecordingHandler("work", HandlerFailure(error="Service unavailable"))


# Pytest configuration
def pytest_configure(config: Any) -> None:
    """Configure pytest with custom markers.

    Args:
        config: Pytest config object
    """
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "e2e: End-to-end tests")
    config.addinivalue_line("markers", "slow: Tests that take more than 1 second")
