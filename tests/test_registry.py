"""Tests for workflow and handler registries and per-user locks."""

from __future__ import annotations

import asyncio

import pytest

from litestar_chatflows.core.definition import State, WorkflowDefinition
from litestar_chatflows.core.types import StateType
from litestar_chatflows.engine.locks import UserLockManager
from litestar_chatflows.engine.registry import HandlerRegistry, WorkflowRegistry
from litestar_chatflows.exceptions import HandlerNotFoundError, WorkflowNotFoundError, WorkflowValidationError
from tests.conftest import RecordingHandler


def _single_state(workflow_id: str, *, is_active: bool = True) -> WorkflowDefinition:
    return WorkflowDefinition(
        id=workflow_id,
        name=workflow_id.title(),
        initial_state="notice",
        states=(State(id="notice", type=StateType.OUTPUT, prompt="Hello"),),
        is_active=is_active,
    )


@pytest.mark.unit
class TestWorkflowRegistry:
    """Tests for WorkflowRegistry."""

    def test_register_and_get(self, workflow_registry: WorkflowRegistry) -> None:
        """Test registering and retrieving a definition."""
        definition = _single_state("notice")
        workflow_registry.register(definition)

        assert workflow_registry.has_workflow("notice")
        assert workflow_registry.get_definition("notice") is definition

    def test_get_unknown(self, workflow_registry: WorkflowRegistry) -> None:
        """Test unknown ids raise WorkflowNotFoundError."""
        with pytest.raises(WorkflowNotFoundError) as exc_info:
            workflow_registry.get_definition("missing")
        assert exc_info.value.workflow_id == "missing"

    def test_register_invalid(self, workflow_registry: WorkflowRegistry) -> None:
        """Test inconsistent definitions are rejected with every error."""
        definition = WorkflowDefinition(
            id="broken",
            name="Broken",
            initial_state="start",
            states=(State(id="start", type=StateType.INPUT, next_state="nowhere"),),
        )
        with pytest.raises(WorkflowValidationError) as exc_info:
            workflow_registry.register(definition)

        assert exc_info.value.errors == ["State 'start': next state 'nowhere' not found"]
        assert not workflow_registry.has_workflow("broken")

    def test_replace_and_unregister(self, workflow_registry: WorkflowRegistry) -> None:
        """Test re-registering replaces and unregistering removes."""
        workflow_registry.register(_single_state("notice"))
        replacement = _single_state("notice")
        workflow_registry.register(replacement)
        assert workflow_registry.get_definition("notice") is replacement

        workflow_registry.unregister("notice")
        workflow_registry.unregister("notice")
        assert not workflow_registry.has_workflow("notice")

    def test_list_definitions(self, workflow_registry: WorkflowRegistry) -> None:
        """Test listing keeps registration order and can skip inactive workflows."""
        workflow_registry.register(_single_state("first"))
        workflow_registry.register(_single_state("retired", is_active=False))
        workflow_registry.register(_single_state("second"))

        assert [d.id for d in workflow_registry.list_definitions()] == ["first", "retired", "second"]
        assert [d.id for d in workflow_registry.list_definitions(active_only=True)] == ["first", "second"]


@pytest.mark.unit
class TestHandlerRegistry:
    """Tests for HandlerRegistry."""

    def test_register_and_lookup(self, handler_registry: HandlerRegistry) -> None:
        """Test handlers are resolved by name."""
        handler = RecordingHandler("save_user_name")
        handler_registry.register(handler)

        assert handler_registry.get("save_user_name") is handler
        assert handler_registry.require("save_user_name") is handler
        assert handler_registry.has("save_user_name")
        assert handler_registry.get("missing") is None

    def test_require_unknown(self, handler_registry: HandlerRegistry) -> None:
        """Test requiring an unknown handler raises."""
        with pytest.raises(HandlerNotFoundError):
            handler_registry.require("missing")

    def test_names_and_unregister(self, handler_registry: HandlerRegistry) -> None:
        """Test names are sorted and handlers can be removed."""
        handler_registry.register(RecordingHandler("b"))
        handler_registry.register(RecordingHandler("a"))
        assert handler_registry.names() == ["a", "b"]

        handler_registry.unregister("a")
        assert handler_registry.names() == ["b"]


@pytest.mark.unit
@pytest.mark.asyncio
class TestUserLockManager:
    """Tests for UserLockManager."""

    async def test_same_user_is_serialized(self) -> None:
        """Test two holders of the same user's lock never overlap."""
        locks = UserLockManager()
        order: list[str] = []

        async def work(tag: str) -> None:
            async with locks.acquire("u1"):
                order.append(f"{tag}-in")
                await asyncio.sleep(0.01)
                order.append(f"{tag}-out")

        await asyncio.gather(work("a"), work("b"))

        assert order == ["a-in", "a-out", "b-in", "b-out"]

    async def test_different_users_run_concurrently(self) -> None:
        """Test locks of different users are independent."""
        locks = UserLockManager()
        inside = asyncio.Event()

        async def hold() -> None:
            async with locks.acquire("u1"):
                inside.set()
                await asyncio.sleep(0.05)

        task = asyncio.create_task(hold())
        await inside.wait()
        assert locks.is_locked("u1")
        async with locks.acquire("u2"):
            assert locks.is_locked("u2")
        await task

    async def test_locks_are_released(self) -> None:
        """Test unused locks are discarded, also after an error."""
        locks = UserLockManager()
        with pytest.raises(RuntimeError):
            async with locks.acquire("u1"):
                raise RuntimeError("step failed")

        assert len(locks) == 0
        assert not locks.is_locked("u1")
