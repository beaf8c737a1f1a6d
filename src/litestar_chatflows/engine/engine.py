"""Workflow execution engine.

The engine advances one conversation per user through a workflow definition, one
step per inbound message. It owns the active :class:`WorkflowContext` while a
step runs, persists it through a :class:`ContextStore` after every step and
serializes steps of the same user.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field, replace
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from litestar_chatflows.core.context import Step, WorkflowContext, utcnow
from litestar_chatflows.core.definition import COMPLETED_STATE
from litestar_chatflows.core.events import (
    HandlerFailed,
    StateEntered,
    StateExited,
    ValidationFailed,
    WorkflowCancelled,
    WorkflowCompleted,
    WorkflowFailed,
    WorkflowPaused,
    WorkflowResumed,
    WorkflowStarted,
)
from litestar_chatflows.core.prompts import render_prompt
from litestar_chatflows.core.results import HandlerFailure, HandlerSuccess, StepResult
from litestar_chatflows.core.types import StateType, WorkflowStatus
from litestar_chatflows.engine.config import EngineConfig
from litestar_chatflows.engine.locks import UserLockManager
from litestar_chatflows.engine.registry import HandlerRegistry
from litestar_chatflows.exceptions import (
    InvalidTransitionError,
    StateNotFoundError,
    WorkflowInactiveError,
    WorkflowNotActiveError,
    WorkflowNotFoundError,
)
from litestar_chatflows.validation.service import ValidationService

if TYPE_CHECKING:
    from litestar_chatflows.core.definition import State, WorkflowDefinition
    from litestar_chatflows.core.events import WorkflowEvent
    from litestar_chatflows.core.protocols import ContextStore, EventBus, Handler
    from litestar_chatflows.core.results import HandlerResult
    from litestar_chatflows.engine.registry import WorkflowRegistry

__all__ = ["WorkflowEngine"]

logger = logging.getLogger(__name__)


@dataclass
class _Outcome:
    """What a state produced, before transitions are applied."""

    success: bool
    message: str = ""
    data: dict[str, Any] = field(default_factory=dict)
    next_state: str | None = None
    stay: bool = False
    error: str | None = None


class WorkflowEngine:
    """Step-per-message workflow engine.

    Attributes:
        registry: Registry of workflow definitions.
        store: Persistence for workflow contexts.
        handlers: Registry resolving handler names.
        validator: Validation service used by input, validation and decision states.
        config: User-facing messages and limits.
        event_bus: Optional receiver of lifecycle events.

    Example:
        >>> engine = WorkflowEngine(registry, InMemoryContextStore(), handlers=handlers)
        >>> context = await engine.start_workflow("237690000000", "name_collection")
        >>> result = await engine.execute_step("237690000000", context, "bonjour")
        >>> result.message
        'Welcome! What is your name?'
    """

    def __init__(
        self,
        registry: WorkflowRegistry,
        store: ContextStore,
        *,
        handlers: HandlerRegistry | None = None,
        validator: ValidationService | None = None,
        config: EngineConfig | None = None,
        event_bus: EventBus | None = None,
        locks: UserLockManager | None = None,
    ) -> None:
        self.registry = registry
        self.store = store
        self.handlers = handlers if handlers is not None else HandlerRegistry()
        self.validator = validator if validator is not None else ValidationService()
        self.config = config or EngineConfig()
        self.event_bus = event_bus
        self._locks = locks or UserLockManager()

    # Registration

    def register_workflow(self, definition: WorkflowDefinition) -> None:
        """Validate and register a definition.

        Raises:
            WorkflowValidationError: If the definition is inconsistent.
        """
        self.registry.register(definition)

    def register_handler(self, handler: Handler) -> None:
        self.handlers.register(handler)

    def get_workflow(self, workflow_id: str) -> WorkflowDefinition:
        """Return a registered definition.

        Raises:
            WorkflowNotFoundError: If the id is not registered.
        """
        return self.registry.get_definition(workflow_id)

    def has_workflow(self, workflow_id: str) -> bool:
        return self.registry.has_workflow(workflow_id)

    def get_available_workflows(self) -> list[WorkflowDefinition]:
        """Definitions that can currently be started."""
        return self.registry.list_definitions(active_only=True)

    def get_first_step(self, workflow_id: str) -> State:
        """Return the initial state of a workflow."""
        return self.registry.get_definition(workflow_id).get_initial_state()

    # Lifecycle

    async def start_workflow(
        self,
        user_id: str,
        workflow_id: str,
        initial_data: dict[str, Any] | None = None,
    ) -> WorkflowContext:
        """Start a workflow for a user, cancelling the user's current one.

        Args:
            user_id: The user.
            workflow_id: Id of a registered, active workflow.
            initial_data: Values seeding the workflow data.

        Returns:
            The new, persisted context.

        Raises:
            WorkflowNotFoundError: If the workflow is not registered.
            WorkflowInactiveError: If the workflow is switched off.
        """
        definition = self.registry.get_definition(workflow_id)
        if not definition.is_active:
            raise WorkflowInactiveError(workflow_id)

        async with self._locks.acquire(user_id):
            existing = await self.store.load_workflow_context(user_id)
            if existing is not None and not existing.status.is_terminal:
                await self._cancel(existing, "New workflow started")

            context = WorkflowContext(
                user_id=user_id,
                workflow_id=workflow_id,
                current_state=definition.initial_state,
                data=dict(initial_data or {}),
                metadata={"workflow_name": definition.name, "workflow_version": definition.version},
            )
            await self.store.save_workflow_context(user_id, context)

        logger.info("Workflow started", extra={"user_id": user_id, "workflow_id": workflow_id})
        await self._emit(
            WorkflowStarted(
                user_id=user_id,
                workflow_id=workflow_id,
                timestamp=context.started_at,
                initial_state=definition.initial_state,
                initial_data=dict(initial_data) if initial_data else None,
            )
        )
        return context

    async def get_active_workflow(self, user_id: str) -> WorkflowContext | None:
        """Return the user's active context, if any."""
        context = await self.store.load_workflow_context(user_id)
        if context is None or not context.is_active:
            return None
        return context

    async def cancel_workflow(self, user_id: str, reason: str | None = None) -> bool:
        """Cancel the user's current context.

        Returns:
            Whether a context was cancelled.
        """
        async with self._locks.acquire(user_id):
            context = await self.store.load_workflow_context(user_id)
            if context is None:
                return False
            await self._cancel(context, reason or "Cancelled by user")
            return True

    async def pause_workflow(self, user_id: str) -> bool:
        """Suspend the user's active context.

        Returns:
            Whether a context was paused.
        """
        async with self._locks.acquire(user_id):
            context = await self.store.load_workflow_context(user_id)
            if context is None or context.status != WorkflowStatus.ACTIVE:
                return False
            context.status = WorkflowStatus.PAUSED
            context.touch()
            await self.store.save_workflow_context(user_id, context)
        await self._emit(
            WorkflowPaused(
                user_id=user_id,
                workflow_id=context.workflow_id,
                timestamp=context.updated_at,
                current_state=context.current_state,
            )
        )
        return True

    async def resume_workflow(self, user_id: str) -> bool:
        """Reactivate the user's paused context.

        Returns:
            Whether a context was resumed; ``False`` unless the context is paused.
        """
        async with self._locks.acquire(user_id):
            context = await self.store.load_workflow_context(user_id)
            if context is None or context.status != WorkflowStatus.PAUSED:
                return False
            context.status = WorkflowStatus.ACTIVE
            context.touch()
            await self.store.save_workflow_context(user_id, context)
        await self._emit(
            WorkflowResumed(
                user_id=user_id,
                workflow_id=context.workflow_id,
                timestamp=context.updated_at,
                current_state=context.current_state,
            )
        )
        return True

    async def update_workflow_status(self, user_id: str, status: WorkflowStatus | str) -> bool:
        """Force the status of the user's current context.

        Terminal statuses archive the context.

        Returns:
            Whether a context was updated.
        """
        status = WorkflowStatus(status)
        async with self._locks.acquire(user_id):
            context = await self.store.load_workflow_context(user_id)
            if context is None:
                return False
            if status.is_terminal:
                context.finish(status)
            else:
                context.status = status
                context.touch()
            await self.store.save_workflow_context(user_id, context)
            logger.info(
                "Workflow status updated",
                extra={"user_id": user_id, "workflow_id": context.workflow_id, "status": str(status)},
            )
            return True

    async def rollback(self, user_id: str, steps: int = 1) -> StepResult:
        """Undo the last ``steps`` history entries of the user's current context.

        The current state becomes the state of the new last history entry, or the
        initial state when the history is emptied. Accumulated data is kept.

        Args:
            user_id: The user.
            steps: Number of history entries to drop.

        Returns:
            A result whose message is the prompt of the restored state.
        """
        async with self._locks.acquire(user_id):
            context = await self.store.load_workflow_context(user_id)
            if context is None or not context.history or steps < 1:
                return StepResult(
                    success=False,
                    message=self.config.rollback_failed_message,
                    error="nothing_to_rollback",
                    context=context,
                )

            definition = self.registry.get_definition(context.workflow_id)
            del context.history[-min(steps, len(context.history)) :]
            target = context.history[-1].state_id if context.history else definition.initial_state
            context.enter_state(target)
            context.touch()
            await self.store.save_workflow_context(user_id, context)

        logger.info(
            "Workflow rolled back",
            extra={"user_id": user_id, "workflow_id": context.workflow_id, "state_id": target},
        )
        prompt = render_prompt(definition.get_state(target).prompt, context.data) if definition.has_state(target) else ""
        return StepResult(
            success=True,
            message=prompt or self.config.rollback_message,
            stay_in_state=True,
            next_state=target,
            context=context,
        )

    # Stepping

    async def execute_step(self, user_id: str, context: WorkflowContext, user_input: str | None) -> StepResult:
        """Execute one step of the user's context.

        Steps of the same user are serialized. The caller's ``context`` is brought
        up to date from the store first and is updated in place. When the step
        raises, for instance because the store cannot save, the context is
        restored to its state before the step.

        Args:
            user_id: The user.
            context: The user's active context.
            user_input: The inbound message.

        Returns:
            The step result.

        Raises:
            WorkflowNotActiveError: If the context is no longer active.
        """
        async with self._locks.acquire(user_id):
            stored = await self.store.load_workflow_context(user_id)
            if stored is None and context.record_id is not None:
                # Persisted earlier but no longer open
                raise WorkflowNotActiveError(user_id, context.workflow_id, "finished")
            if stored is not None:
                if not stored.is_same_instance(context):
                    raise WorkflowNotActiveError(user_id, context.workflow_id, "superseded")
                if stored.updated_at > context.updated_at:
                    context.refresh_from(stored)
            if not context.is_active:
                raise WorkflowNotActiveError(user_id, context.workflow_id, str(context.status))
            snapshot = WorkflowContext.from_dict(context.to_dict())
            try:
                return await self._step(user_id, context, user_input)
            except Exception:
                # Unsaved progress must not survive a failed step
                context.refresh_from(snapshot)
                raise

    async def execute_until_input(
        self,
        user_id: str,
        context: WorkflowContext,
        user_input: str | None,
        max_steps: int | None = None,
    ) -> StepResult:
        """Execute steps until the workflow waits for the user.

        Stepping stops when a step fails, stays in its state, completes the
        workflow, or enters a validation state (whose prompt is then appended).
        Messages of all steps are joined with blank lines.

        Args:
            user_id: The user.
            context: The user's active context.
            user_input: The inbound message, handed to every step.
            max_steps: Upper bound of steps, defaults to ``config.max_chain_steps``.

        Returns:
            The last step result, carrying the joined messages.
        """
        limit = max_steps or self.config.max_chain_steps
        messages: list[str] = []
        result = await self.execute_step(user_id, context, user_input)
        if result.message:
            messages.append(result.message)
        for _ in range(limit - 1):
            if not result.success or result.completed or result.stay_in_state:
                break
            state = self._current_state(context)
            if state is not None and state.type == StateType.VALIDATION:
                prompt = render_prompt(state.prompt, context.data)
                if prompt:
                    messages.append(prompt)
                break
            result = await self.execute_step(user_id, context, user_input)
            if result.message:
                messages.append(result.message)
        return replace(result, message="\n\n".join(messages))

    async def continue_workflow(self, user_id: str, user_input: str | None) -> StepResult | None:
        """Feed a message to the user's active context, if there is one.

        Returns:
            The result of :meth:`execute_until_input`, or ``None`` when the user
            has no active context.
        """
        context = await self.get_active_workflow(user_id)
        if context is None:
            return None
        return await self.execute_until_input(user_id, context, user_input)

    async def _step(self, user_id: str, context: WorkflowContext, user_input: str | None) -> StepResult:
        started = time.perf_counter()
        try:
            definition = self.registry.get_definition(context.workflow_id)
            state = definition.get_state(context.current_state)
        except (WorkflowNotFoundError, StateNotFoundError) as exc:
            return await self._fail(context, context.current_state, context.current_state, user_input, str(exc), started)

        if self._timed_out(state, context):
            logger.info("State timed out", extra=self._log_extra(context, state.id))
            return await self._fail(
                context, state.id, state.name, user_input, "timeout", started, message=self.config.timeout_message
            )

        if state.on_enter:
            await self._run_hook(state.on_enter, state, context, user_input)

        outcome = await self._dispatch(state, context, user_input)
        message = outcome.message
        next_state: str | None = None
        completed = False

        if outcome.success and not outcome.stay:
            merged = {**context.data, **outcome.data}
            try:
                next_state = self._resolve_next_state(definition, state, outcome, merged)
            except InvalidTransitionError as exc:
                return await self._fail(context, state.id, state.name, user_input, str(exc), started)

            if state.on_exit:
                await self._run_hook(state.on_exit, state, context, user_input)
            context.data.update(outcome.data)
            context.enter_state(next_state)

            terminal = definition.terminal_status(next_state)
            if terminal is not None:
                completed = True
                context.finish(terminal)
                if definition.has_state(next_state):
                    closing = render_prompt(definition.get_state(next_state).prompt, context.data)
                    message = "\n\n".join(part for part in (message, closing) if part)

        context.history.append(
            Step(
                state_id=state.id,
                state_name=state.name,
                timestamp=utcnow(),
                input=user_input,
                output=message,
                success=outcome.success,
                error=outcome.error,
                duration_ms=(time.perf_counter() - started) * 1000,
            )
        )
        context.touch()
        await self.store.save_workflow_context(user_id, context)

        logger.debug(
            "Step executed",
            extra={**self._log_extra(context, state.id), "success": outcome.success, "next_state": next_state},
        )
        if next_state is not None:
            await self._emit(
                StateExited(
                    user_id=user_id,
                    workflow_id=context.workflow_id,
                    timestamp=context.updated_at,
                    state_id=state.id,
                    next_state=next_state,
                )
            )
            await self._emit(
                StateEntered(
                    user_id=user_id,
                    workflow_id=context.workflow_id,
                    timestamp=context.updated_at,
                    state_id=next_state,
                    previous_state=state.id,
                )
            )
        if completed:
            await self._emit_terminal(context)

        return StepResult(
            success=outcome.success,
            message=message,
            completed=completed,
            stay_in_state=outcome.stay,
            next_state=next_state,
            data=dict(outcome.data) if outcome.success else {},
            error=outcome.error,
            context=context,
        )

    async def _dispatch(self, state: State, context: WorkflowContext, user_input: str | None) -> _Outcome:
        if state.type in (StateType.INPUT, StateType.DECISION):
            return await self._handle_input(state, context, user_input)
        if state.type == StateType.VALIDATION:
            return await self._handle_validation(state, context, user_input)
        if state.type == StateType.PROCESSING:
            return await self._handle_processing(state, context, user_input)
        if state.type == StateType.OUTPUT:
            return await self._handle_output(state, context, user_input)
        if state.type == StateType.AI_PROCESSING:
            return await self._handle_ai(state, context, user_input)
        # Terminal state types
        return _Outcome(success=True, message=render_prompt(state.prompt, context.data), next_state=state.id)

    async def _handle_input(self, state: State, context: WorkflowContext, user_input: str | None) -> _Outcome:
        last_step = context.last_step
        if last_step is None or last_step.state_id != state.id:
            # First visit: prompt and restart the answer clock
            context.state_entered_at = utcnow()
            return _Outcome(success=True, message=render_prompt(state.prompt, context.data), stay=True)

        if state.validation:
            validation = await self.validator.validate(user_input, state.validation, context.data)
            if not validation.is_valid:
                await self._validation_failed(state, context, validation.message, [error.field for error in validation.errors])
                return _Outcome(
                    success=False,
                    message=validation.message or self.config.invalid_input_message,
                    stay=True,
                    error="validation_failed",
                )
            return _Outcome(success=True, data=dict(validation.data or {}))

        key = "decision" if state.type == StateType.DECISION else state.id
        return _Outcome(success=True, data={key: user_input})

    async def _handle_validation(self, state: State, context: WorkflowContext, user_input: str | None) -> _Outcome:
        if not state.validation:
            return _Outcome(success=True)
        validation = await self.validator.validate(user_input, state.validation, context.data)
        if validation.is_valid:
            return _Outcome(success=True, data=dict(validation.data or {}))

        await self._validation_failed(state, context, validation.message, [error.field for error in validation.errors])
        message = validation.message or self.config.invalid_input_message
        prompt = render_prompt(state.prompt, context.data)
        if prompt:
            message = f"{message}\n\n{prompt}"
        return _Outcome(success=False, message=message, stay=True, error="validation_failed")

    async def _handle_processing(self, state: State, context: WorkflowContext, user_input: str | None) -> _Outcome:
        handler = self._resolve_handler(state, state.handler)
        if handler is None:
            return _Outcome(success=True, message=render_prompt(state.prompt, context.data))
        result = await self._call_handler(handler, state, context, user_input)
        if isinstance(result, HandlerFailure):
            return _Outcome(success=False, message=result.error or self.config.handler_error_message, error=result.error)
        return _Outcome(success=True, message=result.output or "", data=dict(result.data), next_state=result.next_state)

    async def _handle_output(self, state: State, context: WorkflowContext, user_input: str | None) -> _Outcome:
        message = render_prompt(state.prompt, context.data)
        handler = self._resolve_handler(state, state.handler)
        if handler is None:
            return _Outcome(success=True, message=message)
        result = await self._call_handler(handler, state, context, user_input)
        if isinstance(result, HandlerFailure):
            return _Outcome(success=True, message=message)
        return _Outcome(success=True, message=result.output or message, data=dict(result.data), next_state=result.next_state)

    async def _handle_ai(self, state: State, context: WorkflowContext, user_input: str | None) -> _Outcome:
        handler = self._resolve_handler(state, state.handler)
        if handler is None:
            return _Outcome(success=True, message=self.config.ai_placeholder_message, stay=True)
        result = await self._call_handler(handler, state, context, user_input)
        if isinstance(result, HandlerFailure):
            return _Outcome(success=False, message=result.error or self.config.handler_error_message, error=result.error)
        return _Outcome(success=True, message=result.output or "", data=dict(result.data), next_state=result.next_state)

    def _resolve_next_state(
        self,
        definition: WorkflowDefinition,
        state: State,
        outcome: _Outcome,
        data: dict[str, Any],
    ) -> str:
        if outcome.next_state is not None:
            if definition.has_state(outcome.next_state) or definition.terminal_status(outcome.next_state):
                return outcome.next_state
            raise InvalidTransitionError(state.id, outcome.next_state, "state is not declared in the workflow")

        for transition in definition.transitions_from(state.id):
            try:
                if transition.evaluate_condition(data):
                    return transition.target
            except Exception:
                logger.exception(
                    "Transition condition failed",
                    extra={"workflow_id": definition.id, "state_id": state.id, "condition": transition.condition},
                )
        return state.next_state or COMPLETED_STATE

    def _resolve_handler(self, state: State, name: str | None) -> Handler | None:
        if not name:
            return None
        handler = self.handlers.get(name)
        if handler is None:
            logger.warning("Handler %r not registered, ignoring it", name, extra={"state_id": state.id})
        return handler

    async def _call_handler(
        self,
        handler: Handler,
        state: State,
        context: WorkflowContext,
        user_input: str | None,
    ) -> HandlerResult:
        try:
            result = await handler.execute(context, user_input)
        except Exception as exc:
            logger.exception("Handler %r raised", handler.name, extra=self._log_extra(context, state.id))
            await self._emit(
                HandlerFailed(
                    user_id=context.user_id,
                    workflow_id=context.workflow_id,
                    timestamp=utcnow(),
                    state_id=state.id,
                    handler=handler.name,
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
            )
            return HandlerFailure(error=self.config.generic_error_message, data={"exception": type(exc).__name__})

        if not isinstance(result, (HandlerSuccess, HandlerFailure)):
            logger.error(
                "Handler %r returned %s instead of a handler result", handler.name, type(result).__name__,
                extra=self._log_extra(context, state.id),
            )
            return HandlerFailure(error=self.config.generic_error_message)
        if isinstance(result, HandlerFailure):
            logger.info("Handler %r failed: %s", handler.name, result.error, extra=self._log_extra(context, state.id))
            await self._emit(
                HandlerFailed(
                    user_id=context.user_id,
                    workflow_id=context.workflow_id,
                    timestamp=utcnow(),
                    state_id=state.id,
                    handler=handler.name,
                    error=result.error,
                )
            )
        return result

    async def _run_hook(self, name: str, state: State, context: WorkflowContext, user_input: str | None) -> None:
        handler = self._resolve_handler(state, name)
        if handler is not None:
            # Hook results are informational only
            await self._call_handler(handler, state, context, user_input)

    def _timed_out(self, state: State, context: WorkflowContext) -> bool:
        if state.timeout is None:
            return False
        last_step = context.last_step
        if last_step is None or last_step.state_id != state.id:
            # The user has not been prompted by this state yet
            return False
        return utcnow() - context.state_entered_at > timedelta(seconds=state.timeout)

    def _current_state(self, context: WorkflowContext) -> State | None:
        definition = self.registry.get_definition(context.workflow_id)
        if not definition.has_state(context.current_state):
            return None
        return definition.get_state(context.current_state)

    async def _fail(
        self,
        context: WorkflowContext,
        state_id: str,
        state_name: str,
        user_input: str | None,
        error: str,
        started: float,
        message: str | None = None,
    ) -> StepResult:
        message = message or self.config.generic_error_message
        logger.error("Workflow step failed: %s", error, extra=self._log_extra(context, state_id))
        context.history.append(
            Step(
                state_id=state_id,
                state_name=state_name,
                timestamp=utcnow(),
                input=user_input,
                output=message,
                success=False,
                error=error,
                duration_ms=(time.perf_counter() - started) * 1000,
            )
        )
        context.finish(WorkflowStatus.FAILED, error)
        await self.store.save_workflow_context(context.user_id, context)
        await self._emit(
            WorkflowFailed(
                user_id=context.user_id,
                workflow_id=context.workflow_id,
                timestamp=context.updated_at,
                error=error,
                failed_state=state_id,
            )
        )
        return StepResult(success=False, message=message, error=error, context=context)

    async def _cancel(self, context: WorkflowContext, reason: str) -> None:
        context.finish(WorkflowStatus.CANCELLED, reason)
        await self.store.save_workflow_context(context.user_id, context)
        logger.info("Workflow cancelled: %s", reason, extra=self._log_extra(context, context.current_state))
        await self._emit_terminal(context)

    async def _validation_failed(self, state: State, context: WorkflowContext, message: str, fields: list[str]) -> None:
        logger.debug("Validation failed", extra={**self._log_extra(context, state.id), "fields": fields})
        await self._emit(
            ValidationFailed(
                user_id=context.user_id,
                workflow_id=context.workflow_id,
                timestamp=utcnow(),
                state_id=state.id,
                message=message,
                fields=fields,
            )
        )

    async def _emit_terminal(self, context: WorkflowContext) -> None:
        timestamp = context.completed_at or utcnow()
        if context.status == WorkflowStatus.COMPLETED:
            await self._emit(
                WorkflowCompleted(
                    user_id=context.user_id,
                    workflow_id=context.workflow_id,
                    timestamp=timestamp,
                    final_state=context.current_state,
                    duration_seconds=(timestamp - context.started_at).total_seconds(),
                )
            )
        elif context.status == WorkflowStatus.CANCELLED:
            await self._emit(
                WorkflowCancelled(
                    user_id=context.user_id,
                    workflow_id=context.workflow_id,
                    timestamp=timestamp,
                    reason=context.error_message,
                    current_state=context.current_state,
                )
            )

    async def _emit(self, event: WorkflowEvent) -> None:
        if self.event_bus:
            await self.event_bus.emit(event.event_type, **event.payload())

    @staticmethod
    def _log_extra(context: WorkflowContext, state_id: str) -> dict[str, Any]:
        return {"user_id": context.user_id, "workflow_id": context.workflow_id, "state_id": state_id}
