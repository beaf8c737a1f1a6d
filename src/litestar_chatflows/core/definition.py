"""Workflow definition structures.

This module provides the immutable templates a conversation follows: states,
the transitions between them, and the complete workflow definition.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from litestar_chatflows.core.conditions import Condition, compile_condition
from litestar_chatflows.core.types import StateType, WorkflowStatus
from litestar_chatflows.exceptions import ConditionSyntaxError, StateNotFoundError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from litestar_chatflows.validation.rules import ValidationRule

__all__ = ["COMPLETED_STATE", "CANCELLED_STATE", "PromptTemplate", "State", "Transition", "WorkflowDefinition"]

COMPLETED_STATE = "completed"
"""Conventional id of the success terminal state, used when nothing else matches."""
CANCELLED_STATE = "cancelled"
"""Conventional id of the abandon terminal state."""


@dataclass(frozen=True)
class PromptTemplate:
    """A prompt with ``{{variable}}`` placeholders.

    Attributes:
        template: Text containing ``{{name}}`` placeholders.
        variables: Names of the placeholders, for documentation only.
    """

    template: str
    variables: tuple[str, ...] = ()


@dataclass(frozen=True)
class State:
    """One step of a workflow.

    Attributes:
        id: Identifier unique within the workflow.
        type: How the state handles input and output.
        name: Human-readable name, defaults to the id.
        prompt: Text sent to the user when the state asks for input.
        validation: Rules applied to the user's input.
        handler: Name of the handler invoked by processing, output and
            ai_processing states.
        next_state: Default next state when no transition matches.
        on_enter: Handler name run before the state executes.
        on_exit: Handler name run when leaving the state.
        timeout: Seconds the user has to answer once the state is entered.
        metadata: Free-form attributes.

    Example:
        >>> State(
        ...     id="collect_email",
        ...     type=StateType.INPUT,
        ...     prompt="What is your email address?",
        ...     validation=(ValidationRule(field="email", type="email", required=True),),
        ...     next_state="done",
        ... )
    """

    id: str
    type: StateType
    name: str = ""
    prompt: str | PromptTemplate | None = None
    validation: tuple[ValidationRule, ...] = ()
    handler: str | None = None
    next_state: str | None = None
    on_enter: str | None = None
    on_exit: str | None = None
    timeout: float | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", StateType(self.type))
        object.__setattr__(self, "validation", tuple(self.validation))
        if not self.name:
            object.__setattr__(self, "name", self.id)

    @property
    def awaits_input(self) -> bool:
        """Whether the state prompts first and consumes the following message."""
        return self.type in (StateType.INPUT, StateType.DECISION)


@dataclass(frozen=True)
class Transition:
    """A directed edge between two states.

    Attributes:
        source: Id of the state the transition leaves.
        target: Id of the state the transition enters.
        condition: Optional expression over the accumulated data, see
            :mod:`litestar_chatflows.core.conditions`.
        priority: Higher priorities are tried first.
        metadata: Free-form attributes.

    Example:
        >>> Transition(
        ...     source="confirm",
        ...     target="process",
        ...     condition="data.confirm == 'yes' || data.confirm == 'oui'",
        ...     priority=10,
        ... )
    """

    source: str
    target: str
    condition: str | None = None
    priority: int = 0
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def compiled_condition(self) -> Condition | None:
        """Parse the condition, if any.

        Raises:
            ConditionSyntaxError: If the condition is malformed.
        """
        if self.condition is None:
            return None
        return compile_condition(self.condition)

    def evaluate_condition(self, data: Mapping[str, Any]) -> bool:
        """Evaluate the transition condition against workflow data.

        Args:
            data: Accumulated workflow data.

        Returns:
            True if the condition holds or if there is no condition.
        """
        condition = self.compiled_condition()
        return True if condition is None else condition.evaluate(data)


@dataclass(frozen=True)
class WorkflowDefinition:
    """Declarative definition of a multi-step conversation.

    Definitions are loaded once at startup and never mutated afterwards; state and
    transition collections are stored as tuples.

    Attributes:
        id: Unique identifier of the workflow.
        name: Human-readable name.
        initial_state: Id of the state new contexts start in.
        states: The states of the workflow.
        transitions: Edges between states.
        description: Human-readable description.
        version: Version string for the definition.
        is_active: Inactive workflows cannot be started.
        metadata: Free-form attributes.

    Example:
        >>> definition = WorkflowDefinition(
        ...     id="newsletter",
        ...     name="Newsletter signup",
        ...     initial_state="ask_email",
        ...     states=(
        ...         State(id="ask_email", type=StateType.INPUT, prompt="Your email?", next_state="thanks"),
        ...         State(id="thanks", type=StateType.OUTPUT, prompt="Thanks!"),
        ...     ),
        ... )
    """

    id: str
    name: str
    initial_state: str
    states: tuple[State, ...]
    transitions: tuple[Transition, ...] = ()
    description: str = ""
    version: str = "1.0.0"
    is_active: bool = True
    metadata: Mapping[str, Any] = field(default_factory=dict)
    _index: Mapping[str, State] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "states", tuple(self.states))
        object.__setattr__(self, "transitions", tuple(self.transitions))
        object.__setattr__(self, "_index", MappingProxyType({state.id: state for state in self.states}))

    def has_state(self, state_id: str) -> bool:
        """Check whether a state id is declared."""
        return state_id in self._index

    def get_state(self, state_id: str) -> State:
        """Look up a state by id.

        Args:
            state_id: The state id.

        Returns:
            The declared state.

        Raises:
            StateNotFoundError: If the id is not declared.
        """
        try:
            return self._index[state_id]
        except KeyError:
            raise StateNotFoundError(self.id, state_id) from None

    def get_initial_state(self) -> State:
        """Return the state new contexts start in."""
        return self.get_state(self.initial_state)

    def transitions_from(self, state_id: str) -> list[Transition]:
        """Transitions leaving a state, in evaluation order.

        Conditioned transitions come first, each group ordered by descending
        priority; declaration order breaks ties.

        Args:
            state_id: Source state id.

        Returns:
            Ordered list of outgoing transitions.
        """
        outgoing = [transition for transition in self.transitions if transition.source == state_id]
        return sorted(outgoing, key=lambda transition: (transition.condition is None, -transition.priority))

    def terminal_status(self, state_id: str) -> WorkflowStatus | None:
        """Status a context takes when it enters ``state_id``, if that state is terminal.

        A state is terminal when its type is completed or cancelled, or when its id
        is one of the conventional terminal ids and it is not declared otherwise.
        """
        state = self._index.get(state_id)
        if state is not None:
            if state.type == StateType.COMPLETED:
                return WorkflowStatus.COMPLETED
            if state.type == StateType.CANCELLED:
                return WorkflowStatus.CANCELLED
            return None
        if state_id == COMPLETED_STATE:
            return WorkflowStatus.COMPLETED
        if state_id == CANCELLED_STATE:
            return WorkflowStatus.CANCELLED
        return None

    def validate(self) -> list[str]:
        """Validate the workflow definition.

        Returns:
            List of validation error messages. Empty list if valid.

        Example:
            >>> errors = definition.validate()
            >>> if errors:
            ...     print("Validation errors:", errors)
        """
        errors: list[str] = []

        if not self.id:
            errors.append("Workflow id is required")
        if not self.name:
            errors.append("Workflow name is required")
        if not self.initial_state:
            errors.append("Initial state is required")
        if not self.states:
            errors.append("Workflow must declare at least one state")

        seen: set[str] = set()
        for state in self.states:
            if state.id in seen:
                errors.append(f"Duplicate state id '{state.id}'")
            seen.add(state.id)

        if self.initial_state and self.states and not self.has_state(self.initial_state):
            errors.append(f"Initial state '{self.initial_state}' not found in states")

        for state in self.states:
            if state.next_state and not self.has_state(state.next_state) and state.next_state != COMPLETED_STATE:
                errors.append(f"State '{state.id}': next state '{state.next_state}' not found")
            if state.timeout is not None and state.timeout <= 0:
                errors.append(f"State '{state.id}': timeout must be positive")

        for i, transition in enumerate(self.transitions):
            if not self.has_state(transition.source):
                errors.append(f"Transition {i}: source state '{transition.source}' not found")
            if not self.has_state(transition.target):
                errors.append(f"Transition {i}: target state '{transition.target}' not found")
            try:
                transition.compiled_condition()
            except ConditionSyntaxError as exc:
                errors.append(f"Transition {i}: {exc}")

        return errors

    def to_mermaid(self) -> str:
        """Generate a MermaidJS graph representation of the workflow.

        Returns:
            MermaidJS graph definition as a string.

        Example:
            >>> print(definition.to_mermaid())
            graph TD
                ask_email[/START: Ask Email/]
                thanks[Thanks]
                ask_email --> thanks
        """
        lines = ["graph TD"]

        for state in self.states:
            # Different shapes for different state types
            if state.type in (StateType.INPUT, StateType.DECISION):
                shape_start, shape_end = "[/", "/]"
            elif state.type in (StateType.COMPLETED, StateType.CANCELLED):
                shape_start, shape_end = "([", "])"
            elif state.type == StateType.AI_PROCESSING:
                shape_start, shape_end = "{{", "}}"
            else:
                shape_start, shape_end = "[", "]"

            prefix = "START: " if state.id == self.initial_state else ""
            lines.append(f"    {state.id}{shape_start}{prefix}{state.name.replace('_', ' ').title()}{shape_end}")

        edges: list[tuple[str, str, str]] = []
        for transition in self.transitions:
            label = ""
            if transition.condition is not None:
                # Quotes break mermaid syntax
                label = "|" + transition.condition.replace("'", "").replace('"', "") + "|"
            edges.append((transition.source, label, transition.target))
        for state in self.states:
            if state.next_state and self.has_state(state.next_state):
                edge = (state.id, "", state.next_state)
                if edge not in edges:
                    edges.append(edge)

        lines.extend(f"    {source} -->{label} {target}" for source, label, target in edges)
        return "\n".join(lines)
