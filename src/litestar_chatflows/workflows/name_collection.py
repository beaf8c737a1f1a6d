"""Onboarding workflow collecting the user's name."""

from __future__ import annotations

from litestar_chatflows.core.definition import PromptTemplate, State, WorkflowDefinition
from litestar_chatflows.core.types import StateType, ValidationType
from litestar_chatflows.validation.rules import ValidationRule

__all__ = ["NAME_COLLECTION_ID", "name_collection_workflow"]

NAME_COLLECTION_ID = "name_collection"

_NAME_RULES = (
    ValidationRule(
        field="user_name",
        type=ValidationType.STRING,
        required=True,
        min=2,
        max=50,
        message="Please tell me your name (2 to 50 characters).",
    ),
)


def name_collection_workflow() -> WorkflowDefinition:
    """Build the name collection workflow.

    ``ask_name`` -> ``validate_name`` -> ``save_name`` -> ``completed``. Answers
    that are not a name go through ``retry_name`` instead.
    """
    return WorkflowDefinition(
        id=NAME_COLLECTION_ID,
        name="Name collection",
        description="Greets a new user and records how they want to be called.",
        initial_state="ask_name",
        states=(
            State(
                id="ask_name",
                type=StateType.INPUT,
                name="Ask name",
                prompt="Welcome! What is your name?",
                validation=_NAME_RULES,
                next_state="validate_name",
                timeout=24 * 60 * 60,
            ),
            State(
                id="retry_name",
                type=StateType.INPUT,
                name="Ask name again",
                prompt="What is your name?",
                validation=_NAME_RULES,
                next_state="validate_name",
            ),
            State(
                id="validate_name",
                type=StateType.PROCESSING,
                name="Validate name",
                handler="validate_user_name",
                next_state="save_name",
            ),
            State(
                id="save_name",
                type=StateType.PROCESSING,
                name="Save name",
                handler="save_user_name",
                next_state="completed",
            ),
            State(
                id="completed",
                type=StateType.COMPLETED,
                name="Done",
                prompt=PromptTemplate("Nice to meet you, {{user_name}}! How can I help you today?", ("user_name",)),
            ),
        ),
        metadata={"category": "onboarding"},
    )
