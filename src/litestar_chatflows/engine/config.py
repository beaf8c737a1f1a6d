"""Workflow engine configuration."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["EngineConfig"]


@dataclass
class EngineConfig:
    """User-facing messages and limits of the workflow engine.

    Attributes:
        generic_error_message: Sent when a step fails for an internal reason.
        handler_error_message: Sent when a handler fails without a message.
        invalid_input_message: Sent when validation fails without a message.
        timeout_message: Sent when the user answers after a state's timeout.
        ai_placeholder_message: Sent by ai_processing states without a handler.
        rollback_message: Sent after a rollback to a state without a prompt.
        rollback_failed_message: Sent when there is nothing to roll back.
        max_chain_steps: Upper bound of steps run by one
            :meth:`WorkflowEngine.execute_until_input` call.
    """

    generic_error_message: str = "Something went wrong on our side. Please try again."
    handler_error_message: str = "An error occurred while processing your request."
    invalid_input_message: str = "Invalid input"
    timeout_message: str = "This conversation has expired. Please start again."
    ai_placeholder_message: str = "AI processing..."
    rollback_message: str = "Going back to the previous step."
    rollback_failed_message: str = "There is no previous step to go back to."
    max_chain_steps: int = 10
