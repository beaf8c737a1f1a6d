"""Minimal example of litestar-chatflows integration.

This example wires the ChatflowPlugin into a chat webhook: messages from users
with an active workflow continue it, other messages are classified and may
start the workflow of their intent.

Run with:
    cd examples/minimal
    litestar run

Or:
    uvicorn app:app --reload
"""

from __future__ import annotations

import logging
from typing import Any

from litestar import Litestar, get, post

from litestar_chatflows import (
    ChatflowPlugin,
    ChatflowPluginConfig,
    ClassificationContext,
    IntentClassifier,
    WorkflowEngine,
)

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "Sorry, I did not understand. You can say hello or ask to subscribe to a product."
CANCEL_WORDS = frozenset({"stop", "cancel", "annuler"})


# =============================================================================
# Route Handlers
# =============================================================================


@get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@post("/messages")
async def receive_message(
    data: dict[str, str],
    workflow_engine: WorkflowEngine,
    intent_classifier: IntentClassifier,
) -> dict[str, Any]:
    """Handle one inbound chat message.

    Expects ``{"from": "<phone number>", "text": "<message>"}``.
    """
    user_id, text = data["from"], data["text"].strip()

    if text.lower() in CANCEL_WORDS and await workflow_engine.cancel_workflow(user_id, "Cancelled by user"):
        return {"reply": "Okay, I stopped the current request.", "workflow_id": None, "completed": True}

    result = await workflow_engine.continue_workflow(user_id, text)
    if result is not None:
        return {"reply": result.message, "workflow_id": result.context.workflow_id, "completed": result.completed}

    classification = await intent_classifier.classify_intent(text, ClassificationContext(user_id=user_id))
    intent = classification.primary_intent
    workflow_id = intent.workflow_id if intent_classifier.is_confident(classification) else None
    if intent.name == "greeting":
        workflow_id = "name_collection"
    if workflow_id is None or not workflow_engine.has_workflow(workflow_id):
        logger.info("No workflow for message", extra={"user_id": user_id, "intent": intent.name})
        return {"reply": FALLBACK_REPLY, "workflow_id": None, "completed": False}

    context = await workflow_engine.start_workflow(user_id, workflow_id)
    result = await workflow_engine.execute_until_input(user_id, context, text)
    return {"reply": result.message, "workflow_id": workflow_id, "completed": result.completed}


@get("/users/{user_id:str}/workflow")
async def get_user_workflow(user_id: str, workflow_engine: WorkflowEngine) -> dict[str, Any]:
    """Return the user's active workflow, if any."""
    context = await workflow_engine.get_active_workflow(user_id)
    if context is None:
        return {"active": False}
    return {
        "active": True,
        "workflow_id": context.workflow_id,
        "current_state": context.current_state,
        "data": context.data,
    }


# =============================================================================
# Application Setup
# =============================================================================

app = Litestar(
    route_handlers=[health_check, receive_message, get_user_workflow],
    plugins=[ChatflowPlugin(config=ChatflowPluginConfig())],
    debug=True,
)
