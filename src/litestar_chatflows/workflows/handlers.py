"""Handlers used by the bundled workflows."""

from __future__ import annotations

import asyncio
import logging
import re
import time
from typing import TYPE_CHECKING, Any

from litestar_chatflows.core.context import utcnow
from litestar_chatflows.core.results import HandlerFailure, HandlerSuccess

if TYPE_CHECKING:
    from litestar_chatflows.core.context import WorkflowContext
    from litestar_chatflows.core.results import HandlerResult

__all__ = [
    "PRODUCT_NAMES",
    "GeneratePurchaseSummaryHandler",
    "ProcessSubscriptionHandler",
    "SaveUserNameHandler",
    "ValidateUserNameHandler",
]

logger = logging.getLogger(__name__)

PRODUCT_NAMES: dict[str, str] = {
    "1": "Takaful Auto",
    "2": "Takaful Santé",
    "3": "Takaful Habitation",
    "4": "Takaful Vie",
}

_INVALID_NAME_PATTERNS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"^\d+$",
        r"^[!@#$%^&*()]+$",
        r"^(bonjour|salut|hello|hi|hey|salam|assalam|bonsoir|bonne\s*journée)$",
        r"^(ok|oui|non|yes|no|merci|thanks|d'?accord)$",
        r"\?",
        r"^(c'est|cest|qu'est|quest|quoi|comment|pourquoi|qui|quand|où|ou|est-ce|quel|quelle|what|who|how|why)\b",
        r"(quoi|comment|pourquoi|qui|quand|où|quel|quelle)\s+",
    )
)


class ValidateUserNameHandler:
    """Reject answers that are obviously not a name and normalize the casing.

    Greetings, questions, bare numbers and yes/no answers send the user to the
    ``retry_name`` state.
    """

    name = "validate_user_name"

    retry_message = (
        "I did not quite catch your name.\n\n"
        'For example: "Ahmed", "Marie", "Jean-Paul".'
    )

    async def execute(self, context: WorkflowContext, user_input: str | None = None) -> HandlerResult:
        user_name = str(context.get("user_name") or "").strip()
        if not user_name:
            return HandlerFailure(error="The name is missing.")

        for pattern in _INVALID_NAME_PATTERNS:
            if pattern.search(user_name):
                logger.info(
                    "Rejected user name",
                    extra={"user_id": context.user_id, "pattern": pattern.pattern},
                )
                return HandlerSuccess(output=self.retry_message, data={"user_name": None}, next_state="retry_name")

        return HandlerSuccess(data={"user_name": self.clean_name(user_name)})

    @staticmethod
    def clean_name(name: str) -> str:
        """Capitalize every word of ``name``.

        Example:
            >>> ValidateUserNameHandler.clean_name("jean-paul  MBARGA")
            'Jean-paul Mbarga'
        """
        return " ".join(word[:1].upper() + word[1:].lower() for word in name.split())


class SaveUserNameHandler:
    """Mark the collected name as ready to be stored on the user's profile."""

    name = "save_user_name"

    async def execute(self, context: WorkflowContext, user_input: str | None = None) -> HandlerResult:
        user_name = context.get("user_name")
        if not user_name:
            return HandlerFailure(error="The name is missing and cannot be saved.")

        logger.info("User name ready to be saved", extra={"user_id": context.user_id, "workflow_id": context.workflow_id})
        return HandlerSuccess(
            data={
                "name_validated": True,
                "save_to_database": True,
                "name_collected_at": utcnow().isoformat(),
            }
        )


class GeneratePurchaseSummaryHandler:
    """Resolve the chosen product number into a product name."""

    name = "generate_purchase_summary"

    def __init__(self, products: dict[str, str] | None = None) -> None:
        self.products = dict(products or PRODUCT_NAMES)

    async def execute(self, context: WorkflowContext, user_input: str | None = None) -> HandlerResult:
        product_type = str(context.get("product_type", ""))
        return HandlerSuccess(data={"product_name": self.products.get(product_type, "Unknown product")})


class ProcessSubscriptionHandler:
    """Register the subscription request and assign it a file number.

    Args:
        delay: Seconds to wait, simulating a call to the back office.
    """

    name = "process_subscription"

    def __init__(self, delay: float = 0.0) -> None:
        self.delay = delay

    async def execute(self, context: WorkflowContext, user_input: str | None = None) -> HandlerResult:
        logger.info(
            "Processing subscription",
            extra={
                "user_id": context.user_id,
                "workflow_id": context.workflow_id,
                "product_type": context.get("product_type"),
            },
        )
        file_number = f"TKF-{int(time.time() * 1000)}-{context.user_id}"
        if self.delay:
            await asyncio.sleep(self.delay)

        data: dict[str, Any] = {"file_number": file_number, "processed_at": utcnow().isoformat()}
        logger.info("Subscription processed", extra={"user_id": context.user_id, "file_number": file_number})
        return HandlerSuccess(output=f"Your file number is: {file_number}", data=data)
