"""Insurance product subscription workflow."""

from __future__ import annotations

from litestar_chatflows.core.definition import PromptTemplate, State, Transition, WorkflowDefinition
from litestar_chatflows.core.types import StateType, ValidationType
from litestar_chatflows.validation.rules import ValidationRule

__all__ = ["PRODUCT_PURCHASE_ID", "product_purchase_workflow"]

PRODUCT_PURCHASE_ID = "product_purchase"

_PRODUCT_MENU = (
    "Which product would you like to subscribe to?\n\n"
    "1. Takaful Auto\n"
    "2. Takaful Santé\n"
    "3. Takaful Habitation\n"
    "4. Takaful Vie\n\n"
    "Reply with the number of the product."
)

_SUMMARY = (
    "Here is a summary of your request:\n\n"
    "Product: {{product_name}}\n"
    "Name: {{full_name}}\n"
    "Phone: {{phone_number}}\n"
    "Email: {{email}}\n\n"
    "Do you confirm? (yes/no)"
)


def product_purchase_workflow() -> WorkflowDefinition:
    """Build the product subscription workflow.

    Collects the product, the customer's name, phone number and email, asks for
    a confirmation and either registers the request or cancels it.
    """
    return WorkflowDefinition(
        id=PRODUCT_PURCHASE_ID,
        name="Product purchase",
        description="Collects the details needed to subscribe to a Takaful product.",
        initial_state="ask_product",
        states=(
            State(
                id="ask_product",
                type=StateType.INPUT,
                prompt=_PRODUCT_MENU,
                validation=(
                    ValidationRule(
                        field="product_type",
                        type=ValidationType.ENUM,
                        required=True,
                        options=("1", "2", "3", "4"),
                        message="Please reply with a number between 1 and 4.",
                    ),
                ),
                next_state="ask_full_name",
            ),
            State(
                id="ask_full_name",
                type=StateType.INPUT,
                prompt="What is your full name?",
                validation=(ValidationRule(field="full_name", type=ValidationType.STRING, required=True, min=3, max=100),),
                next_state="ask_phone",
            ),
            State(
                id="ask_phone",
                type=StateType.INPUT,
                prompt="What phone number can we reach you on?",
                validation=(
                    ValidationRule(
                        field="phone_number",
                        type=ValidationType.PHONE,
                        required=True,
                        message="Please enter a valid Cameroonian phone number, for example 690000000.",
                    ),
                ),
                next_state="ask_email",
            ),
            State(
                id="ask_email",
                type=StateType.INPUT,
                prompt="What is your email address?",
                validation=(ValidationRule(field="email", type=ValidationType.EMAIL, required=True),),
                next_state="summary",
            ),
            State(
                id="summary",
                type=StateType.PROCESSING,
                handler="generate_purchase_summary",
                next_state="confirm",
            ),
            State(
                id="confirm",
                type=StateType.DECISION,
                prompt=PromptTemplate(_SUMMARY, ("product_name", "full_name", "phone_number", "email")),
                validation=(
                    ValidationRule(
                        field="confirmation",
                        type=ValidationType.REGEX,
                        required=True,
                        pattern=r"(?i)^(oui|non|yes|no)$",
                        message="Please answer yes or no.",
                    ),
                    ValidationRule(field="confirmed", type=ValidationType.BOOLEAN, required=True),
                ),
                timeout=30 * 60,
            ),
            State(
                id="process",
                type=StateType.PROCESSING,
                handler="process_subscription",
                next_state="completed",
            ),
            State(
                id="completed",
                type=StateType.COMPLETED,
                prompt=PromptTemplate(
                    "Thank you {{full_name}}! An advisor will contact you shortly about {{product_name}}.",
                    ("full_name", "product_name"),
                ),
            ),
            State(
                id="cancelled",
                type=StateType.CANCELLED,
                prompt="Your request has been cancelled. Feel free to write to us whenever you like.",
            ),
        ),
        transitions=(
            Transition(source="confirm", target="process", condition="data.confirmed == true", priority=10),
            Transition(source="confirm", target="cancelled", condition="data.confirmed == false", priority=5),
        ),
        metadata={"category": "product_purchase"},
    )
