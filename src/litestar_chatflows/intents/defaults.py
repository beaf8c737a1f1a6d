"""Default intent set.

French-first intents for an insurance and banking assistant, with English
equivalents. Keywords are matched after normalization, so apostrophes and
punctuation are ignored (``c'est`` matches ``cest``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from litestar_chatflows.intents.models import IntentDefinition

if TYPE_CHECKING:
    from litestar_chatflows.intents.registry import IntentRegistry

__all__ = ["default_intents", "register_default_intents"]


def default_intents() -> list[IntentDefinition]:
    """Build the default intent definitions, highest priority first within a topic."""
    return [
        IntentDefinition(
            name="greeting",
            category="greeting",
            description="User greeting",
            keywords=(("bonjour",), ("salut",), ("bonsoir",), ("hello",), ("hi",), ("salam",), ("hey",)),
            patterns=(
                r"^(bonjour|salut|bonsoir|hello|hi|salam|hey)[\s!.]*$",
                r"^(assalam\s*alaykum|salam\s*alaykoum)[\s!.]*$",
            ),
            examples=("bonjour", "salut", "bonsoir", "hello", "hi", "hey", "salam"),
            priority=10,
        ),
        IntentDefinition(
            name="product_inquiry",
            category="product_inquiry",
            description="Question about a product",
            keywords=(
                ("info", "produit"),
                ("information", "assurance"),
                ("cest", "quoi"),
                ("expliquer",),
                ("présenter",),
                ("détails",),
                ("renseigner",),
                ("tell", "about"),
                ("what", "is"),
            ),
            patterns=(
                r"c'est\s+quoi\s+(le|la|l'|un|une)?\s*(\w+)",
                r"(parlez|parler|expliquer|présenter)\s+(moi|nous)?\s+(de|sur|le|la)\s+(\w+)",
                r"tell\s+me\s+(more\s+)?about\s+(\w+)",
            ),
            examples=("c'est quoi takaful", "tell me about your products"),
            workflow_id="product_inquiry",
            priority=8,
        ),
        IntentDefinition(
            name="product_purchase",
            category="product_purchase",
            description="Subscription to a product",
            keywords=(
                ("acheter",),
                ("souscrire",),
                ("commander",),
                ("prendre", "assurance"),
                ("je", "veux"),
                ("intéressé",),
                ("buy",),
                ("subscribe",),
            ),
            patterns=(
                r"(je\s+veux|j'aimerais|je\s+souhaite)\s+(acheter|souscrire|prendre)",
                r"(acheter|souscrire|commander)\s+(un|une|le|la|l')?\s*(\w+)",
                r"(i\s+want\s+to|i'd\s+like\s+to)\s+(buy|subscribe)",
            ),
            examples=("je veux souscrire", "i want to subscribe"),
            workflow_id="product_purchase",
            priority=9,
        ),
        IntentDefinition(
            name="complaint",
            category="complaint",
            description="Complaint or problem report",
            keywords=(
                ("réclamation",),
                ("plainte",),
                ("problème",),
                ("pas", "content"),
                ("insatisfait",),
                ("erreur",),
                ("bug",),
                ("complaint",),
            ),
            patterns=(
                r"(j'ai|il\s+y\s+a)\s+un\s+(problème|bug|erreur)",
                r"(pas|pas\s+du\s+tout|très)\s+(content|satisfait)",
            ),
            workflow_id="complaint_handling",
            priority=9,
        ),
        IntentDefinition(
            name="support",
            category="support",
            description="Request for help",
            keywords=(
                ("aide",),
                ("aidez", "moi"),
                ("besoin", "aide"),
                ("comment",),
                ("pourquoi",),
                ("question",),
                ("help",),
            ),
            patterns=(
                r"(j'ai\s+besoin\s+d'|besoin\s+de)\s*aide",
                r"comment\s+(faire|puis-je|je\s+peux)",
            ),
            priority=7,
        ),
        IntentDefinition(
            name="contact_info",
            category="support",
            description="Request for contact details",
            keywords=(
                ("contact",),
                ("contacter",),
                ("joindre",),
                ("téléphone",),
                ("email",),
                ("adresse",),
                ("bureau",),
            ),
            patterns=(
                r"(comment|où|quel)\s+(vous\s+)?(contacter|joindre)",
                r"(numéro|téléphone|email|adresse)\s+(de\s+)?(contact|bureau)",
            ),
            priority=7,
        ),
        IntentDefinition(
            name="pricing_inquiry",
            category="product_inquiry",
            description="Question about prices",
            keywords=(("prix",), ("tarif",), ("coût",), ("combien",), ("montant",), ("payer",), ("price",), ("how", "much")),
            patterns=(
                r"(quel|c'est|combien)\s+(est\s+)?(le\s+)?(prix|tarif|coût)",
                r"combien\s+(ça\s+)?coûte",
                r"(je\s+dois|il\s+faut)\s+payer\s+combien",
                r"how\s+much\s+(does\s+it\s+|is\s+it\s+)?cost",
            ),
            workflow_id="pricing_inquiry",
            priority=8,
        ),
        IntentDefinition(
            name="cancellation",
            category="cancellation",
            description="Cancel or stop",
            keywords=(
                ("annuler",),
                ("annulation",),
                ("arrêter",),
                ("stop",),
                ("résilier",),
                ("résiliation",),
                ("cancel",),
            ),
            patterns=(
                r"(je\s+veux|j'aimerais)\s+(annuler|arrêter|résilier)",
                r"(annulation|résiliation)\s+(de|du)",
            ),
            priority=9,
        ),
    ]


def register_default_intents(registry: IntentRegistry) -> None:
    """Register :func:`default_intents` with ``registry``."""
    for intent in default_intents():
        registry.register(intent)
