"""Litestar plugin for chatflow integration.

This module provides the ChatflowPlugin, which builds the workflow engine, the
intent classifier and the validation service once at application start and
exposes them through dependency injection.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from litestar.di import Provide
from litestar.plugins import InitPluginProtocol

from litestar_chatflows.engine.config import EngineConfig
from litestar_chatflows.engine.engine import WorkflowEngine
from litestar_chatflows.engine.registry import HandlerRegistry, WorkflowRegistry
from litestar_chatflows.intents.classifier import IntentClassifier
from litestar_chatflows.intents.defaults import register_default_intents
from litestar_chatflows.intents.models import IntentClassifierConfig
from litestar_chatflows.intents.registry import EntityExtractorRegistry, IntentRegistry
from litestar_chatflows.store.memory import InMemoryContextStore
from litestar_chatflows.validation.rules import ValidationConfig
from litestar_chatflows.validation.service import ValidationService
from litestar_chatflows.workflows import builtin_handlers, builtin_workflows

if TYPE_CHECKING:
    from litestar.config.app import AppConfig

    from litestar_chatflows.core.definition import WorkflowDefinition
    from litestar_chatflows.core.protocols import ContextStore, CustomValidator, EntityExtractor, EventBus, Handler
    from litestar_chatflows.intents.models import IntentDefinition

__all__ = ["ChatflowPlugin", "ChatflowPluginConfig"]

logger = logging.getLogger(__name__)


@dataclass
class ChatflowPluginConfig:
    """Configuration for the ChatflowPlugin.

    Attributes:
        store: Context store used by the engine. Defaults to an
            :class:`~litestar_chatflows.store.InMemoryContextStore`.
        registry: Optional pre-configured WorkflowRegistry.
        handlers: Optional pre-configured HandlerRegistry.
        intents: Optional pre-configured IntentRegistry.
        engine_config: Messages and limits of the workflow engine.
        classifier_config: Settings of the intent classifier.
        validation_config: Settings of the validation service.
        event_bus: Optional receiver of workflow lifecycle events.
        register_defaults: Register the bundled workflows, their handlers and
            the default intents on app startup.
        workflows: Workflow definitions to register on app startup.
        workflow_handlers: Handlers to register on app startup.
        intent_definitions: Intents to register on app startup.
        entity_extractors: Custom entity extractors to register on app startup.
        custom_validators: Custom validators to register on app startup.
        dependency_key_engine: Dependency key of the WorkflowEngine.
        dependency_key_classifier: Dependency key of the IntentClassifier.
        dependency_key_validation: Dependency key of the ValidationService.
        dependency_key_registry: Dependency key of the WorkflowRegistry.
    """

    store: ContextStore | None = None
    registry: WorkflowRegistry | None = None
    handlers: HandlerRegistry | None = None
    intents: IntentRegistry | None = None
    engine_config: EngineConfig | None = None
    classifier_config: IntentClassifierConfig | None = None
    validation_config: ValidationConfig | None = None
    event_bus: EventBus | None = None
    register_defaults: bool = True
    workflows: list[WorkflowDefinition] = field(default_factory=list)
    workflow_handlers: list[Handler] = field(default_factory=list)
    intent_definitions: list[IntentDefinition] = field(default_factory=list)
    entity_extractors: list[EntityExtractor] = field(default_factory=list)
    custom_validators: list[CustomValidator] = field(default_factory=list)
    dependency_key_engine: str = "workflow_engine"
    dependency_key_classifier: str = "intent_classifier"
    dependency_key_validation: str = "validation_service"
    dependency_key_registry: str = "workflow_registry"


class ChatflowPlugin(InitPluginProtocol):
    """Litestar plugin for chatflow management.

    Example:
        Basic usage::

            from litestar import Litestar, post
            from litestar_chatflows import ChatflowPlugin, IntentClassifier, WorkflowEngine


            @post("/messages")
            async def receive(
                data: dict[str, str],
                workflow_engine: WorkflowEngine,
                intent_classifier: IntentClassifier,
            ) -> dict[str, str]:
                result = await workflow_engine.continue_workflow(data["from"], data["text"])
                if result is None:
                    classification = await intent_classifier.classify_intent(data["text"])
                    ...
                return {"reply": result.message}


            app = Litestar(route_handlers=[receive], plugins=[ChatflowPlugin()])
    """

    __slots__ = ("_classifier", "_config", "_engine", "_validation")

    def __init__(self, config: ChatflowPluginConfig | None = None) -> None:
        """Initialize the plugin.

        Args:
            config: Optional configuration for the plugin.
        """
        self._config = config or ChatflowPluginConfig()
        self._engine: WorkflowEngine | None = None
        self._classifier: IntentClassifier | None = None
        self._validation: ValidationService | None = None

    @property
    def engine(self) -> WorkflowEngine:
        """Get the workflow engine.

        Raises:
            RuntimeError: If accessed before plugin initialization.
        """
        if self._engine is None:
            msg = "ChatflowPlugin has not been initialized. Access engine after app startup."
            raise RuntimeError(msg)
        return self._engine

    @property
    def classifier(self) -> IntentClassifier:
        """Get the intent classifier.

        Raises:
            RuntimeError: If accessed before plugin initialization.
        """
        if self._classifier is None:
            msg = "ChatflowPlugin has not been initialized. Access classifier after app startup."
            raise RuntimeError(msg)
        return self._classifier

    @property
    def validation(self) -> ValidationService:
        """Get the validation service.

        Raises:
            RuntimeError: If accessed before plugin initialization.
        """
        if self._validation is None:
            msg = "ChatflowPlugin has not been initialized. Access validation after app startup."
            raise RuntimeError(msg)
        return self._validation

    def on_app_init(self, app_config: AppConfig) -> AppConfig:
        """Build the services and register their dependency providers.

        Args:
            app_config: The Litestar application configuration.

        Returns:
            The modified application configuration.

        Raises:
            WorkflowValidationError: If a configured workflow is inconsistent.
        """
        config = self._config

        validation = ValidationService(config=config.validation_config)
        for validator in config.custom_validators:
            validation.register_custom_validator(validator)

        intents = config.intents or IntentRegistry()
        extractors = EntityExtractorRegistry()
        if config.register_defaults:
            register_default_intents(intents)
        for intent in config.intent_definitions:
            intents.register(intent)
        for extractor in config.entity_extractors:
            extractors.register(extractor)
        classifier = IntentClassifier(intents, extractors, config.classifier_config)

        engine = WorkflowEngine(
            config.registry or WorkflowRegistry(),
            config.store or InMemoryContextStore(),
            handlers=config.handlers,
            validator=validation,
            config=config.engine_config,
            event_bus=config.event_bus,
        )
        handlers = [*builtin_handlers(), *config.workflow_handlers] if config.register_defaults else config.workflow_handlers
        workflows = [*builtin_workflows(), *config.workflows] if config.register_defaults else config.workflows
        for handler in handlers:
            engine.register_handler(handler)
        for definition in workflows:
            engine.register_workflow(definition)

        self._engine = engine
        self._classifier = classifier
        self._validation = validation
        logger.info(
            "Chatflow plugin initialized",
            extra={"workflows": [definition.id for definition in engine.get_available_workflows()]},
        )

        def provide_engine() -> WorkflowEngine:
            return engine

        def provide_classifier() -> IntentClassifier:
            return classifier

        def provide_validation() -> ValidationService:
            return validation

        def provide_registry() -> WorkflowRegistry:
            return engine.registry

        app_config.dependencies[config.dependency_key_engine] = Provide(provide_engine, sync_to_thread=False)
        app_config.dependencies[config.dependency_key_classifier] = Provide(provide_classifier, sync_to_thread=False)
        app_config.dependencies[config.dependency_key_validation] = Provide(provide_validation, sync_to_thread=False)
        app_config.dependencies[config.dependency_key_registry] = Provide(provide_registry, sync_to_thread=False)

        return app_config
