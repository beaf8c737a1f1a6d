"""Workflow execution engine and its registries."""

from __future__ import annotations

from litestar_chatflows.engine.config import EngineConfig
from litestar_chatflows.engine.engine import WorkflowEngine
from litestar_chatflows.engine.locks import UserLockManager
from litestar_chatflows.engine.registry import HandlerRegistry, WorkflowRegistry

__all__ = [
    "EngineConfig",
    "HandlerRegistry",
    "UserLockManager",
    "WorkflowEngine",
    "WorkflowRegistry",
]
