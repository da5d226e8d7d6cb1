"""Shared enums for dmux-panel models."""

from __future__ import annotations

from enum import Enum


class AgentRole(str, Enum):
    BUILD = "build"
    REVIEW = "review"


class CompletionAction(str, Enum):
    """Post-completion actions, declared in their emission order."""

    TEST = "test"
    PUSH = "push"
    PR = "pr"
