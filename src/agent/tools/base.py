"""
agent.tools.base - Base tool interface, input schema base and result container.

All agent tools inherit from BaseTool and return ToolResult.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, is_dataclass
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from application.context import SessionContext


class ToolInput(BaseModel):
    """Base for every tool argument schema.

    Unknown fields are dropped, so identity-shaped arguments the model
    invents (user_id, email, ...) never reach a tool.
    """

    model_config = ConfigDict(extra="ignore")


class NoArguments(ToolInput):
    """Schema for tools that take no input."""


@dataclass
class ToolResult:
    """Result returned by a tool execution.

    output:  String fed back to the model as the tool message.
    data:    Structured result for in-process callers (not passed through the LLM).
    """
    output: str
    data: Any = None


class BaseTool(ABC):
    """Abstract base for all agent tools."""

    name: str
    description: str

    @abstractmethod
    async def execute(self, ctx: SessionContext, **kwargs) -> ToolResult:
        """Execute the tool with the given session context and arguments."""
        ...

    @abstractmethod
    def get_schema(self) -> type[BaseModel]:
        """Return the Pydantic schema for this tool's input arguments."""
        ...


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def to_payload(value: Any) -> Any:
    """Turn dataclasses (and lists of them) into plain JSON-ready structures."""
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    if isinstance(value, (list, tuple)):
        return [to_payload(v) for v in value]
    if isinstance(value, dict):
        return {k: to_payload(v) for k, v in value.items()}
    return value


def dump_json(value: Any) -> str:
    """Deterministic JSON: sorted keys, ISO dates."""
    return json.dumps(to_payload(value), sort_keys=True, default=_json_default)
