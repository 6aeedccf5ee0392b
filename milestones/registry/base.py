"""Registry artifacts - Base class and utilities

A registry artifact is a system-owned service exposed as a table of named
methods. Every method handler has the same shape:

    handler(args: list[Any], invoker_id: str) -> dict[str, Any]

`invoker_id` is the acting principal supplied by the host, never by the
caller's arguments. Handlers return a result dict; failures use the
standardized error shape from errors.py.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from .errors import ErrorCode, validation_error
from .types import MethodInfo

logger = logging.getLogger(__name__)

MethodHandler = Callable[[list[Any], str], dict[str, Any]]


@dataclass
class RegistryMethod:
    """A method exposed by a registry artifact"""
    name: str
    handler: MethodHandler
    cost: int  # 0 = free
    description: str


class RegistryArtifact:
    """Base class for registry artifacts (system services)"""

    id: str
    description: str
    methods: dict[str, RegistryMethod]

    def __init__(self, artifact_id: str, description: str) -> None:
        self.id = artifact_id
        self.description = description
        self.methods = {}

    def register_method(
        self,
        name: str,
        handler: MethodHandler,
        cost: int = 0,
        description: str = ""
    ) -> None:
        """Register a callable method on this artifact"""
        self.methods[name] = RegistryMethod(
            name=name,
            handler=handler,
            cost=cost,
            description=description
        )

    def get_method(self, method_name: str) -> RegistryMethod | None:
        """Get a method by name"""
        return self.methods.get(method_name)

    def list_methods(self) -> list[MethodInfo]:
        """List available methods"""
        return [
            {"name": m.name, "cost": m.cost, "description": m.description}
            for m in self.methods.values()
        ]

    def invoke(self, method_name: str, args: list[Any], invoker_id: str) -> dict[str, Any]:
        """Dispatch a method call on behalf of `invoker_id`.

        Unknown methods are a validation error listing what is available.
        """
        method = self.get_method(method_name)
        if method is None:
            return validation_error(
                f"{self.id} has no method '{method_name}'",
                code=ErrorCode.UNKNOWN_METHOD,
                available=sorted(self.methods),
            )
        logger.debug("%s.%s invoked by %s", self.id, method_name, invoker_id)
        return method.handler(list(args), invoker_id)

    def get_interface(self) -> dict[str, Any]:
        """Get the interface schema for this artifact.

        Returns a JSON Schema-compatible interface describing the artifact's
        tools (methods). Override in subclasses to add inputSchema per method.
        """
        tools = []
        for method in self.methods.values():
            tools.append({
                "name": method.name,
                "description": method.description,
                "cost": method.cost,
            })
        return {
            "description": self.description,
            "tools": tools,
        }

