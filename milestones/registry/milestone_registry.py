"""Milestone Registry - one milestone per principal

Each principal holds at most one milestone record. The record can carry two
optional annotations, a priority tier and a block deadline, stored in their
own tables under the same owner key.

**Lifecycle:**
1. initialize(description) creates the caller's record, or
   assign(target, description) creates one for any other principal
2. modify(description, completed) overwrites both fields of the caller's record
3. set_priority(tier) / set_deadline(increment) upsert annotations
4. terminate() deletes the caller's record only

Annotations are not removed by terminate. They stay keyed to the owner and
re-attach if that owner gets a new record later. get_status() ignores them
and reports on the core record only.

Write methods fail fast with no partial effects. Existence is checked before
arguments, so a missing record reports not_found even for bad arguments.
The read methods never fail.
"""

from __future__ import annotations

import logging
from typing import Any

from ..config import get_validated_config
from ..config_schema import RegistryConfig
from .base import RegistryArtifact
from .chain import BlockHeight, HeightSource
from .errors import ErrorCode, resource_error, validation_error
from .logger import EventLogger
from .store import MilestoneStore
from .types import (
    ConfirmResult,
    DeadlineSetResult,
    DeadlineView,
    MilestoneRecord,
    PriorityAnnotation,
    PriorityView,
    StatusView,
    TemporalBound,
)

logger = logging.getLogger(__name__)


class MilestoneRegistry(RegistryArtifact):
    """Registry artifact holding per-principal milestones.

    The acting principal is always the `invoker_id` passed in by the host.
    Only assign takes a principal as an argument, and it performs no check
    on the relationship between invoker and target.

    All method costs and descriptions are configurable via config.yaml.
    """

    store: MilestoneStore
    height: HeightSource
    event_logger: EventLogger | None

    def __init__(
        self,
        store: MilestoneStore | None = None,
        height: HeightSource | None = None,
        registry_config: RegistryConfig | None = None,
        event_logger: EventLogger | None = None,
    ) -> None:
        """
        Args:
            store: Keyed tables to read and write (fresh in-memory store if omitted)
            height: Source of the current block height (starts at 0 if omitted)
            registry_config: Optional registry config (uses global if not provided)
            event_logger: Optional JSONL log of committed writes
        """
        cfg = registry_config or get_validated_config().registry

        super().__init__(
            artifact_id=cfg.id,
            description=cfg.description
        )
        self.store = store if store is not None else MilestoneStore.in_memory()
        self.height = height if height is not None else BlockHeight(max_height=cfg.max_height)
        self.event_logger = event_logger
        self.max_description_length = cfg.description_max_length
        self.max_tier = cfg.max_tier
        self.max_height = cfg.max_height

        methods_cfg = cfg.methods
        for name, handler in (
            ("initialize", self._initialize),
            ("assign", self._assign),
            ("modify", self._modify),
            ("terminate", self._terminate),
            ("set_priority", self._set_priority),
            ("set_deadline", self._set_deadline),
            ("get_status", self._get_status),
            ("get_priority", self._get_priority),
            ("get_deadline", self._get_deadline),
        ):
            method_cfg = getattr(methods_cfg, name)
            self.register_method(
                name=name,
                handler=handler,
                cost=method_cfg.cost,
                description=method_cfg.description
            )

    # ------------------------------------------------------------------
    # Validation helpers. Each returns an error dict, or None when valid.
    # ------------------------------------------------------------------

    def _check_description(self, method: str, args: list[Any], index: int = 0) -> dict[str, Any] | None:
        if len(args) <= index:
            return validation_error(
                f"{method} requires a description",
                code=ErrorCode.MISSING_ARGUMENT,
            )
        description = args[index]
        if not isinstance(description, str):
            return validation_error(
                f"Description must be a string, got {type(description).__name__}",
                code=ErrorCode.INVALID_TYPE,
            )
        if not description:
            return validation_error("Description must not be empty")
        if len(description) > self.max_description_length:
            return validation_error(
                f"Description is {len(description)} characters, "
                f"limit is {self.max_description_length}",
                max_length=self.max_description_length,
            )
        return None

    def _require_record(self, owner: str) -> dict[str, Any] | None:
        if not self.store.records.contains(owner):
            return resource_error(
                f"No milestone for {owner}. Create one with initialize first.",
                code=ErrorCode.NOT_FOUND,
            )
        return None

    def _require_no_record(self, owner: str) -> dict[str, Any] | None:
        if self.store.records.contains(owner):
            return resource_error(
                f"{owner} already has a milestone",
                code=ErrorCode.ALREADY_EXISTS,
            )
        return None

    @staticmethod
    def _is_int(value: Any) -> bool:
        # bool is an int subclass but never a valid tier or increment
        return isinstance(value, int) and not isinstance(value, bool)

    def _emit(self, event_type: str, owner: str, **data: Any) -> None:
        # Runs after the store write, so a log failure must not fail the call
        if self.event_logger is None:
            return
        try:
            self.event_logger.log(event_type, {
                "owner": owner,
                "block_height": self.height.current,
                **data,
            })
        except OSError:
            logger.exception("Could not log %s for %s", event_type, owner)

    def _create(self, owner: str, description: str) -> None:
        record: MilestoneRecord = {"description": description, "completed": False}
        self.store.records.put(owner, dict(record))

    # ------------------------------------------------------------------
    # Write methods
    # ------------------------------------------------------------------

    def _initialize(self, args: list[Any], invoker_id: str) -> dict[str, Any]:
        """Create the invoker's milestone.

        Args: [description]
        """
        error = self._require_no_record(invoker_id) or self._check_description("initialize", args)
        if error:
            return error

        self._create(invoker_id, args[0])
        self._emit("milestone_initialized", invoker_id, description=args[0])
        logger.debug("Milestone initialized for %s", invoker_id)
        result: ConfirmResult = {
            "success": True,
            "message": "Milestone created",
            "owner": invoker_id,
        }
        return dict(result)

    def _assign(self, args: list[Any], invoker_id: str) -> dict[str, Any]:
        """Create a milestone for another principal.

        Any invoker may assign to any target.

        Args: [target_id, description]
        """
        if not args:
            return validation_error(
                "assign requires [target_id, description]",
                code=ErrorCode.MISSING_ARGUMENT,
            )
        target = args[0]
        if not isinstance(target, str) or not target:
            return validation_error(
                f"Target must be a non-empty principal id, got {target!r}",
                code=ErrorCode.INVALID_TYPE if not isinstance(target, str) else ErrorCode.INVALID_ARGUMENT,
            )

        error = self._require_no_record(target) or self._check_description("assign", args, index=1)
        if error:
            return error

        self._create(target, args[1])
        self._emit("milestone_assigned", target, assigned_by=invoker_id, description=args[1])
        logger.debug("Milestone assigned to %s by %s", target, invoker_id)
        result: ConfirmResult = {
            "success": True,
            "message": f"Milestone created for {target}",
            "owner": target,
        }
        return dict(result)

    def _modify(self, args: list[Any], invoker_id: str) -> dict[str, Any]:
        """Overwrite the invoker's description and completion flag together.

        Args: [description, completed]
        """
        error = self._require_record(invoker_id) or self._check_description("modify", args)
        if error:
            return error
        if len(args) < 2:
            return validation_error(
                "modify requires [description, completed]",
                code=ErrorCode.MISSING_ARGUMENT,
            )
        completed = args[1]
        if not isinstance(completed, bool):
            return validation_error(
                f"Completed must be true or false, got {type(completed).__name__}",
                code=ErrorCode.INVALID_TYPE,
            )

        record: MilestoneRecord = {"description": args[0], "completed": completed}
        self.store.records.put(invoker_id, dict(record))
        self._emit("milestone_modified", invoker_id, description=args[0], completed=completed)
        result: ConfirmResult = {
            "success": True,
            "message": "Milestone updated",
            "owner": invoker_id,
        }
        return dict(result)

    def _terminate(self, args: list[Any], invoker_id: str) -> dict[str, Any]:
        """Delete the invoker's milestone. Priority and deadline rows stay.

        Args: []
        """
        error = self._require_record(invoker_id)
        if error:
            return error

        self.store.records.delete(invoker_id)
        self._emit("milestone_terminated", invoker_id)
        logger.debug("Milestone terminated for %s", invoker_id)
        result: ConfirmResult = {
            "success": True,
            "message": "Milestone deleted",
            "owner": invoker_id,
        }
        return dict(result)

    def _set_priority(self, args: list[Any], invoker_id: str) -> dict[str, Any]:
        """Set the priority tier on the invoker's milestone.

        Args: [tier] where 1 <= tier <= max_tier
        """
        error = self._require_record(invoker_id)
        if error:
            return error
        if not args:
            return validation_error("set_priority requires [tier]", code=ErrorCode.MISSING_ARGUMENT)
        tier = args[0]
        if not self._is_int(tier):
            return validation_error(
                f"Tier must be an integer, got {type(tier).__name__}",
                code=ErrorCode.INVALID_TYPE,
            )
        if not 1 <= tier <= self.max_tier:
            return validation_error(
                f"Tier must be between 1 and {self.max_tier}, got {tier}",
                min=1,
                max=self.max_tier,
            )

        annotation: PriorityAnnotation = {"tier": tier}
        self.store.priorities.put(invoker_id, dict(annotation))
        self._emit("priority_set", invoker_id, tier=tier)
        result: ConfirmResult = {
            "success": True,
            "message": f"Priority set to {tier}",
            "owner": invoker_id,
        }
        return dict(result)

    def _set_deadline(self, args: list[Any], invoker_id: str) -> dict[str, Any]:
        """Set a deadline `increment` blocks after the current height.

        Re-setting a deadline always clears the alert flag.

        Args: [increment] where increment > 0
        """
        error = self._require_record(invoker_id)
        if error:
            return error
        if not args:
            return validation_error("set_deadline requires [increment]", code=ErrorCode.MISSING_ARGUMENT)
        increment = args[0]
        if not self._is_int(increment):
            return validation_error(
                f"Increment must be an integer, got {type(increment).__name__}",
                code=ErrorCode.INVALID_TYPE,
            )
        if increment <= 0:
            return validation_error(f"Increment must be positive, got {increment}")

        current = self.height.current
        headroom = self.max_height - current
        if increment > headroom:
            return validation_error(
                f"Deadline would pass max height {self.max_height} "
                f"(current {current}, increment {increment})",
                max_increment=headroom,
            )

        bound: TemporalBound = {"target_block": current + increment, "alert_active": False}
        self.store.deadlines.put(invoker_id, dict(bound))
        self._emit("deadline_set", invoker_id, target_block=bound["target_block"])
        result: DeadlineSetResult = {
            "success": True,
            "message": f"Deadline set for block {bound['target_block']}",
            "owner": invoker_id,
            "target_block": bound["target_block"],
        }
        return dict(result)

    # ------------------------------------------------------------------
    # Read methods. These never fail; callers check `exists`.
    # ------------------------------------------------------------------

    def _get_status(self, args: list[Any], invoker_id: str) -> dict[str, Any]:
        """Status of the invoker's milestone.

        Args: []
        """
        record = self.store.records.get(invoker_id)
        view: StatusView
        if record is None:
            view = {"success": True, "exists": False, "description_length": 0, "completed": False}
        else:
            view = {
                "success": True,
                "exists": True,
                "description_length": len(record["description"]),
                "completed": bool(record["completed"]),
            }
        return dict(view)

    def _get_priority(self, args: list[Any], invoker_id: str) -> dict[str, Any]:
        """The invoker's priority annotation, including an orphaned one.

        Args: []
        """
        annotation = self.store.priorities.get(invoker_id)
        view: PriorityView = {
            "success": True,
            "exists": annotation is not None,
            "tier": annotation["tier"] if annotation is not None else None,
        }
        return dict(view)

    def _get_deadline(self, args: list[Any], invoker_id: str) -> dict[str, Any]:
        """The invoker's deadline annotation, including an orphaned one.

        Args: []
        """
        bound = self.store.deadlines.get(invoker_id)
        view: DeadlineView = {
            "success": True,
            "exists": bound is not None,
            "target_block": bound["target_block"] if bound is not None else None,
            "alert_active": bool(bound["alert_active"]) if bound is not None else False,
        }
        return dict(view)

    def get_interface(self) -> dict[str, Any]:
        """Get detailed interface schema for the milestone registry."""
        description_schema = {
            "type": "string",
            "minLength": 1,
            "maxLength": self.max_description_length,
            "description": "Milestone description",
        }
        schemas: dict[str, dict[str, Any]] = {
            "initialize": {
                "type": "object",
                "properties": {"description": description_schema},
                "required": ["description"],
            },
            "assign": {
                "type": "object",
                "properties": {
                    "target_id": {
                        "type": "string",
                        "description": "Principal that will own the milestone",
                    },
                    "description": description_schema,
                },
                "required": ["target_id", "description"],
            },
            "modify": {
                "type": "object",
                "properties": {
                    "description": description_schema,
                    "completed": {"type": "boolean"},
                },
                "required": ["description", "completed"],
            },
            "set_priority": {
                "type": "object",
                "properties": {
                    "tier": {"type": "integer", "minimum": 1, "maximum": self.max_tier},
                },
                "required": ["tier"],
            },
            "set_deadline": {
                "type": "object",
                "properties": {
                    "increment": {
                        "type": "integer",
                        "minimum": 1,
                        "description": "Blocks from the current height",
                    },
                },
                "required": ["increment"],
            },
        }
        empty: dict[str, Any] = {"type": "object", "properties": {}}
        return {
            "description": self.description,
            "dataType": "service",
            "tools": [
                {
                    "name": method.name,
                    "description": method.description,
                    "cost": method.cost,
                    "inputSchema": schemas.get(method.name, empty),
                }
                for method in self.methods.values()
            ],
        }
