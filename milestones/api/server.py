"""FastAPI server for the milestone registry.

Maps registry methods onto HTTP endpoints. The caller principal comes from
a header set by the authenticating proxy in front of this service; it is
never read from the request body.

Status codes follow the registry error codes: invalid input is 400, a
missing record is 404 and an existing record is 409.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, StrictBool, StrictInt, StrictStr

from ..config import get_validated_config
from ..config_schema import AppConfig
from ..registry import (
    BlockHeight,
    ErrorCode,
    EventLogger,
    MilestoneRegistry,
    create_store,
    http_status_for,
    validation_error,
)

logger = logging.getLogger(__name__)


class InitializeRequest(BaseModel):
    """Body for creating the caller's milestone."""

    description: StrictStr


class AssignRequest(BaseModel):
    """Body for creating a milestone on behalf of another principal."""

    target: StrictStr
    description: StrictStr


class ModifyRequest(BaseModel):
    """Body for overwriting the caller's milestone."""

    description: StrictStr
    completed: StrictBool


class PriorityRequest(BaseModel):
    """Body for setting the priority tier."""

    tier: StrictInt


class DeadlineRequest(BaseModel):
    """Body for setting a deadline relative to the current height."""

    increment: StrictInt


class AdvanceRequest(BaseModel):
    """Body for moving the host block height forward."""

    blocks: StrictInt = Field(default=1, ge=0)


class MissingPrincipalError(Exception):
    """Raised when a request carries no caller principal."""

    def __init__(self, header_name: str) -> None:
        super().__init__(f"Missing {header_name} header")
        self.header_name = header_name


def _principal_dependency(header_name: str) -> Callable[[Request], str]:
    """Build a dependency that extracts the caller principal from a header."""

    def get_principal(request: Request) -> str:
        principal = request.headers.get(header_name, "").strip()
        if not principal:
            raise MissingPrincipalError(header_name)
        return principal

    return get_principal


def _respond(result: dict[str, Any], method: str, principal: str) -> JSONResponse:
    status = http_status_for(result)
    if status != 200:
        logger.warning(
            "%s rejected for %s: %s (%s)", method, principal, result.get("error"), result.get("code")
        )
    return JSONResponse(status_code=status, content=result)


def create_app(
    config: AppConfig | None = None,
    registry: MilestoneRegistry | None = None,
    height: BlockHeight | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Validated app config (uses global if not provided)
        registry: Pre-built registry; built from config when omitted
        height: Host block height; built from config when omitted. When a
            registry is passed without a height, the registry's own height
            source is used.
    """
    cfg = config or get_validated_config()

    if registry is None:
        height = height or BlockHeight(
            initial=cfg.server.initial_height,
            max_height=cfg.registry.max_height,
        )
        event_logger = EventLogger(cfg.logging.output_file) if cfg.logging.output_file else None
        registry = MilestoneRegistry(
            store=create_store(cfg.store),
            height=height,
            registry_config=cfg.registry,
            event_logger=event_logger,
        )
    elif height is None:
        if not isinstance(registry.height, BlockHeight):
            raise ValueError("Pass a BlockHeight when the registry uses a custom height source")
        height = registry.height

    chain = height
    reg = registry
    get_principal = _principal_dependency(cfg.server.principal_header)

    app = FastAPI(
        title="Milestone Registry",
        description="One tracked milestone per principal, with priority and block deadline",
        version="0.1.0",
    )
    app.state.registry = reg
    app.state.height = chain

    @app.exception_handler(MissingPrincipalError)
    async def handle_missing_principal(request: Request, exc: MissingPrincipalError) -> JSONResponse:
        """Reject anonymous calls in the registry error shape."""
        result = validation_error(
            str(exc), code=ErrorCode.MISSING_PRINCIPAL, header=exc.header_name
        )
        return JSONResponse(status_code=http_status_for(result), content=result)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Report malformed bodies as invalid input (400), not 422."""
        return JSONResponse(
            status_code=400,
            content=validation_error(
                "Malformed request body",
                code=ErrorCode.INVALID_TYPE,
                errors=[
                    {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
                    for err in exc.errors()
                ],
            ),
        )

    # Milestone routes. Handlers are async and call the store inline, so
    # registry calls run one at a time on the event loop, sqlite included.

    @app.post("/milestone")
    async def initialize(body: InitializeRequest, principal: str = Depends(get_principal)) -> JSONResponse:
        result = reg.invoke("initialize", [body.description], principal)
        return _respond(result, "initialize", principal)

    @app.post("/milestone/assign")
    async def assign(body: AssignRequest, principal: str = Depends(get_principal)) -> JSONResponse:
        result = reg.invoke("assign", [body.target, body.description], principal)
        return _respond(result, "assign", principal)

    @app.put("/milestone")
    async def modify(body: ModifyRequest, principal: str = Depends(get_principal)) -> JSONResponse:
        result = reg.invoke("modify", [body.description, body.completed], principal)
        return _respond(result, "modify", principal)

    @app.delete("/milestone")
    async def terminate(principal: str = Depends(get_principal)) -> JSONResponse:
        result = reg.invoke("terminate", [], principal)
        return _respond(result, "terminate", principal)

    @app.put("/milestone/priority")
    async def set_priority(body: PriorityRequest, principal: str = Depends(get_principal)) -> JSONResponse:
        result = reg.invoke("set_priority", [body.tier], principal)
        return _respond(result, "set_priority", principal)

    @app.put("/milestone/deadline")
    async def set_deadline(body: DeadlineRequest, principal: str = Depends(get_principal)) -> JSONResponse:
        result = reg.invoke("set_deadline", [body.increment], principal)
        return _respond(result, "set_deadline", principal)

    @app.get("/milestone/status")
    async def get_status(principal: str = Depends(get_principal)) -> dict[str, Any]:
        return reg.invoke("get_status", [], principal)

    @app.get("/milestone/priority")
    async def get_priority(principal: str = Depends(get_principal)) -> dict[str, Any]:
        return reg.invoke("get_priority", [], principal)

    @app.get("/milestone/deadline")
    async def get_deadline(principal: str = Depends(get_principal)) -> dict[str, Any]:
        return reg.invoke("get_deadline", [], principal)

    # Host routes

    @app.get("/chain/height")
    async def get_height() -> dict[str, Any]:
        return {"height": chain.current, "max_height": chain.max_height}

    @app.post("/chain/advance")
    async def advance(body: AdvanceRequest) -> JSONResponse:
        try:
            new_height = chain.advance(body.blocks)
        except ValueError as e:
            return JSONResponse(status_code=400, content=validation_error(str(e)))
        return JSONResponse(status_code=200, content={"success": True, "height": new_height})

    @app.get("/interface")
    async def get_interface() -> dict[str, Any]:
        return {"id": reg.id, **reg.get_interface()}

    @app.get("/health")
    async def get_health() -> dict[str, Any]:
        return {"status": "ok", "registry": reg.id, "height": chain.current}

    return app


def run_server(config: AppConfig | None = None) -> None:
    """Run the registry server with uvicorn.

    Serves from a single worker process. Registry calls are serialized on
    its event loop, which is what makes each check-then-write atomic; more
    workers sharing one sqlite file would lose that guarantee.
    """
    import uvicorn

    cfg = config or get_validated_config()
    app = create_app(cfg)
    uvicorn.run(
        app,
        host=cfg.server.host,
        port=cfg.server.port,
        workers=1,
    )
