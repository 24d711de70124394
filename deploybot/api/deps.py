"""Dependency injection for API endpoints."""

from typing import Annotated

from fastapi import Depends, Request

from deploybot.core.deps import HandlerDeps
from deploybot.core.events import EventRouter


async def get_handler_deps(request: Request) -> HandlerDeps:
    """Get the collaborators event handlers run with."""
    return request.app.state.handler_deps


async def get_event_router(request: Request) -> EventRouter:
    """Get the event router."""
    return request.app.state.event_router


# Type aliases for cleaner signatures
HandlerDepsDep = Annotated[HandlerDeps, Depends(get_handler_deps)]
EventRouterDep = Annotated[EventRouter, Depends(get_event_router)]
