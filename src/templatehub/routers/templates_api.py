"""Template management API endpoints."""

import asyncio
import json
from collections.abc import AsyncGenerator, Awaitable, Callable, Iterator
from contextlib import contextmanager

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import StreamingResponse

from templatehub.exceptions import AppBaseError, ResourceConflictError
from templatehub.logger import get_logger
from templatehub.models.github import ErrorCode
from templatehub.models.template import (
    DeleteTemplateResponse,
    DiscoveryResponse,
    TemplateInfo,
    UpdateCheckResponse,
)
from templatehub.services.templates import ProgressScope, Template, TemplateDiscoveryService
from templatehub.utils.result import Err

logger = get_logger(__name__)
router = APIRouter(prefix="/api/templates", tags=["templates"])


def get_discovery_service(request: Request) -> TemplateDiscoveryService:
    """The service created by the application lifespan."""
    return request.app.state.discovery


def to_http_error(e: AppBaseError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=str(e))


class _QueueScope:
    def __init__(self, queue: "asyncio.Queue[str | None]") -> None:
        self.queue = queue

    def update(self, message: str, current: int, total: int) -> None:
        data = json.dumps({"message": message, "current": current, "total": total})
        self.queue.put_nowait(f"data: {data}\n\n")


class QueueProgressSink:
    """Progress sink feeding a server-sent events stream."""

    def __init__(self) -> None:
        self.queue: asyncio.Queue[str | None] = asyncio.Queue()

    @contextmanager
    def start(self, label: str) -> Iterator[ProgressScope]:
        self.queue.put_nowait(f"data: {json.dumps({'operation': label})}\n\n")
        yield _QueueScope(self.queue)


def stream_operation(
    service: TemplateDiscoveryService,
    label: str,
    operation: Callable[[QueueProgressSink], Awaitable[object]],
) -> StreamingResponse:
    """Run a template operation in the background and stream its progress."""
    sink = QueueProgressSink()

    async def run() -> None:
        try:
            with service.exclusive(label):
                await operation(sink)
            sink.queue.put_nowait("data: DONE\n\n")
        except AppBaseError as e:
            logger.error("Template operation failed", operation=label, error=str(e))
            sink.queue.put_nowait(f"data: ERROR: {str(e)}\n\n")
        except Exception as e:
            logger.exception("Unexpected error in template operation", operation=label)
            sink.queue.put_nowait(f"data: ERROR: {str(e)}\n\n")
        finally:
            sink.queue.put_nowait(None)  # Sentinel

    async def event_generator() -> AsyncGenerator[str, None]:
        task = asyncio.create_task(run())
        try:
            while True:
                data = await sink.queue.get()
                if data is None:
                    break
                yield data
        finally:
            # The operation keeps running if the client disconnects
            await task

    return StreamingResponse(event_generator(), media_type="text/event-stream")


def ensure_idle(service: TemplateDiscoveryService, label: str) -> None:
    """Reject a streamed operation before the response starts if another one is running."""
    if service.busy is not None:
        raise to_http_error(ResourceConflictError("templates.busy", running=service.busy, requested=label))


def _lookup(request: Request, key: str) -> tuple[TemplateDiscoveryService, Template]:
    service = get_discovery_service(request)
    try:
        return service, service.get(key)
    except AppBaseError as e:
        raise to_http_error(e) from e


@router.post("/refresh", response_model=DiscoveryResponse)
async def refresh_templates(request: Request) -> DiscoveryResponse:
    """
    Search GitHub for templates and replace the current list.

    Returns:
        Discovered templates; ``nothing_found`` is true when the search produced none
    """
    service = get_discovery_service(request)
    try:
        with service.exclusive("refresh"):
            result = await service.refresh()
    except AppBaseError as e:
        raise to_http_error(e) from e

    return DiscoveryResponse(
        templates=[template.to_info() for template in result.templates],
        nothing_found=result.nothing_found,
    )


@router.get("", response_model=list[TemplateInfo])
async def list_templates(request: Request) -> list[TemplateInfo]:
    """Templates from the last refresh with their current state."""
    service = get_discovery_service(request)
    return [template.to_info() for template in service.list_templates()]


@router.get("/{key}", response_model=TemplateInfo)
async def get_template(request: Request, key: str) -> TemplateInfo:
    _, template = _lookup(request, key)
    return template.to_info()


@router.post("/{key}/check-updates", response_model=UpdateCheckResponse)
async def check_for_updates(request: Request, key: str) -> UpdateCheckResponse:
    """
    Compare the installed template with the repository on GitHub.

    Raises:
        HTTPException: 429 when rate limited, 502 when GitHub could not be queried
    """
    _, template = _lookup(request, key)

    result = await template.is_up_to_date_async()
    if isinstance(result, Err):
        if result.error == ErrorCode.RATE_LIMITED:
            raise HTTPException(status_code=429, detail="GitHub rate limit reached, try again later")
        raise HTTPException(status_code=502, detail=f"Failed to check for updates: {result.error.value}")

    return UpdateCheckResponse(key=template.key, up_to_date=result.value, state=template.state())


@router.get("/{key}/download")
async def stream_download_template(request: Request, key: str) -> StreamingResponse:
    """Stream download progress for a template."""
    service, template = _lookup(request, key)
    ensure_idle(service, f"download {key}")
    try:
        service.git.tool_manager.ensure_git_installed()
    except AppBaseError as e:
        raise to_http_error(e) from e

    return stream_operation(service, f"download {key}", template.download)


@router.get("/{key}/update")
async def stream_update_template(request: Request, key: str) -> StreamingResponse:
    """Stream update progress for a template."""
    service, template = _lookup(request, key)
    if not template.cache_path.is_dir():
        raise HTTPException(status_code=409, detail=f"Template {key} has not been downloaded")
    ensure_idle(service, f"update {key}")
    try:
        service.git.tool_manager.ensure_git_installed()
    except AppBaseError as e:
        raise to_http_error(e) from e

    return stream_operation(service, f"update {key}", template.update)


@router.delete("/{key}", response_model=DeleteTemplateResponse)
async def delete_template(request: Request, key: str) -> DeleteTemplateResponse:
    """Delete a template, its siblings and their shared git cache."""
    service, template = _lookup(request, key)
    try:
        with service.exclusive(f"delete {key}"):
            deleted = await template.delete()
    except AppBaseError as e:
        raise to_http_error(e) from e

    return DeleteTemplateResponse(key=key, deleted=deleted)
