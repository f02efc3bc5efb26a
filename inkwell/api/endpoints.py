from typing import Callable, TypeVar

from fastapi import APIRouter, File, HTTPException, Request, UploadFile
from fastapi.responses import PlainTextResponse, Response
from loguru import logger
from starlette.concurrency import run_in_threadpool

from inkwell.domain.document import RenameRequest
from inkwell.domain.errors import (
    ConflictError,
    InkwellError,
    InvalidPathError,
    NotFoundError,
)
from inkwell.storage.path_codec import decode_path
from inkwell.workspace import Workspace

T = TypeVar("T")


def _to_http_exception(error: InkwellError) -> HTTPException:
    """Translate a workspace error into the HTTP error shown to the editor.

    Not-found and conflict errors carry their message so the user can act on
    them; everything else is reported generically.
    """
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, ConflictError):
        return HTTPException(status_code=409, detail=str(error))
    if isinstance(error, InvalidPathError):
        logger.warning(f"Rejected invalid path: {error}")
        return HTTPException(status_code=400, detail="Invalid path")
    logger.error(f"Storage failure: {error}")
    return HTTPException(status_code=500, detail="Internal server error")


async def _run(operation: Callable[..., T], *args) -> T:
    """Run a blocking workspace operation off the event loop."""
    try:
        return await run_in_threadpool(operation, *args)
    except InkwellError as e:
        raise _to_http_exception(e) from e


def _create_document_endpoints(router: APIRouter, workspace: Workspace) -> None:
    """Register document and folder endpoints."""

    @router.get("/api/documents")
    async def list_documents():
        tree = await _run(workspace.list_tree)
        return [item.model_dump() for item in tree]

    # Registered before the catch-all document routes so "/rename" is not taken as a path
    @router.put("/api/documents/{doc_path:path}/rename")
    async def rename_document(doc_path: str, body: RenameRequest):
        operation = await _run(
            workspace.rename, decode_path(doc_path), decode_path(body.new_path)
        )
        return operation.model_dump(by_alias=True)

    @router.get("/api/documents/{doc_path:path}")
    async def get_document(doc_path: str) -> Response:
        content, media_type = await _run(workspace.read_document, decode_path(doc_path))
        return Response(content=content, media_type=media_type)

    @router.put("/api/documents/{doc_path:path}")
    async def save_document(doc_path: str, request: Request) -> PlainTextResponse:
        content = await request.body()
        await _run(workspace.save_document, decode_path(doc_path), content)
        return PlainTextResponse("OK")

    @router.delete("/api/documents/{doc_path:path}")
    async def trash_document(doc_path: str):
        trash_id = await _run(workspace.move_to_trash, decode_path(doc_path))
        return {"trashId": trash_id}

    @router.post("/api/folders/{folder_path:path}")
    async def create_folder(folder_path: str) -> PlainTextResponse:
        await _run(workspace.create_folder, decode_path(folder_path))
        return PlainTextResponse("OK")

    @router.get("/api/references/{doc_path:path}")
    async def get_references(doc_path: str) -> list[str]:
        return await _run(workspace.backlinks, decode_path(doc_path))


def _create_trash_endpoints(router: APIRouter, workspace: Workspace) -> None:
    """Register trash endpoints. Trash identifiers are physical names and are not decoded."""

    @router.get("/api/trash")
    async def list_trash():
        items = await _run(workspace.list_trash)
        return [item.model_dump(mode="json", by_alias=True) for item in items]

    @router.put("/api/trash/restore/{trash_id:path}")
    async def restore_item(trash_id: str):
        restored = await _run(workspace.restore, trash_id)
        return {"path": restored}

    @router.delete("/api/trash/delete/{trash_id:path}")
    async def delete_item(trash_id: str) -> PlainTextResponse:
        await _run(workspace.delete_permanently, trash_id)
        return PlainTextResponse("OK")

    @router.delete("/api/trash/empty")
    async def empty_trash():
        removed = await _run(workspace.empty_trash)
        return {"removed": removed}


def _create_image_endpoints(router: APIRouter, workspace: Workspace) -> None:
    """Register image upload, listing and serving endpoints. Image names are not decoded."""

    @router.post("/api/images")
    async def upload_image(image: UploadFile = File(...)):  # noqa: B008
        content = await image.read()
        url = await _run(workspace.upload_image, image.filename or "", content)
        return {"url": url}

    @router.get("/api/images")
    async def list_images():
        images = await _run(workspace.list_images)
        return [image.model_dump() for image in images]

    @router.delete("/api/images/{name}")
    async def delete_image(name: str) -> PlainTextResponse:
        await _run(workspace.delete_image, name)
        return PlainTextResponse("OK")

    @router.get("/images/{name}")
    async def get_image(name: str) -> Response:
        content, media_type = await _run(workspace.read_image, name)
        return Response(
            content=content,
            media_type=media_type,
            headers={"Cache-Control": "public, max-age=31536000"},
        )


def _create_maintenance_endpoints(router: APIRouter, workspace: Workspace) -> None:
    """Register conflict resolution and activity log endpoints."""

    @router.post("/api/settings/resolve-conflicts")
    async def resolve_conflicts():
        operations = await _run(workspace.resolve_conflicts)
        return [operation.model_dump(by_alias=True) for operation in operations]

    @router.get("/api/logs")
    async def get_logs() -> PlainTextResponse:
        content = await _run(workspace.read_activity_log)
        return PlainTextResponse(content or "No logs found.")

    @router.delete("/api/logs")
    async def clear_logs() -> PlainTextResponse:
        await _run(workspace.clear_activity_log)
        return PlainTextResponse("OK")


def get_endpoints_router(*, workspace: Workspace) -> APIRouter:
    router = APIRouter()

    @router.get("/health")
    async def health_check():
        return {"status": "healthy"}

    _create_document_endpoints(router, workspace)
    _create_trash_endpoints(router, workspace)
    _create_image_endpoints(router, workspace)
    _create_maintenance_endpoints(router, workspace)

    return router
