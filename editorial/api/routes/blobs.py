"""
FastAPI Routes для подписанных ссылок локального хранилища.

Работают только с LocalBlobStore: MinIO выдаёт собственные presigned URL.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from editorial.api.dependencies import get_container
from editorial.infrastructure.container import ServiceContainer
from editorial.infrastructure.storage.local_blob_store import LocalBlobStore

router = APIRouter(prefix="/blobs", tags=["blobs"])


def _local_store(container: ServiceContainer, path: str, mode: str, expires: int, signature: str) -> LocalBlobStore:
    store = container.blob_store
    if not isinstance(store, LocalBlobStore):
        raise HTTPException(status_code=404, detail="Signed URLs are served by the object store")
    if not store.verify(path, mode, expires, signature):
        raise HTTPException(status_code=403, detail="Invalid or expired signature")
    return store


@router.get("/{path:path}")
async def download_blob(
    path: str,
    expires: int,
    signature: str,
    mode: str = "read",
    container: ServiceContainer = Depends(get_container)
):
    if mode != "read":
        raise HTTPException(status_code=403, detail="Signature does not allow reading")
    store = _local_store(container, path, mode, expires, signature)
    data = await store.read(path)
    return Response(content=data, media_type="application/octet-stream")


@router.put("/{path:path}", status_code=201)
async def upload_blob(
    path: str,
    request: Request,
    expires: int,
    signature: str,
    mode: str = "write",
    container: ServiceContainer = Depends(get_container)
):
    """Загрузка по ссылке, выданной с mode=write."""
    if mode != "write":
        raise HTTPException(status_code=403, detail="Signature does not allow writing")
    store = _local_store(container, path, mode, expires, signature)
    data = await request.body()
    await store.write(data, path, request.headers.get("content-type", "application/octet-stream"))
    return {"path": path, "size_bytes": len(data)}
