"""Image import, clone and cleanup endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from pydantic import BaseModel

from virtimage.deps import get_image_manager
from virtimage.image import LibvirtImageManager

from .common import execute_storage_task, logger

router = APIRouter(prefix="/images", tags=["Images"])


class ImageSummary(BaseModel):
    name: str
    location: str


class ImageListResponse(BaseModel):
    images: List[ImageSummary]


class ImageImportRequest(BaseModel):
    name: str
    source: str


class ImageCloneRequest(BaseModel):
    name: str
    size_bytes: int = 0


class ImageDeleteResponse(BaseModel):
    name: str
    deleted: bool


def _validate_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise HTTPException(status_code=400, detail="Volume name is required")
    if any(sep in name for sep in ("/", "\\")) or name in {".", ".."}:
        raise HTTPException(status_code=400, detail="Volume name contains invalid characters")
    return name


@router.get("", response_model=ImageListResponse)
async def list_images(images: LibvirtImageManager = Depends(get_image_manager)):
    result = await execute_storage_task(images.list)
    return {"images": [ImageSummary(name=i.name, location=i.location) for i in result]}


@router.post("", response_model=ImageSummary, status_code=status.HTTP_201_CREATED)
async def import_image(
    request: ImageImportRequest,
    images: LibvirtImageManager = Depends(get_image_manager),
):
    name = _validate_name(request.name)
    logger.info("Importing image %s from %s", name, request.source)
    image = await execute_storage_task(images.create_base_image, name, request.source)
    return ImageSummary(name=image.name, location=image.location)


@router.post("/{base}/clones", response_model=ImageSummary, status_code=status.HTTP_201_CREATED)
async def clone_image(
    base: str,
    request: ImageCloneRequest,
    images: LibvirtImageManager = Depends(get_image_manager),
):
    name = _validate_name(request.name)
    if request.size_bytes < 0:
        raise HTTPException(status_code=400, detail="size_bytes must not be negative")
    image = await execute_storage_task(images.clone, name, base, request.size_bytes)
    return ImageSummary(name=image.name, location=image.location)


@router.post("/{name}/config-iso", response_model=ImageSummary, status_code=status.HTTP_201_CREATED)
async def create_config_iso(
    name: str,
    file: UploadFile = File(...),
    images: LibvirtImageManager = Depends(get_image_manager),
):
    name = _validate_name(name)
    try:
        image = await execute_storage_task(images.create_config_iso, name, file.file)
    finally:
        await file.close()
    return ImageSummary(name=image.name, location=image.location)


@router.delete("/{name}", response_model=ImageDeleteResponse)
async def delete_image(name: str, images: LibvirtImageManager = Depends(get_image_manager)):
    name = _validate_name(name)
    await execute_storage_task(images.remove, name)
    return {"name": name, "deleted": True}


__all__ = ["router"]
