"""
Media library, proxied to Cloudinary through its SDK.

Cloudinary only paginates with opaque cursors, so the listing counts the
whole folder once for the page estimate and then fetches the requested
page by cursor. The two can drift if the folder changes in between.
"""
import logging
from typing import List, Literal, Optional

import cloudinary.api
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError
from fastapi import APIRouter, Depends, HTTPException, Query

import config
from auth import TokenClaims, authenticate
from pagination import DEFAULT_LIMIT, MAX_LIMIT, CursorPagination, page_count
from responses import ok
from schemas import ImageDeleteRequest, MediaDeleteRequest

logger = logging.getLogger(__name__)

COUNT_PAGE_SIZE = 500  # Admin API maximum

ResourceType = Literal["image", "video", "raw"]


class CloudinaryClient:
    """Admin and Upload API calls for one account, credentials passed per call."""

    def __init__(self, cloud_name: str, api_key: str, api_secret: str):
        self.credentials = {"cloud_name": cloud_name, "api_key": api_key, "api_secret": api_secret}

    def list_resources(
        self,
        resource_type: str = "image",
        prefix: str = "",
        max_results: int = DEFAULT_LIMIT,
        next_cursor: Optional[str] = None,
    ) -> dict:
        options = {"max_results": max_results, "direction": "desc"}
        if prefix:
            options["prefix"] = prefix
        if next_cursor:
            options["next_cursor"] = next_cursor
        return cloudinary.api.resources(resource_type=resource_type, type="upload", **options, **self.credentials)

    def count_resources(self, resource_type: str = "image", prefix: str = "") -> int:
        total = 0
        cursor = None
        while True:
            page = self.list_resources(resource_type, prefix, COUNT_PAGE_SIZE, cursor)
            total += len(page.get("resources", []))
            cursor = page.get("next_cursor")
            if not cursor:
                return total

    def delete_resources(self, public_ids: List[str], resource_type: str = "image") -> dict:
        return cloudinary.api.delete_resources(public_ids, resource_type=resource_type, **self.credentials)

    def destroy(self, public_id: str, resource_type: str = "image") -> dict:
        return cloudinary.uploader.destroy(public_id, resource_type=resource_type, **self.credentials)


_client: Optional[CloudinaryClient] = None


def get_media_host() -> CloudinaryClient:
    global _client
    if _client is None:
        if not (config.CLOUDINARY_CLOUD_NAME and config.CLOUDINARY_API_KEY and config.CLOUDINARY_API_SECRET):
            raise HTTPException(status_code=500, detail="Media storage is not configured")
        _client = CloudinaryClient(config.CLOUDINARY_CLOUD_NAME, config.CLOUDINARY_API_KEY, config.CLOUDINARY_API_SECRET)
    return _client


def to_media_item(resource: dict) -> dict:
    public_id = resource.get("public_id", "")
    return {
        "public_id": public_id,
        "url": resource.get("secure_url"),
        "format": resource.get("format"),
        "size": resource.get("bytes"),
        "width": resource.get("width"),
        "height": resource.get("height"),
        "created_at": resource.get("created_at"),
        "folder": resource.get("folder") or "",
        "filename": resource.get("filename") or public_id.split("/")[-1],
    }


# ----------------- Routes -----------------

router = APIRouter(prefix="/api", tags=["Media"])


@router.get("/media")
def list_media(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    folder: str = "",
    resource_type: ResourceType = "image",
    cursor: Optional[str] = None,
    _: TokenClaims = Depends(authenticate),
    host: CloudinaryClient = Depends(get_media_host),
):
    try:
        total = host.count_resources(resource_type, folder)
        result = host.list_resources(resource_type, folder, limit, cursor)
    except CloudinaryError:
        logger.exception("Listing media from Cloudinary failed")
        raise HTTPException(status_code=500, detail="Failed to fetch media files")

    next_cursor = result.get("next_cursor")
    pagination = CursorPagination(
        page=page,
        limit=limit,
        total=total,
        pages=page_count(total, limit),
        has_next=bool(next_cursor),
        has_prev=page > 1,
        next_cursor=next_cursor,
    )
    items = [to_media_item(r) for r in result.get("resources", [])]
    return ok(items, "Media files fetched successfully", pagination)


@router.delete("/media")
def delete_media(
    payload: MediaDeleteRequest,
    resource_type: ResourceType = "image",
    _: TokenClaims = Depends(authenticate),
    host: CloudinaryClient = Depends(get_media_host),
):
    if not payload.public_id and not payload.public_ids:
        raise HTTPException(status_code=400, detail="public_id or public_ids array is required")
    try:
        if payload.public_ids:
            result = host.delete_resources(payload.public_ids, resource_type)
        else:
            result = host.destroy(payload.public_id, resource_type)
    except CloudinaryError:
        logger.exception("Deleting media from Cloudinary failed")
        raise HTTPException(status_code=500, detail="Failed to delete media file")
    return ok(result, "Media file(s) deleted successfully")


@router.post("/delete-image")
def delete_image(
    payload: ImageDeleteRequest,
    _: TokenClaims = Depends(authenticate),
    host: CloudinaryClient = Depends(get_media_host),
):
    try:
        result = host.destroy(payload.public_id)
    except CloudinaryError:
        logger.exception("Deleting image %s failed", payload.public_id)
        raise HTTPException(status_code=500, detail="Image deletion failed")
    return ok(result, "Image deleted successfully")
