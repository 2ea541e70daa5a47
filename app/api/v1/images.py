"""
Image upload endpoints
"""
from typing import List, Optional
from fastapi import APIRouter, File, Form, Query, UploadFile

from app.core.exceptions import InvalidArgument
from app.schemas.image import ImageDeleteRequest
from app.services.storage_service import storage_service, upload_folder
from app.utils.responses import success_response
import logging

router = APIRouter()
logger = logging.getLogger(__name__)

MAX_FILES = 10


@router.post("/upload")
async def upload_image(
    image: Optional[UploadFile] = File(None),
    restaurant_id: Optional[str] = Form(None, alias="restaurantId"),
    user_id: Optional[str] = Form(None, alias="userId"),
    location_id: Optional[str] = Form(None, alias="locationId"),
):
    """Upload one image; the folder follows restaurantId, userId or locationId"""
    if image is None:
        raise InvalidArgument("No file uploaded")

    folder = upload_folder(restaurant_id, user_id, location_id)
    data = await image.read()
    url = storage_service.upload_image(image.filename, data, folder, image.content_type)
    logger.info(f"Uploaded {image.filename} to {folder}")
    return success_response("Image uploaded successfully", url=url)


@router.post("/upload-multiple")
async def upload_multiple_images(
    images: Optional[List[UploadFile]] = File(None),
    restaurant_id: Optional[str] = Form(None, alias="restaurantId"),
    user_id: Optional[str] = Form(None, alias="userId"),
    location_id: Optional[str] = Form(None, alias="locationId"),
):
    if not images:
        raise InvalidArgument("No files uploaded")
    if len(images) > MAX_FILES:
        raise InvalidArgument(f"At most {MAX_FILES} files per upload")

    folder = upload_folder(restaurant_id, user_id, location_id)
    files = [(f.filename, await f.read(), f.content_type) for f in images]
    urls = storage_service.upload_images(files, folder)
    logger.info(f"Uploaded {len(urls)} image(s) to {folder}")
    return success_response(f"{len(urls)} image(s) uploaded successfully", urls=urls, count=len(urls))


@router.delete("")
async def delete_image(
    payload: Optional[ImageDeleteRequest] = None,
    url: Optional[str] = Query(None),
):
    """Delete an image by its URL (JSON body or ?url=)"""
    target = (payload.url if payload else None) or url
    if not target:
        raise InvalidArgument("Image URL is required")

    if not storage_service.delete_image(target):
        logger.warning(f"Image could not be deleted: {target}")
    return success_response("Image deleted successfully")
