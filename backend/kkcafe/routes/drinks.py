"""
KK's Cafe Backend - Drink Route Handlers
=========================================

What:  The /api/drinks CRUD surface.
How:   Handlers read the multipart form, hand file parts to FileService
       (upload validation + storage), then delegate to DrinkService.
       Errors are raised as application exceptions and rendered by the
       global handlers in main.py.

Routes:
    GET    /api/drinks        → 200 list of drinks
    GET    /api/drinks/{id}   → 200 drink (+ ETag) | 404
    POST   /api/drinks        → 201 drink (+ ETag) | 400
    PUT    /api/drinks/{id}   → 200 drink (+ ETag) | 400 | 404 | 409
    DELETE /api/drinks/{id}   → 200 message        | 404 | 409

Form fields (POST / PUT, multipart/form-data):
    name, description      required, trimmed
    images                 0..10 image file parts
    urlImages              JSON array of URLs, or one URL
    keptExistingImages     PUT only: JSON array of current images to keep
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Header, Request, Response, UploadFile

from kkcafe.schemas.drink import DeleteResponse, Drink, ErrorResponse
from kkcafe.services.drink_service import DrinkService, drink_etag
from kkcafe.services.file_service import FileService, IncomingFile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Drinks"])


def get_drink_service(request: Request) -> DrinkService:
    return request.app.state.drink_service


def get_file_service(request: Request) -> FileService:
    return request.app.state.file_service


async def _read_uploads(files: Optional[List[UploadFile]]) -> List[IncomingFile]:
    """Read every file part into memory, closing each upload."""
    incoming = []
    for upload in files or []:
        try:
            content = await upload.read()
            incoming.append(IncomingFile(upload.filename or "", content, upload.content_type))
        finally:
            await upload.close()
    return incoming


@router.get(
    "/drinks",
    response_model=List[Drink],
    summary="List all drinks",
)
async def list_drinks(
    service: DrinkService = Depends(get_drink_service),
) -> List[Drink]:
    return await service.list_drinks()


@router.get(
    "/drinks/{drink_id}",
    response_model=Drink,
    responses={404: {"description": "Drink not found", "model": ErrorResponse}},
    summary="Get a single drink",
)
async def get_drink(
    drink_id: int,
    response: Response,
    service: DrinkService = Depends(get_drink_service),
) -> Drink:
    drink = await service.get_drink(drink_id)
    response.headers["ETag"] = drink_etag(drink)
    return drink


@router.post(
    "/drinks",
    status_code=201,
    response_model=Drink,
    responses={
        201: {"description": "Drink created", "model": Drink},
        400: {"description": "Missing name/description or rejected upload", "model": ErrorResponse},
    },
    summary="Create a drink",
)
async def create_drink(
    response: Response,
    name: Optional[str] = Form(default=None),
    description: Optional[str] = Form(default=None),
    urlImages: Optional[str] = Form(default=None),
    images: Optional[List[UploadFile]] = File(default=None),
    service: DrinkService = Depends(get_drink_service),
    file_service: FileService = Depends(get_file_service),
) -> Drink:
    """
    Create a drink from a multipart form.

    Uploads come first in the image list, URL images follow.
    """
    uploads = await _read_uploads(images)
    logger.info("Received create request: name=%r files=%d", name, len(uploads))

    stored = await file_service.store_uploads(uploads)
    drink = await service.create_drink(
        name=name,
        description=description,
        uploaded_images=stored,
        url_images=urlImages,
    )
    response.headers["ETag"] = drink_etag(drink)
    return drink


@router.put(
    "/drinks/{drink_id}",
    response_model=Drink,
    responses={
        400: {"description": "Missing name/description or rejected upload", "model": ErrorResponse},
        404: {"description": "Drink not found", "model": ErrorResponse},
        409: {"description": "If-Match precondition failed", "model": ErrorResponse},
    },
    summary="Update a drink",
)
async def update_drink(
    drink_id: int,
    response: Response,
    name: Optional[str] = Form(default=None),
    description: Optional[str] = Form(default=None),
    urlImages: Optional[str] = Form(default=None),
    keptExistingImages: Optional[str] = Form(default=None),
    images: Optional[List[UploadFile]] = File(default=None),
    if_match: Optional[str] = Header(default=None),
    service: DrinkService = Depends(get_drink_service),
    file_service: FileService = Depends(get_file_service),
) -> Drink:
    """
    Update a drink.

    Omitting keptExistingImages, images and urlImages altogether keeps the
    current images. Send keptExistingImages=[] to remove them all.
    """
    uploads = await _read_uploads(images)
    logger.info("Received update request: id=%d files=%d", drink_id, len(uploads))

    stored = await file_service.store_uploads(uploads)
    drink = await service.update_drink(
        drink_id,
        name=name,
        description=description,
        uploaded_images=stored,
        url_images=urlImages,
        kept_existing_images=keptExistingImages,
        if_match=if_match,
    )
    response.headers["ETag"] = drink_etag(drink)
    return drink


@router.delete(
    "/drinks/{drink_id}",
    response_model=DeleteResponse,
    responses={
        404: {"description": "Drink not found", "model": ErrorResponse},
        409: {"description": "If-Match precondition failed", "model": ErrorResponse},
    },
    summary="Delete a drink and its image files",
)
async def delete_drink(
    drink_id: int,
    if_match: Optional[str] = Header(default=None),
    service: DrinkService = Depends(get_drink_service),
) -> DeleteResponse:
    await service.delete_drink(drink_id, if_match=if_match)
    return DeleteResponse()
