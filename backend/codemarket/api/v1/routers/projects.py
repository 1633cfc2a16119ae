# codemarket/api/v1/routers/projects.py
import logging
import re
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from fastapi.responses import FileResponse
from pydantic import ValidationError

from codemarket.api.v1.deps import get_current_user, get_settings, get_storage, get_verification_queue
from codemarket.api.v1.errors import validation_detail
from codemarket.config import Settings
from codemarket.core.serializers import project_out
from codemarket.core.storage import Storage
from codemarket.models.user import User
from codemarket.schemas.project import ProjectCreateIn, ProjectUpdateIn
from codemarket.services.uploads import UploadTooLarge, path_for_url, save_upload
from codemarket.services.verification import VerificationQueue

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/projects", tags=["projects"])

SortKey = Literal["newest", "price-low", "price-high", "popular", "rating"]


def _pick_files(
    code_file: Optional[UploadFile],
    preview_image: Optional[UploadFile],
    files: Optional[List[UploadFile]],
) -> tuple[Optional[UploadFile], Optional[UploadFile]]:
    """
    Resolve which upload is the code archive and which the preview.
    Named fields win; otherwise a generic `files` list is read as
    [code archive, preview].
    """
    def present(f):
        return f if f is not None and f.filename else None

    code_file, preview_image = present(code_file), present(preview_image)
    if code_file is None and files:
        listed = [f for f in files if present(f)]
        code_file = listed[0] if listed else None
        if preview_image is None and len(listed) > 1:
            preview_image = listed[1]
    return code_file, preview_image


# ===== Routes =====
@router.get("")
async def list_projects(
    category: str | None = Query(default=None),
    sellerId: int | None = Query(default=None),
    search: str | None = Query(default=None, description="Substring of title or description"),
    sort: SortKey = Query(default="newest"),
    storage: Storage = Depends(get_storage),
):
    """
    List projects with their seller, newest first.

    Args:
        category: Only projects in this category
        sellerId: Only projects listed by this seller
        search: Case-insensitive match on title or description
        sort: newest | price-low | price-high | popular | rating

    Returns:
        list: Project projections; the code archive URL is not included
    """
    return await storage.get_projects(category=category or None, seller_id=sellerId, search=search or None, sort=sort)


@router.get("/{project_id}")
async def get_project(project_id: int, storage: Storage = Depends(get_storage)):
    """
    Get one project with its seller.

    Raises:
        HTTPException (404): If project does not exist
    """
    project = await storage.get_project_with_seller(project_id)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return project


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_project(
    title: Optional[str] = Form(default=None),
    description: Optional[str] = Form(default=None),
    price: Optional[str] = Form(default=None),
    category: Optional[str] = Form(default=None),
    technologies: Optional[str] = Form(default=None, description="Comma-separated tags"),
    codeFile: Optional[UploadFile] = File(default=None),
    previewImage: Optional[UploadFile] = File(default=None),
    files: Optional[List[UploadFile]] = File(default=None),
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
    verification: VerificationQueue = Depends(get_verification_queue),
):
    """
    List a new project for sale (multipart form).

    Stores the code archive (required) and preview image/video (optional)
    under /uploads, creates the project unverified and queues it for
    verification. Responds right away; verification finishes later.

    Returns:
        dict: The stored project row (201)

    Raises:
        HTTPException (400): Missing code archive, invalid fields or file too large
        HTTPException (401): If user is not authenticated
    """
    code_upload, preview_upload = _pick_files(codeFile, previewImage, files)
    if code_upload is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Code file is required")

    try:
        data = ProjectCreateIn(
            title=title,
            description=description,
            price=price,
            category=category,
            technologies=technologies,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=validation_detail(exc.errors()))

    stored = []
    try:
        code_stored = await save_upload(code_upload, settings.upload_dir, settings.max_upload_bytes)
        stored.append(code_stored)
        preview_stored = None
        if preview_upload is not None:
            preview_stored = await save_upload(preview_upload, settings.upload_dir, settings.max_upload_bytes)
            stored.append(preview_stored)
    except UploadTooLarge:
        for s in stored:
            path_for_url(settings.upload_dir, s.url).unlink(missing_ok=True)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File too large")

    project = await storage.create_project({
        "title": data.title,
        "description": data.description,
        "price": data.price,
        "category": data.category,
        "technologies": data.technologies,
        "seller_id": user.id,
        "code_file_url": code_stored.url,
        "preview_image_url": preview_stored.url if preview_stored else None,
    })
    logger.info("[upload] project %s listed by user %s", project.id, user.id)
    verification.enqueue(project.id)
    return project_out(project)


@router.patch("/{project_id}")
async def update_project(
    project_id: int,
    body: ProjectUpdateIn,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """
    Update a listed project. Only its seller may do this.

    Raises:
        HTTPException (403): Caller is not the project's seller
        HTTPException (404): If project does not exist
    """
    project = await storage.get_project(project_id)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    if project.seller_id != user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the seller can edit this project")
    # An explicit null means "leave unchanged"; every editable column is NOT NULL
    changes = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None}
    updated = await storage.update_project(project_id, changes)
    return project_out(updated)


@router.get("/{project_id}/download")
async def download_project(
    project_id: int,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
):
    """
    Stream the code archive to a buyer of the project or to its seller.

    Raises:
        HTTPException (403): Caller has not purchased the project
        HTTPException (404): Project or stored file missing
    """
    project = await storage.get_project(project_id)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    if project.seller_id != user.id and not await storage.get_purchase(user.id, project_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You must purchase the project to download it")
    path = path_for_url(settings.upload_dir, project.code_file_url)
    if path is None or not path.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    slug = re.sub(r"[^A-Za-z0-9]+", "-", project.title).strip("-").lower() or f"project-{project.id}"
    return FileResponse(path, filename=f"{slug}{path.suffix}")
