# backend/routes/uploads.py
from fastapi import APIRouter, File, UploadFile, Path as PathParam
from pydantic import BaseModel

from utils.storage import save_upload

router = APIRouter(prefix="/files", tags=["Uploads"])


class UploadResponse(BaseModel):
    url: str


# Product pictures, withdrawal photos and signature images; returns the public URL
@router.post("/{kind}", response_model=UploadResponse, status_code=201)
def upload_image(
    kind: str = PathParam(..., pattern="^(products|photos|signatures)$"),
    file: UploadFile = File(...),
):
    return {"url": save_upload(file, kind)}
