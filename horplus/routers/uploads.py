import uuid
from pathlib import Path

from fastapi import APIRouter, File, HTTPException, UploadFile

from horplus.core.config import settings

router = APIRouter(tags=["uploads"])

CHUNK_SIZE = 1024 * 1024  # 1 MB streaming chunks

# Payment slips and repair photos
_ALLOWED: dict[str, str] = {
    "pdf":  "application/pdf",
    "png":  "image/png",
    "jpg":  "image/jpeg",
    "jpeg": "image/jpeg",
    "heic": "image/heic",
    "webp": "image/webp",
}


def _validate_upload(filename: str) -> str:
    """Return the lower-cased extension, or raise 400."""
    ext = Path(filename).suffix.lstrip(".").lower()
    if ext not in _ALLOWED:
        allowed = ", ".join(sorted(_ALLOWED))
        raise HTTPException(
            status_code=400,
            detail=f"File type '.{ext}' is not allowed. Allowed: {allowed}",
        )
    return ext


@router.post("/upload", status_code=201)
async def upload_file(image: UploadFile = File(...)):
    original_name = image.filename or "upload"
    ext = _validate_upload(original_name)

    # Stream the upload in chunks to avoid loading an oversized file into RAM
    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await image.read(CHUNK_SIZE)
        if not chunk:
            break
        total += len(chunk)
        if total > settings.max_upload_bytes:
            raise HTTPException(status_code=400, detail="File too large")
        chunks.append(chunk)
    if total == 0:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    stored_name = f"{uuid.uuid4()}.{ext}"
    dir_path = Path(settings.upload_dir)
    dir_path.mkdir(parents=True, exist_ok=True)
    (dir_path / stored_name).write_bytes(b"".join(chunks))

    return {
        "original_name": original_name,
        "filename": stored_name,
        "path": f"/uploads/{stored_name}",
        "content_type": _ALLOWED[ext],
    }
