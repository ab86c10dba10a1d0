import os
import secrets
import shutil
from fastapi import UploadFile
from eventify.exceptions import ValidationFailedError

# Uploads live next to the package so StaticFiles can serve them from /uploads
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
UPLOAD_ROOT = os.path.join(os.path.dirname(BASE_DIR), "uploads")

ALLOWED_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".webp")


def save_upload(file: UploadFile, folder: str):
    """Stores an uploaded image and returns its public URL, or None when nothing was sent."""
    if not file or not file.filename:
        return None
    _, ext = os.path.splitext(os.path.basename(file.filename))
    if ext.lower() not in ALLOWED_EXTENSIONS:
        raise ValidationFailedError(f"Unsupported image type: {ext or file.filename}")

    upload_dir = os.path.join(UPLOAD_ROOT, folder)
    os.makedirs(upload_dir, exist_ok=True)
    filename = f"{secrets.token_hex(8)}{ext.lower()}"
    path = os.path.join(upload_dir, filename)
    with open(path, "wb") as buffer:
        file.file.seek(0)
        shutil.copyfileobj(file.file, buffer)
    return f"/uploads/{folder}/{filename}"


def discard_upload(url: str):
    """Removes a file stored by save_upload, e.g. when the request that sent it fails."""
    if not url or not url.startswith("/uploads/"):
        return
    path = os.path.join(UPLOAD_ROOT, *url[len("/uploads/"):].split("/"))
    if os.path.isfile(path):
        os.remove(path)
