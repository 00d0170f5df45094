"""Storage service for project files (local disk)."""

import hashlib
import shutil
from pathlib import Path
from uuid import UUID

from fastapi import HTTPException, UploadFile, status

import config


def storage_root() -> Path:
    return Path(config.settings.FILE_STORAGE_DIR)


def resolve_path(storage_key: str) -> Path:
    """Absolute path of a storage key under FILE_STORAGE_DIR."""
    return storage_root() / storage_key


def sanitize_filename(filename: str) -> str:
    # Remove path separators and other problematic chars
    sanitized = filename.replace("/", "_").replace("\\", "_").replace("..", "_").strip()
    return sanitized or "unnamed"


def sanitize_folder(folder: str | None) -> str:
    """Normalise a relative folder path, dropping empty and parent segments."""
    if not folder:
        return ""
    parts = [
        part.strip()
        for part in folder.replace("\\", "/").split("/")
        if part.strip() and part.strip() not in (".", "..")
    ]
    return "/".join(parts)


def project_dir(project_id: UUID) -> Path:
    return storage_root() / "projects" / str(project_id)


def generate_storage_key(project_id: UUID, folder: str, filename: str) -> str:
    """
    Generate a storage key for a file.

    Args:
        project_id: Project ID
        folder: Folder inside the project (already sanitized, may be empty)
        filename: Original filename (will be sanitized)

    Returns:
        Storage key path string, e.g. ``projects/{project_id}/Plans/roof.pdf``
    """
    parts = ["projects", str(project_id)]
    if folder:
        parts.append(folder)
    parts.append(sanitize_filename(filename))
    return "/".join(parts)


def available_path(path: Path, marker: str = "") -> Path:
    """
    First free variant of ``path``.

    Returns ``path`` itself when free, otherwise ``{stem}{marker}_{n}{ext}``
    with n counting up from 1.
    """
    if not path.exists():
        return path
    counter = 1
    while True:
        candidate = path.with_name(f"{path.stem}{marker}_{counter}{path.suffix}")
        if not candidate.exists():
            return candidate
        counter += 1


def storage_key_for(path: Path) -> str:
    return path.relative_to(storage_root()).as_posix()


async def save_upload(
    file: UploadFile,
    storage_key: str,
    max_bytes: int | None = None,
) -> tuple[int, str]:
    """
    Save uploaded file to local disk and compute SHA256 hash.

    Args:
        file: FastAPI UploadFile object
        storage_key: Storage path/key
        max_bytes: Reject files larger than this

    Returns:
        Tuple of (bytes_written, sha256_hex)

    Raises:
        HTTPException: 413 if the file exceeds max_bytes
        OSError: If directory creation or file write fails
    """
    content = await file.read()
    if max_bytes is not None and len(content) > max_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds the maximum size of {max_bytes} bytes",
        )

    full_path = resolve_path(storage_key)
    full_path.parent.mkdir(parents=True, exist_ok=True)

    sha256_hash = hashlib.sha256(content).hexdigest()
    with open(full_path, "wb") as f:
        bytes_written = f.write(content)

    return bytes_written, sha256_hash


async def delete_file(storage_key: str) -> None:
    """
    Delete a file from storage.

    Raises:
        OSError: If file deletion fails
    """
    full_path = resolve_path(storage_key)
    if full_path.exists():
        full_path.unlink()


def move_file(source: Path, target: Path) -> Path:
    """Move a file, creating the target's parent directories."""
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.move(str(source), str(target))
    return target


def delete_project_dir(project_id: UUID) -> bool:
    """Remove a project's storage folder. Returns True when something was removed."""
    path = project_dir(project_id)
    if not path.exists():
        return False
    shutil.rmtree(path)
    return True
