"""
Object Key Resolution
=====================

Turns caller intent (original file name + naming options) into the object
key an upload is stored under.

Resolution priority (first match wins):
1. ``options.key``                  -> used verbatim, base path not applied
2. ``options.file_name``            -> base/folder/file_name
3. ``options.generate_unique_file_name`` -> base/folder/<uuid4><ext>
4. fallback                          -> base/folder/original_name

Unique names are random UUID4 strings plus the original extension.

All functions here are pure apart from UUID generation. No I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from uuid import uuid4

from s3files.core.types import UploadOptions

KEY_SEPARATOR = "/"


@dataclass(frozen=True, slots=True)
class ResolvedKey:
    """Final object key and the file name stored at its end."""
    key: str
    stored_name: str


def build_key(base_path: Optional[str], folder: Optional[str], file_name: str) -> str:
    """
    Join base path, folder and file name into one object key.

    Every part is split on '/' and empty segments are dropped, so the key
    never has a leading, trailing or doubled slash. ``"uploads/"``,
    ``"/uploads"`` and ``"uploads"`` are equivalent. All-empty input
    yields ``""``; the store rejects that, not this function.

    Example:
        >>> build_key("/uploads/", "avatars", "a.jpg")
        'uploads/avatars/a.jpg'
    """
    segments = [
        segment
        for part in (base_path, folder, file_name)
        for segment in (part or "").split(KEY_SEPARATOR)
        if segment
    ]
    return KEY_SEPARATOR.join(segments)


def file_extension(name: str) -> str:
    """
    Extension of ``name`` including the dot, or ``""`` if it has none.

    Only the last suffix counts: ``"archive.tar.gz"`` -> ``".gz"``.
    """
    dot = name.rfind(".")
    return name[dot:] if dot != -1 else ""


def generate_unique_name(original_name: str) -> str:
    """Random UUID file name that keeps the original extension."""
    return f"{uuid4()}{file_extension(original_name)}"


def last_segment(key: str) -> str:
    """Final path segment of a key (the key itself when it has no '/')."""
    return key.rsplit(KEY_SEPARATOR, 1)[-1]


def resolve_key(
    original_name: str,
    options: Optional[UploadOptions] = None,
    base_path: Optional[str] = None,
) -> ResolvedKey:
    """
    Decide the stored file name and full key for an upload.

    Args:
        original_name: Name declared by the uploaded file.
        options: Naming options; None behaves like default options.
        base_path: Client base path.

    Returns:
        ResolvedKey with the final key and stored name.
    """
    options = options or UploadOptions()

    if options.key:
        stored_name = (
            last_segment(options.key) if KEY_SEPARATOR in options.key else original_name
        )
        return ResolvedKey(key=options.key, stored_name=stored_name)

    if options.file_name:
        stored_name = options.file_name
    elif options.generate_unique_file_name:
        stored_name = generate_unique_name(original_name)
    else:
        stored_name = original_name

    return ResolvedKey(
        key=build_key(base_path, options.folder, stored_name),
        stored_name=stored_name,
    )


def list_prefix(
    base_path: Optional[str],
    folder: Optional[str],
    prefix: Optional[str],
) -> str:
    """
    Key prefix for a listing request.

    Without an extra prefix the result ends in '/' so that listing folder
    ``avatars`` does not also match ``avatars-old/``. With one, the extra
    prefix is appended inside the folder as given, minus leading slashes;
    a trailing '/' on it is kept.
    """
    scope = build_key(base_path, folder, "")
    extra = (prefix or "").lstrip(KEY_SEPARATOR)
    if not scope:
        return extra
    return f"{scope}{KEY_SEPARATOR}{extra}"


__all__ = [
    "ResolvedKey",
    "build_key",
    "file_extension",
    "generate_unique_name",
    "last_segment",
    "resolve_key",
    "list_prefix",
]
