"""
Text helpers shared by the services: slugs, filenames and version numbers.
"""

from __future__ import annotations

import re
import unicodedata
from pathlib import PurePosixPath
from typing import Optional, Tuple

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
VERSION_PATTERN = re.compile(r"^(\d+)\.(\d+)\.(\d+)$")

MIME_TYPES = {
    ".js": "application/javascript",
    ".mjs": "application/javascript",
    ".css": "text/css",
    ".html": "text/html",
    ".json": "application/json",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".webp": "image/webp",
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".ttf": "font/ttf",
    ".mp4": "video/mp4",
    ".webm": "video/webm",
}


def generate_slug(text: str) -> str:
    """Build a URL slug: ASCII, lowercase, words joined by single dashes."""
    normalized = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", normalized.lower())
    return slug.strip("-")


def is_valid_slug(slug: str) -> bool:
    return bool(SLUG_PATTERN.match(slug))


def parse_version(version: str) -> Optional[Tuple[int, int, int]]:
    match = VERSION_PATTERN.match(version or "")
    if not match:
        return None
    return int(match.group(1)), int(match.group(2)), int(match.group(3))


def bump_patch(version: str) -> str:
    parsed = parse_version(version)
    if parsed is None:
        return "1.0.0"
    major, minor, patch = parsed
    return f"{major}.{minor}.{patch + 1}"


def name_from_email(email: str) -> str:
    """Derive a display name from the local part of an email (``jane.doe`` -> ``Jane Doe``)."""
    local_part = email.split("@", 1)[0]
    words = [word for word in re.split(r"[._\-]+", local_part) if word]
    return " ".join(word.capitalize() for word in words) or local_part


def sanitize_filename(filename: str) -> str:
    """Strip special characters from a filename, keeping its extension.

    Case is preserved for JavaScript and CSS bundles since their names are
    referenced from compiled code.
    """
    path = PurePosixPath(filename)
    ext = path.suffix
    stem = filename[: -len(ext)] if ext else filename
    stem = PurePosixPath(stem).name

    sanitized = re.sub(r"[()\s\-]+", "-", stem)
    sanitized = re.sub(r"[^a-zA-Z0-9\-_.]", "", sanitized)
    sanitized = sanitized.strip("-")
    if ext not in (".js", ".mjs", ".css"):
        sanitized = sanitized.lower()
    return f"{sanitized or 'asset'}{ext}"


def guess_mime_type(filename: str) -> str:
    return MIME_TYPES.get(PurePosixPath(filename).suffix.lower(), "application/octet-stream")
