"""Build a batch upload request from a manifest file."""

import base64
import hashlib
import json
from pathlib import Path

from ona_ui.core.models.io.files import AssetFile, BatchUploadRequest


def load_manifest(manifest_path: Path, skip_existing: bool = True, max_concurrency: int = 10) -> BatchUploadRequest:
    """
    Read a manifest and the files it lists.

    The manifest is JSON: ``{"files": [{"path": "...", "shared": false,
    "category": "marketing", "component_number": 3}, ...]}``. Paths are
    relative to the manifest's directory.

    Raises:
        FileNotFoundError: A listed file does not exist.
        ValueError: The manifest lists no files.
    """
    manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
    entries = manifest.get("files") or []
    if not entries:
        raise ValueError(f"Manifest {manifest_path} lists no files")

    base_dir = manifest_path.parent
    files = []
    for entry in entries:
        data = (base_dir / entry["path"]).read_bytes()
        files.append(
            AssetFile(
                path=entry["path"],
                content=base64.b64encode(data).decode("ascii"),
                hash=hashlib.sha256(data).hexdigest(),
                shared=entry.get("shared", False),
                category=entry.get("category"),
                component_number=entry.get("component_number"),
            )
        )
    return BatchUploadRequest(
        files=files,
        skip_existing=manifest.get("skip_existing", skip_existing),
        max_concurrency=max_concurrency,
    )
