from __future__ import annotations

import hashlib
import logging
import time
from typing import Any, Dict

import requests
from flask import current_app

logger = logging.getLogger(__name__)

UPLOAD_URL = "https://api.cloudinary.com/v1_1/{cloud_name}/image/upload"


class MediaUploadError(RuntimeError):
    pass


def _sign(params: Dict[str, Any], api_secret: str) -> str:
    # Cloudinary signature: sha1 of the sorted "k=v" pairs joined by "&", then the secret
    to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params))
    return hashlib.sha1(f"{to_sign}{api_secret}".encode("utf-8")).hexdigest()


def upload_image(file_storage) -> str:
    """Push an uploaded image to the media host and return its https URL."""
    cfg = current_app.config
    cloud_name = cfg.get("CLOUDINARY_CLOUD_NAME")
    api_key = cfg.get("CLOUDINARY_API_KEY")
    api_secret = cfg.get("CLOUDINARY_API_SECRET")

    if not (cloud_name and api_key and api_secret):
        raise MediaUploadError("Cloudinary credentials are not configured")

    params = {
        "folder": cfg.get("CLOUDINARY_FOLDER", "campus-connect"),
        "timestamp": int(time.time()),
        "transformation": "q_auto,f_auto",
    }
    data = {**params, "api_key": api_key, "signature": _sign(params, api_secret)}
    files = {
        "file": (
            file_storage.filename or "upload",
            file_storage.stream.read(),
            file_storage.mimetype or "application/octet-stream",
        )
    }

    try:
        r = requests.post(UPLOAD_URL.format(cloud_name=cloud_name), data=data, files=files, timeout=30)
    except requests.RequestException as e:
        raise MediaUploadError(f"Media host unreachable: {e}") from e

    if r.status_code != 200:
        raise MediaUploadError(f"Media host HTTP {r.status_code}: {r.text[:200]}")

    try:
        body = r.json() or {}
    except ValueError as e:
        raise MediaUploadError(f"Media host returned invalid JSON: {e}") from e

    url = body.get("secure_url") if isinstance(body, dict) else None
    if not url:
        raise MediaUploadError("Media host response did not include secure_url")

    logger.info("Uploaded %s to %s", file_storage.filename, url)
    return url
