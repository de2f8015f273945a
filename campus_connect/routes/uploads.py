from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required
from ..errors import bad_request, server_error
from ..services.logging_service import log_event
from ..services.media_service import MediaUploadError, upload_image


uploads_bp = Blueprint("uploads", __name__)


@uploads_bp.post("/upload")
@login_required
def upload():
    image = request.files.get("image")
    if image is None or not image.filename:
        return bad_request("No image uploaded")

    try:
        url = upload_image(image)
    except MediaUploadError as e:
        return server_error("Upload failed", e)

    log_event("image_uploaded", user_id=current_user.id, meta={"url": url})
    return jsonify({"url": url}), 200
