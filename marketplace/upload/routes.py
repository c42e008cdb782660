# marketplace/upload/routes.py
from flask import current_app, request

from ..services.upload_service import UploadError, backend_name, get_uploader, guess_mimetype
from ..utils.api import ok, err
from . import bp


@bp.get("")
def upload_help():
    return ok(
        message="Upload endpoint is working. Use POST to upload files.",
        backend=backend_name(current_app.config),
        accepts=["multipart/form-data", "application/json"],
        methods={
            "file": 'POST with FormData containing a "file" field',
            "url": 'POST with JSON { "url": "https://..." }',
            "base64": 'POST with JSON { "base64": "...", "fileName": "...", "mimeType": "..." }',
        },
    )


@bp.post("")
def upload():
    content_type = request.content_type or ""
    try:
        uploader = get_uploader(current_app.config)

        if "multipart/form-data" in content_type:
            fs = request.files.get("file")
            if fs is None or not fs.filename:
                return err("No file provided")
            mimetype = guess_mimetype(fs.filename, fs.mimetype)
            url = uploader.upload_file(fs.filename, fs.read(), mimetype)

        elif request.is_json:
            body = request.get_json(silent=True) or {}
            if body.get("url"):
                url = uploader.upload_url(str(body["url"]))
            elif body.get("base64"):
                url = uploader.upload_base64(body["base64"], str(body.get("fileName") or "file"), body.get("mimeType"))
            else:
                return err('Invalid request body. Provide "url" or "base64".')

        else:
            return err("Invalid content type. Use multipart/form-data or application/json.")

    except UploadError as e:
        current_app.logger.warning("Upload rejected (%s): %s", e.status_code, e.message)
        return err(e.message, e.status_code)

    current_app.logger.info("Upload stored via %s: %s", uploader.name, url)
    return ok(url=url)
