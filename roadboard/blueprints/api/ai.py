from flask import jsonify, request

from roadboard.extensions import limiter
from roadboard.services.ocr import extract_text

from . import bp


@bp.post("/ai/ocr")
@limiter.limit("20 per minute")
def ocr():
    """
    Body: {"url": "<http(s) URL or /uploads/... path>"}
    The API key comes from the X-OpenAI-API-Key header, falling back to config.
    """
    body = request.get_json(silent=True) or {}
    url = body.get("url") if isinstance(body.get("url"), str) else ""
    text = extract_text(url, api_key=request.headers.get("X-OpenAI-API-Key"))
    return jsonify({"text": text}), 200
