from __future__ import annotations

import base64
import mimetypes
from typing import Any, Optional, Tuple

import requests
from flask import current_app
from openai import OpenAI, OpenAIError

from roadboard.services.errors import ServiceError
from roadboard.services.storage import local_upload_path

OCR_PROMPT = (
    "Extract all readable text from this screenshot. Output plain text only, "
    "keep the original line breaks, no explanations and no headings."
)


class OcrError(ServiceError):
    def __init__(self, message: str, status_code: int = 500):
        self.status_code = status_code
        super().__init__(message)


def make_client(api_key: str) -> OpenAI:
    return OpenAI(api_key=api_key)


def _content_type_from_path(path: str) -> str:
    guessed, _ = mimetypes.guess_type(path)
    return guessed or "application/octet-stream"


def load_image(url: str) -> Tuple[bytes, str]:
    """
    Return (bytes, content type). App-relative paths are read from the upload
    folder only; anything else is fetched over HTTP.
    """
    if url.startswith("/"):
        path = local_upload_path(current_app.config, url)
        if path is None:
            raise OcrError("invalid url", status_code=400)
        try:
            with open(path, "rb") as f:
                data = f.read()
        except FileNotFoundError:
            raise OcrError("image not found", status_code=404)
        return data, _content_type_from_path(path)

    try:
        resp = requests.get(url, timeout=current_app.config["OCR_FETCH_TIMEOUT"])
    except requests.RequestException as e:
        raise OcrError(f"failed to fetch image: {e}", status_code=400) from e
    if not resp.ok:
        raise OcrError(resp.text or "failed to fetch image", status_code=resp.status_code)
    content_type = resp.headers.get("content-type") or "application/octet-stream"
    return resp.content, content_type


def extract_output_text(response: Any) -> str:
    """``output_text`` when the SDK provides it, else the joined text parts."""
    text = getattr(response, "output_text", None)
    if isinstance(text, str):
        return text
    parts = []
    for item in getattr(response, "output", None) or []:
        for c in getattr(item, "content", None) or []:
            value = getattr(c, "text", None)
            if isinstance(value, str):
                parts.append(value)
    return "\n".join(parts).strip()


def extract_text(url: str, api_key: Optional[str] = None) -> str:
    api_key = (api_key or "").strip() or current_app.config.get("OPENAI_API_KEY")
    if not api_key:
        raise OcrError("OPENAI_API_KEY is not set", status_code=500)
    if not url:
        raise OcrError("url is required", status_code=400)

    data, content_type = load_image(url)
    data_url = f"data:{content_type};base64,{base64.b64encode(data).decode('ascii')}"

    client = make_client(api_key)
    try:
        response = client.responses.create(
            model=current_app.config["OPENAI_OCR_MODEL"],
            input=[
                {
                    "role": "user",
                    "content": [
                        {"type": "input_text", "text": OCR_PROMPT},
                        {"type": "input_image", "image_url": data_url},
                    ],
                }
            ],
            temperature=0,
        )
    except OpenAIError as e:
        current_app.logger.warning("ocr_upstream_failed", extra={"event": "ocr_upstream_failed", "reason": str(e)})
        raise OcrError(str(e) or "OpenAI request failed", status_code=500) from e

    text = extract_output_text(response)
    current_app.logger.info("ocr_done", extra={"event": "ocr_done", "chars": len(text)})
    return text
