from __future__ import annotations

import io

from flask import jsonify, send_file
from PIL import Image

from ..processing.imaging import encode_image


def send_png(img: Image.Image):
    data = encode_image(img, "PNG")
    response = send_file(io.BytesIO(data), mimetype="image/png")
    response.headers["Cache-Control"] = "no-store"
    return response


def error_response(message: str, status: int, title: str = "Oops"):
    return jsonify(error={"title": title, "message": message}), status
