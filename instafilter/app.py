from __future__ import annotations

import uuid
from html import escape
from pathlib import Path
from string import Template

from flask import Flask, jsonify, request, send_file, session

from .config import SETTINGS, EditorSettings, configure_logging
from .infrastructure.library import LibraryError, PhotoLibrary
from .infrastructure.network import DownloadTooLargeError, FetchError, ImageFetcher
from .infrastructure.responses import error_response, send_png
from .infrastructure.sessions import SessionStore
from .processing.editor import EditorSession, NoImageError
from .processing.filters import UnknownFilterError, available_filters
from .processing.imaging import InvalidImageError, open_image

APP_VERSION = "1.0.0"

TEMPLATE_PATH = Path(__file__).parent / "templates" / "index.html"


def create_app(
    settings: EditorSettings | None = None,
    *,
    fetcher: ImageFetcher | None = None,
    library: PhotoLibrary | None = None,
) -> Flask:
    settings = settings or SETTINGS
    logger = configure_logging(settings)
    app = Flask(__name__)
    app.secret_key = settings.secret_key
    app.config["MAX_CONTENT_LENGTH"] = settings.max_upload_mb * 1024 * 1024

    sessions = SessionStore(settings)
    fetcher = fetcher or ImageFetcher(settings=settings)
    library = library or PhotoLibrary(settings=settings)
    app.extensions["instafilter"] = {"sessions": sessions, "library": library, "fetcher": fetcher}

    def current_editor() -> EditorSession:
        key = session.get("editor_id")
        if not key:
            key = uuid.uuid4().hex
            session["editor_id"] = key
        return sessions.get_or_create(key)

    def json_object() -> dict | None:
        payload = request.get_json(silent=True)
        if payload is None:
            return {}
        return payload if isinstance(payload, dict) else None

    @app.errorhandler(413)
    def too_large(_exc):
        return error_response(f"Pictures are limited to {settings.max_upload_mb} MB", 413)

    @app.route("/filters")
    def filters_view():
        return jsonify(available_filters())

    @app.route("/state")
    def state_view():
        return jsonify(current_editor().state())

    @app.route("/image", methods=["POST"])
    def pick_image():
        editor = current_editor()
        upload = request.files.get("image")
        try:
            if upload is not None:
                img = open_image(upload.read())
            else:
                payload = json_object()
                if payload is None:
                    return error_response("Expected a JSON object", 400)
                if payload.get("url"):
                    img = fetcher.fetch(str(payload["url"]))
                elif payload.get("library"):
                    img = library.load(str(payload["library"]))
                else:
                    return error_response("Choose a picture to edit", 400)
            editor.load_image(img)
        except (InvalidImageError, ValueError) as exc:
            return error_response(str(exc), 400)
        except DownloadTooLargeError as exc:
            return error_response(str(exc), 413)
        except FetchError as exc:
            logger.warning("Picture download failed: %s", exc)
            return error_response(str(exc), 502)
        except LibraryError as exc:
            return error_response(str(exc), 404)
        return jsonify(editor.state())

    @app.route("/preview")
    def preview():
        editor = current_editor()
        processed = editor.processed_image
        if processed is None:
            return error_response("No picture selected", 404)
        return send_png(processed)

    @app.route("/intensity", methods=["POST"])
    def intensity_view():
        editor = current_editor()
        payload = json_object()
        if payload is None:
            return error_response("Expected a JSON object", 400)
        try:
            editor.set_intensity(payload.get("intensity"))
        except ValueError as exc:
            return error_response(str(exc), 400)
        return jsonify(editor.state())

    @app.route("/filter", methods=["POST"])
    def filter_view():
        editor = current_editor()
        payload = json_object()
        if payload is None:
            return error_response("Expected a JSON object", 400)
        try:
            editor.set_filter(str(payload.get("filter", "")))
        except UnknownFilterError as exc:
            return error_response(str(exc), 400)
        return jsonify(editor.state())

    @app.route("/save", methods=["POST"])
    def save_view():
        editor = current_editor()
        try:
            name = editor.save(library)
        except NoImageError as exc:
            return error_response(str(exc), 400)
        except LibraryError as exc:
            logger.error("Saving failed: %s", exc)
            return error_response(str(exc), 500)
        return jsonify(saved=name)

    @app.route("/library")
    def library_view():
        try:
            return jsonify(library.list())
        except LibraryError as exc:
            return error_response(str(exc), 500)

    @app.route("/library/<name>")
    def library_item(name: str):
        try:
            path = library.path_for(name)
        except LibraryError as exc:
            return error_response(str(exc), 404)
        return send_file(path)

    @app.route("/health")
    def health():
        return jsonify(
            ok=True,
            version=APP_VERSION,
            filters=[entry["name"] for entry in available_filters()],
        )

    @app.route("/")
    def index():
        editor = current_editor()
        state = editor.state()

        filter_buttons = "".join(
            f'<button type="button" class="sheet-option" data-filter="{escape(entry["name"])}">'
            f'{escape(entry["title"])}</button>'
            for entry in available_filters()
        )

        try:
            tmpl_str = TEMPLATE_PATH.read_text(encoding="utf-8")
        except OSError as exc:
            return f"Error loading template: {exc}", 500

        # string.Template keeps CSS/JS braces intact
        return Template(tmpl_str).substitute(
            APP_VERSION=APP_VERSION,
            filter_buttons=filter_buttons,
            intensity=state["intensity"],
            filter_title=escape(str(state["title"])),
            has_image="true" if state["has_image"] else "false",
        )

    return app


# Module-level application for WSGI servers (``instafilter.app:app``) plus the
# conventional ``application`` alias.
app = create_app()
application = app
