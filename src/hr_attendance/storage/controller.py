from __future__ import annotations

from flask import Flask, abort, send_from_directory

from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/storage/<bucket>/<path:key>", methods=["GET"], endpoint="storage_object")
    def storage_object(bucket: str, key: str):
        # Buckets are public-read.
        try:
            path = container.storage.path_for(bucket, key)
        except ValidationError:
            abort(404)
        if not path.is_file():
            abort(404)
        return send_from_directory(path.parent, path.name)
