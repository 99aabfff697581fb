from flask import abort, send_from_directory

from ..extensions import storage
from ..storage import LocalStorageClient
from . import files


@files.route("/storage/<bucket>/<path:path>", methods=["GET"])
def storage_file(bucket, path):
    """Public object URLs of the local backend."""
    client = storage.client
    if not isinstance(client, LocalStorageClient):
        abort(404)
    return send_from_directory(client.bucket_dir(bucket), path)
