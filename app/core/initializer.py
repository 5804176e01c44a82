import json
import os
from tempfile import NamedTemporaryFile

from fastapi import FastAPI

from app.initializers.cloud_logging import setup_logging
from app.initializers.firebase import initialize_firebase
from app.initializers.firestore import initialize_firestore


def _normalize_credentials() -> None:
    # If GOOGLE_APPLICATION_CREDENTIALS holds inline JSON, write it to a temp
    # file and point the env var to it
    creds_value = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
    if not creds_value or os.path.exists(creds_value):
        return

    try:
        json.loads(creds_value)
    except json.JSONDecodeError:
        return

    with NamedTemporaryFile(mode="w", delete=False, prefix="gcp-sa-", suffix=".json") as tf:
        tf.write(creds_value)
        tf.flush()
        os.environ["GOOGLE_APPLICATION_CREDENTIALS"] = tf.name


async def startup_handler(app: FastAPI):
    _normalize_credentials()
    setup_logging()
    initialize_firebase()
    app.state.db = initialize_firestore()
