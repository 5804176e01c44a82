import json
import os

import firebase_admin
from firebase_admin import credentials

from app.core.config import settings


def initialize_firebase():
    """Initializes Firebase app if not already initialized

    Uses the service account file or inline JSON from
    GOOGLE_APPLICATION_CREDENTIALS, falling back to application default
    credentials on Cloud Run.
    """
    if firebase_admin._apps:
        return

    cred_value = os.getenv("GOOGLE_APPLICATION_CREDENTIALS", settings.GOOGLE_APPLICATION_CREDENTIALS)

    if os.path.exists(cred_value):
        cred = credentials.Certificate(cred_value)
    else:
        try:
            cred = credentials.Certificate(json.loads(cred_value))
        except json.JSONDecodeError:
            cred = credentials.ApplicationDefault()

    firebase_admin.initialize_app(cred)
