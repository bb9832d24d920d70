"""
Firebase Admin SDK initialization.
"""

from __future__ import annotations

import json
import logging

import firebase_admin
from firebase_admin import credentials, firestore

from listings_api.config import Settings

logger = logging.getLogger(__name__)


def _credential(settings: Settings):
    if settings.firebase_service_account_json:
        return credentials.Certificate(json.loads(settings.firebase_service_account_json))
    if settings.firebase_credentials_path:
        return credentials.Certificate(settings.firebase_credentials_path)
    # Application default credentials (GCE, Cloud Run, gcloud auth).
    return None


def initialize_firebase(settings: Settings) -> firebase_admin.App:
    """Return the default Firebase app, initializing it on first use."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    options = {}
    if settings.firebase_project_id:
        options["projectId"] = settings.firebase_project_id
    app = firebase_admin.initialize_app(_credential(settings), options or None)
    logger.info("Firebase initialized for project %s", app.project_id)
    return app


def firestore_client(app: firebase_admin.App):
    return firestore.client(app)
