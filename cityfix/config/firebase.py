"""
Firebase Realtime Database initialization.
Single-source-of-truth Firebase app for CityFix Insights.
"""

from typing import Optional
import json
import logging
import os

import firebase_admin
from firebase_admin import credentials, db

from cityfix.core.settings import settings

logger = logging.getLogger(__name__)

_app: Optional[firebase_admin.App] = None


def _validate_credentials_file(cred_path: str) -> None:
    if not os.path.exists(cred_path):
        raise FileNotFoundError(
            f"Firebase credentials file not found: {cred_path}\n"
            f"Please check your .env file and ensure FIREBASE_CREDENTIALS_PATH is correct.\n"
            f"Current working directory: {os.getcwd()}"
        )

    try:
        with open(cred_path, "r") as f:
            cred_data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(
            f"Firebase credentials file is not valid JSON: {e}\n"
            f"Please check the file at: {cred_path}"
        )

    required_fields = ["type", "project_id", "private_key", "client_email"]
    missing_fields = [field for field in required_fields if field not in cred_data]
    if missing_fields:
        raise ValueError(
            f"Firebase credentials file is missing required fields: {missing_fields}\n"
            f"Please download a fresh service account key from Firebase Console."
        )

    logger.info(f"[FIREBASE] Credentials file validated: {cred_path}")
    logger.info(f"[FIREBASE] Project ID: {cred_data.get('project_id', 'N/A')}")


def initialize_firebase() -> firebase_admin.App:
    """
    Initialize the Firebase Admin SDK for the Realtime Database.

    Raises:
        RuntimeError: when credentials or the database URL are missing or invalid
    """
    global _app

    if _app is not None:
        return _app

    if not settings.FIREBASE_DATABASE_URL:
        raise RuntimeError(
            "Firebase initialization FAILED - FIREBASE_DATABASE_URL is not set.\n"
            "SOLUTION: set FIREBASE_DATABASE_URL (https://<project>.firebaseio.com) "
            "or USE_MOCK_DB=true for local development."
        )

    options = {"databaseURL": settings.FIREBASE_DATABASE_URL}

    try:
        if firebase_admin._apps:
            _app = firebase_admin.get_app()
        elif settings.FIREBASE_CREDENTIALS_PATH:
            _validate_credentials_file(settings.FIREBASE_CREDENTIALS_PATH)
            cred = credentials.Certificate(settings.FIREBASE_CREDENTIALS_PATH)
            _app = firebase_admin.initialize_app(cred, options)
            logger.info("[FIREBASE] Admin SDK initialized with service account")
        else:
            logger.info("[FIREBASE] No credentials path set, using Application Default Credentials")
            _app = firebase_admin.initialize_app(options=options)
    except FileNotFoundError as e:
        raise RuntimeError(
            f"Firebase initialization FAILED - Credentials file not found.\n"
            f"{str(e)}\n"
            f"SOLUTION: Check your .env file and ensure FIREBASE_CREDENTIALS_PATH points to a valid service account JSON file."
        ) from e
    except ValueError as e:
        raise RuntimeError(
            f"Firebase initialization FAILED - Invalid credentials or options.\n"
            f"{str(e)}"
        ) from e

    logger.info(f"[FIREBASE] Using Realtime Database at {settings.FIREBASE_DATABASE_URL}")
    return _app


def get_reports_reference() -> db.Reference:
    """
    Reference to the reports node, initializing Firebase on first use.
    """
    app = initialize_firebase()
    return db.reference(settings.REPORTS_PATH, app=app)
