"""
Firebase Configuration Module

Lazily initializes the firebase_admin app and hands out a shared Firestore
client. Only the store layer (firebase_store.py) and the API use this; the
settlement engine never touches it.

Functions:
    get_db: Return the Firestore client, or None if it cannot be created.
"""

import logging

import firebase_admin
from firebase_admin import credentials, firestore

from debt_settlement.config.settings import config

logger = logging.getLogger(__name__)

_db = None


def get_db():
    """
    Return the shared Firestore client.

    Returns:
        google.cloud.firestore.Client | None: The client, or None if Firebase
        could not be initialized (missing credentials, bad project, ...).
    """
    global _db
    if _db is not None:
        return _db

    try:
        if not firebase_admin._apps:
            if config.FIREBASE_CREDENTIALS:
                cred = credentials.Certificate(config.FIREBASE_CREDENTIALS)
            else:
                cred = credentials.ApplicationDefault()
            options = {"projectId": config.FIREBASE_PROJECT_ID} if config.FIREBASE_PROJECT_ID else None
            firebase_admin.initialize_app(cred, options)
        _db = firestore.client()
    except Exception as e:
        logger.warning("Firestore is not available: %s", e)
        return None

    return _db
