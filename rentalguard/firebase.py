# rentalguard/firebase.py
import os
import firebase_admin
from firebase_admin import auth, credentials, firestore

from .config import settings

_DB = None

def init_firebase():
    if not firebase_admin._apps:
        cred_path = settings.GOOGLE_APPLICATION_CREDENTIALS or os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
        options = {"projectId": settings.FIREBASE_PROJECT_ID} if settings.FIREBASE_PROJECT_ID else None

        if cred_path:
            if not os.path.exists(cred_path):
                raise FileNotFoundError(
                    f"Firebase service account key not found at GOOGLE_APPLICATION_CREDENTIALS='{cred_path}'."
                )
            firebase_admin.initialize_app(credentials.Certificate(cred_path), options)
        else:
            # application default credentials (Cloud Run, emulator, gcloud login)
            firebase_admin.initialize_app(options=options)
    return firebase_admin.get_app()

def get_db():
    global _DB
    if _DB is None:
        init_firebase()
        _DB = firestore.client()
    return _DB

def verify_token(token: str) -> str:
    """Map a Firebase ID token to its user id. Raises on invalid/expired tokens."""
    init_firebase()
    return auth.verify_id_token(token)["uid"]
