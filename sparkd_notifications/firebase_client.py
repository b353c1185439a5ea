import json
import logging

import firebase_admin
from firebase_admin import credentials, firestore

from .config import Settings
from .push import PushClient
from .store import FirestoreStore

logger = logging.getLogger(__name__)


class FirebaseClient:
    """
    Firebase Admin SDK handle for the notification service.

    Constructed once at process start and handed to each handler, which
    only ever sees the record store and push client built from it.
    """

    def __init__(self, settings: Settings):
        """
        Initialize Firebase client with Firestore and FCM capabilities.

        Args:
            settings: Service settings holding the Firebase credentials
        """
        self.settings = settings
        self.app = None
        self.firestore_db = None
        self.initialized = False
        self.initialize()

    def initialize(self) -> None:
        """Initialize Firebase Admin SDK."""
        if self.initialized:
            return

        try:
            # Reuse the default app if something already set it up
            self.app = firebase_admin.get_app()
            logger.info("Retrieved existing Firebase app")
        except ValueError:
            self.app = firebase_admin.initialize_app(
                credential=self._load_credential(),
                options=self._app_options(),
            )
            logger.info(f"Firebase app initialized. App name: {self.app.name}")

        self.firestore_db = firestore.client(self.app)
        self.initialized = True
        logger.info("Firebase client initialized successfully")

    def _load_credential(self) -> credentials.Base:
        cert_json = self.settings.firebase_secret
        if not cert_json:
            logger.info("Firebase secret not set, using application default credentials")
            return credentials.ApplicationDefault()

        try:
            cert_dict = json.loads(cert_json)
            # Secrets managers sometimes hand the JSON over double-encoded
            if isinstance(cert_dict, str):
                cert_dict = json.loads(cert_dict)
        except json.JSONDecodeError as e:
            logger.error(f"Firebase secret is not valid JSON: {str(e)}")
            raise ValueError("Firebase secret is not valid JSON") from e

        return credentials.Certificate(cert_dict)

    def _app_options(self) -> dict:
        if self.settings.firebase_project_id:
            return {"projectId": self.settings.firebase_project_id}
        return {}

    def store(self) -> FirestoreStore:
        return FirestoreStore(self.firestore_db, self.settings)

    def push(self) -> PushClient:
        return PushClient(self.app)
