"""
Session Tokens - Firebase custom tokens for verified Google users.

The Firebase Admin app is process-wide state. It is wrapped in a handle that
initializes it lazily, once, under a lock, and is injected into the minter.
"""

import asyncio
import json
import threading

import firebase_admin
from firebase_admin import auth, credentials
from structlog import get_logger

from playgate.config import Settings
from playgate.exceptions import ConfigurationError
from playgate.observability.tracing import trace_operation

logger = get_logger(__name__)

FIREBASE_APP_NAME = "playgate"


class FirebaseAdminHandle:
    """
    Lazily-initialized Firebase Admin app.

    Credential priority:
    1. FIREBASE_CREDENTIALS_JSON (JSON string)
    2. Application Default Credentials
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._app: firebase_admin.App | None = None
        self._lock = threading.Lock()

    def get_app(self) -> firebase_admin.App:
        """Return the Firebase app, initializing it on first use."""
        if self._app is not None:
            return self._app

        with self._lock:
            if self._app is None:
                self._app = self._initialize()
        return self._app

    def _initialize(self) -> firebase_admin.App:
        options = {}
        if self.settings.FIREBASE_PROJECT_ID:
            options["projectId"] = self.settings.FIREBASE_PROJECT_ID

        if self.settings.FIREBASE_CREDENTIALS_JSON:
            try:
                cred_info = json.loads(self.settings.FIREBASE_CREDENTIALS_JSON)
            except json.JSONDecodeError as exc:
                raise ConfigurationError("FIREBASE_CREDENTIALS_JSON is not valid JSON") from exc
            cred: credentials.Base = credentials.Certificate(cred_info)
            credential_mode = "service_account_json"
        else:
            cred = credentials.ApplicationDefault()
            credential_mode = "adc"

        app = firebase_admin.initialize_app(cred, options, name=FIREBASE_APP_NAME)
        logger.info("firebase_admin_initialized", credential_mode=credential_mode)
        return app


class SessionTokenMinter:
    """Mints Firebase custom tokens keyed by a verified subject id."""

    def __init__(self, handle: FirebaseAdminHandle) -> None:
        self.handle = handle

    async def mint(self, subject: str) -> str:
        """
        Create a signed custom token for subject.

        Raises whatever the Firebase Admin SDK raises; callers wrap this in
        best_effort.
        """
        with trace_operation("firebase.create_custom_token"):
            app = self.handle.get_app()
            token = await asyncio.to_thread(auth.create_custom_token, subject, app=app)
        logger.info("session_token_minted")
        return token.decode("utf-8") if isinstance(token, bytes) else str(token)
