"""
Tests for FirebaseAdminHandle and SessionTokenMinter.

firebase_admin is patched; no Firebase project is contacted.
"""

import json
import threading
from unittest.mock import MagicMock, patch

import pytest

from playgate.exceptions import ConfigurationError
from playgate.services.session_tokens import (
    FIREBASE_APP_NAME,
    FirebaseAdminHandle,
    SessionTokenMinter,
)

MODULE = "playgate.services.session_tokens"


class TestFirebaseAdminHandle:
    """Tests for lazy, once-only initialization."""

    def test_not_initialized_until_used(self, settings_factory):
        with patch(f"{MODULE}.firebase_admin.initialize_app") as initialize_app:
            FirebaseAdminHandle(settings_factory())

        initialize_app.assert_not_called()

    def test_initializes_once(self, settings_factory):
        handle = FirebaseAdminHandle(settings_factory(FIREBASE_PROJECT_ID="demo-project"))

        with (
            patch(f"{MODULE}.firebase_admin.initialize_app") as initialize_app,
            patch(f"{MODULE}.credentials.ApplicationDefault") as adc,
        ):
            first = handle.get_app()
            second = handle.get_app()

        assert first is second
        initialize_app.assert_called_once_with(
            adc.return_value, {"projectId": "demo-project"}, name=FIREBASE_APP_NAME
        )

    def test_concurrent_first_use_initializes_once(self, settings_factory):
        handle = FirebaseAdminHandle(settings_factory())

        with (
            patch(f"{MODULE}.firebase_admin.initialize_app") as initialize_app,
            patch(f"{MODULE}.credentials.ApplicationDefault"),
        ):
            threads = [threading.Thread(target=handle.get_app) for _ in range(8)]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join()

        assert initialize_app.call_count == 1

    def test_service_account_json(self, settings_factory, service_account_info):
        handle = FirebaseAdminHandle(
            settings_factory(FIREBASE_CREDENTIALS_JSON=json.dumps(service_account_info))
        )

        with (
            patch(f"{MODULE}.firebase_admin.initialize_app") as initialize_app,
            patch(f"{MODULE}.credentials.Certificate") as certificate,
        ):
            handle.get_app()

        certificate.assert_called_once_with(service_account_info)
        initialize_app.assert_called_once_with(
            certificate.return_value, {}, name=FIREBASE_APP_NAME
        )

    def test_invalid_credentials_json(self, settings_factory):
        handle = FirebaseAdminHandle(settings_factory(FIREBASE_CREDENTIALS_JSON="{not json"))

        with pytest.raises(ConfigurationError):
            handle.get_app()


class TestSessionTokenMinter:
    """Tests for custom token minting."""

    @pytest.mark.asyncio
    async def test_mint_decodes_bytes(self):
        handle = MagicMock()
        with patch(f"{MODULE}.auth.create_custom_token", return_value=b"eyJhbGci") as create:
            token = await SessionTokenMinter(handle).mint("subject-1")

        assert token == "eyJhbGci"
        create.assert_called_once_with("subject-1", app=handle.get_app.return_value)

    @pytest.mark.asyncio
    async def test_mint_propagates_errors(self):
        handle = MagicMock()
        with patch(f"{MODULE}.auth.create_custom_token", side_effect=ValueError("no signer")):
            with pytest.raises(ValueError):
                await SessionTokenMinter(handle).mint("subject-1")
