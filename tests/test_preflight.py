"""
Unit tests for preflight checks and Azure authentication helpers.
"""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from azure.core.exceptions import ClientAuthenticationError

from ca1_deploy.config import AzureAuthConfig
from ca1_deploy.core.auth_manager import AuthManager
from ca1_deploy.core.exceptions import NotAuthenticatedError, SDKNotInstalledError
from ca1_deploy.core.preflight import ARM_SCOPE, Preflight


class TestPreflight:
    """Test the SDK and session checks."""

    def test_missing_module(self):
        preflight = Preflight(MagicMock(), required_modules=("json", "ca1_no_such_module"))

        with pytest.raises(SDKNotInstalledError) as exc_info:
            preflight.check_sdk()

        assert "ca1_no_such_module" in str(exc_info.value)
        assert "pip install" in exc_info.value.hint

    def test_sdk_check_runs_before_session(self):
        factory = MagicMock()
        preflight = Preflight(factory, required_modules=("ca1_no_such_module",))

        with pytest.raises(SDKNotInstalledError):
            preflight.run()

        factory.assert_not_called()

    def test_not_logged_in(self):
        credential = MagicMock()
        credential.get_token.side_effect = ClientAuthenticationError(message="Please run 'az login'")
        preflight = Preflight(lambda: credential, required_modules=("json",))

        with pytest.raises(NotAuthenticatedError) as exc_info:
            preflight.run()

        assert "az login" in exc_info.value.hint

    def test_authenticated_session(self):
        credential = MagicMock()
        preflight = Preflight(lambda: credential, required_modules=("json",))

        assert preflight.run() is credential
        credential.get_token.assert_called_once_with(ARM_SCOPE)
        assert preflight.credential is credential


class TestAuthManager:
    """Test credential construction and subscription resolution."""

    def test_unsupported_method(self):
        with pytest.raises(ValueError, match="Unsupported"):
            AuthManager.get_azure_credential(AzureAuthConfig(method="kerberos"))

    def test_service_principal_requires_fields(self):
        with pytest.raises(ValueError, match="client_id"):
            AuthManager.get_azure_credential(AzureAuthConfig(method="service-principal", client_id="abc"))

    def test_subscription_from_config(self, monkeypatch):
        monkeypatch.setenv("AZURE_SUBSCRIPTION_ID", "from-env")
        config = AzureAuthConfig(subscription_id="from-config")
        assert AuthManager.resolve_subscription_id(MagicMock(), config) == "from-config"

    def test_subscription_from_env(self, monkeypatch):
        monkeypatch.setenv("AZURE_SUBSCRIPTION_ID", "from-env")
        assert AuthManager.resolve_subscription_id(MagicMock(), AzureAuthConfig()) == "from-env"

    def test_subscription_first_enabled(self, monkeypatch):
        monkeypatch.delenv("AZURE_SUBSCRIPTION_ID", raising=False)
        subs = [
            SimpleNamespace(subscription_id="sub-1", display_name="Disabled", state="Disabled"),
            SimpleNamespace(subscription_id="sub-2", display_name="Student", state="Enabled"),
        ]
        fake_client = MagicMock()
        fake_client.return_value.subscriptions.list.return_value = subs
        monkeypatch.setattr("azure.mgmt.resource.SubscriptionClient", fake_client)

        assert AuthManager.resolve_subscription_id(MagicMock(), AzureAuthConfig()) == "sub-2"

    def test_no_subscription(self, monkeypatch):
        monkeypatch.delenv("AZURE_SUBSCRIPTION_ID", raising=False)
        fake_client = MagicMock()
        fake_client.return_value.subscriptions.list.return_value = []
        monkeypatch.setattr("azure.mgmt.resource.SubscriptionClient", fake_client)

        with pytest.raises(NotAuthenticatedError):
            AuthManager.resolve_subscription_id(MagicMock(), AzureAuthConfig())
