"""
Azure authentication.

Builds an azure-identity credential from the configured auth method and
resolves which subscription to provision into.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

from ca1_deploy.config import AzureAuthConfig
from ca1_deploy.core.exceptions import NotAuthenticatedError, SDKNotInstalledError

logger = logging.getLogger("ca1-deploy.auth")

SUBSCRIPTION_ENV = "AZURE_SUBSCRIPTION_ID"


class AuthManager:
    """Azure credential and subscription lookup."""

    @staticmethod
    def get_azure_credential(config: Optional[AzureAuthConfig] = None) -> Any:
        """
        Get Azure credential based on configured auth method.

        Args:
            config: Azure auth configuration. Uses defaults if None.

        Returns:
            Azure credential object (AzureCliCredential, DefaultAzureCredential, etc.)

        Raises:
            SDKNotInstalledError: If azure-identity is not installed.
            ValueError: If service-principal method is missing required fields.
        """
        try:
            from azure.identity import (
                AzureCliCredential,
                ClientSecretCredential,
                DefaultAzureCredential,
                ManagedIdentityCredential,
            )
        except ImportError:
            raise SDKNotInstalledError("azure-identity is not installed")

        if config is None:
            config = AzureAuthConfig()

        method = config.method.lower()

        if method == "cli":
            logger.debug("Using Azure CLI authentication")
            return AzureCliCredential(tenant_id=config.tenant_id)

        elif method == "managed-identity":
            logger.debug("Using Azure Managed Identity authentication")
            return ManagedIdentityCredential(client_id=config.managed_identity_client_id)

        elif method == "service-principal":
            if not all([config.client_id, config.client_secret, config.tenant_id]):
                raise ValueError(
                    "Service principal auth requires client_id, client_secret, and tenant_id"
                )
            logger.debug("Using Azure Service Principal authentication")
            return ClientSecretCredential(
                config.tenant_id, config.client_id, config.client_secret
            )

        elif method == "default":
            logger.debug("Using Azure DefaultAzureCredential (auto-detect)")
            return DefaultAzureCredential()

        else:
            raise ValueError(f"Unsupported Azure auth method: {method}")

    @staticmethod
    def resolve_subscription_id(credential: Any, config: Optional[AzureAuthConfig] = None) -> str:
        """
        Pick the subscription to work in.

        Order: configured id, then AZURE_SUBSCRIPTION_ID, then the first
        enabled subscription the credential can see.

        Raises:
            NotAuthenticatedError: If the credential sees no enabled subscription.
        """
        if config is not None and config.subscription_id:
            return config.subscription_id

        from_env = os.environ.get(SUBSCRIPTION_ENV)
        if from_env:
            return from_env

        from azure.mgmt.resource import SubscriptionClient

        for sub in SubscriptionClient(credential).subscriptions.list():
            state = getattr(sub, "state", None)
            if state is None or str(getattr(state, "value", state)) == "Enabled":
                logger.info(f"Using subscription {sub.display_name} ({sub.subscription_id})")
                return sub.subscription_id

        raise NotAuthenticatedError(
            "No enabled Azure subscription is available for this login",
            hint=f"Run az account set --subscription <id> or export {SUBSCRIPTION_ENV}",
        )
