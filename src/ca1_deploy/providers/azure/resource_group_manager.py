"""
Azure Resource Group Manager — look up, create and force-delete the group.

Deleting the group is the whole teardown: Azure removes every resource it
contains.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from ca1_deploy.core.base_client import ProvisionedResource
from ca1_deploy.core.desired_state import ResourceKind
from ca1_deploy.core.exceptions import SDKNotInstalledError
from ca1_deploy.providers.azure.utils import get_or_none, to_resource

logger = logging.getLogger("ca1-deploy.azure.rg")

# Lets the delete proceed even if VMs are still running.
FORCE_DELETION_TYPES = "Microsoft.Compute/virtualMachines,Microsoft.Compute/virtualMachineScaleSets"


class AzureResourceGroupManager:
    """Resource group operations via ResourceManagementClient."""

    def __init__(self, credential: Any, subscription_id: str, client: Optional[Any] = None) -> None:
        if client is None:
            try:
                from azure.mgmt.resource import ResourceManagementClient
            except ImportError:
                raise SDKNotInstalledError("azure-mgmt-resource is not installed")
            client = ResourceManagementClient(credential, subscription_id)

        self.subscription_id = subscription_id
        self._client = client

    def get(self, name: str) -> Optional[ProvisionedResource]:
        rg = get_or_none(self._client.resource_groups.get, name)
        if rg is None:
            return None
        return to_resource(ResourceKind.RESOURCE_GROUP, rg, location=rg.location)

    def create(self, name: str, location: str) -> ProvisionedResource:
        rg = self._client.resource_groups.create_or_update(name, {"location": location})
        logger.debug(f"Resource group {rg.id} provisioned in {rg.location}")
        return to_resource(ResourceKind.RESOURCE_GROUP, rg, location=rg.location)

    def delete(self, name: str) -> None:
        """Force-delete the group and block until Azure reports completion."""
        op = self._client.resource_groups.begin_delete(
            name, force_deletion_types=FORCE_DELETION_TYPES
        )
        op.wait()
