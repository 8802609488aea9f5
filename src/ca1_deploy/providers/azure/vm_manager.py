"""
Azure VM Manager — look up and create the Linux VM.

The VM logs in with a password and receives the cloud-init file as base64
custom data.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional

from ca1_deploy.core.base_client import ProvisionedResource
from ca1_deploy.core.desired_state import ImageReference, ResourceKind
from ca1_deploy.core.exceptions import SDKNotInstalledError
from ca1_deploy.providers.azure.utils import get_or_none, to_resource

if TYPE_CHECKING:
    from ca1_deploy.core.credentials import AdminLogin

logger = logging.getLogger("ca1-deploy.azure.vm")


class AzureVMManager:
    """Virtual machine operations via ComputeManagementClient."""

    def __init__(self, credential: Any, subscription_id: str, client: Optional[Any] = None) -> None:
        if client is None:
            try:
                from azure.mgmt.compute import ComputeManagementClient
            except ImportError:
                raise SDKNotInstalledError("azure-mgmt-compute is not installed")
            client = ComputeManagementClient(credential, subscription_id)

        self.subscription_id = subscription_id
        self._client = client

    def get(self, resource_group: str, name: str) -> Optional[ProvisionedResource]:
        vm = get_or_none(self._client.virtual_machines.get, resource_group, name)
        if vm is None:
            return None
        return self._to_resource(vm)

    def create(
        self,
        resource_group: str,
        name: str,
        location: str,
        vm_size: str,
        image: ImageReference,
        nic_id: str,
        login: "AdminLogin",
        custom_data: str,
    ) -> ProvisionedResource:
        """Create the VM and wait until Azure reports it provisioned."""
        parameters = {
            "location": location,
            "hardware_profile": {"vm_size": vm_size},
            "storage_profile": {
                "image_reference": image.to_dict(),
                "os_disk": {
                    "create_option": "FromImage",
                    "managed_disk": {"storage_account_type": "Standard_LRS"},
                },
            },
            "os_profile": {
                "computer_name": name,
                "admin_username": login.username,
                "admin_password": login.password,
                "custom_data": custom_data,
                "linux_configuration": {"disable_password_authentication": False},
            },
            "network_profile": {
                "network_interfaces": [{"id": nic_id, "primary": True}],
            },
        }
        logger.debug(f"Creating VM {name} ({vm_size}) from {image.offer}:{image.sku}")
        op = self._client.virtual_machines.begin_create_or_update(resource_group, name, parameters)
        return self._to_resource(op.result())

    @staticmethod
    def _to_resource(vm: Any) -> ProvisionedResource:
        vm_size = ""
        if getattr(vm, "hardware_profile", None):
            vm_size = getattr(vm.hardware_profile, "vm_size", "") or ""
        return to_resource(
            ResourceKind.VIRTUAL_MACHINE,
            vm,
            vm_size=vm_size,
            provisioning_state=getattr(vm, "provisioning_state", None),
        )
