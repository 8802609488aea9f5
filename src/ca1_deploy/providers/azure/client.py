"""
AzureProvisioningClient — the ProvisioningClient backed by the Azure SDK.

Delegates to one manager per management API: resources, network, compute.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Sequence

from ca1_deploy.core.base_client import ProvisionedResource, ProvisioningClient
from ca1_deploy.core.desired_state import ImageReference, SecurityRuleSpec
from ca1_deploy.providers.azure.network_manager import AzureNetworkManager
from ca1_deploy.providers.azure.resource_group_manager import AzureResourceGroupManager
from ca1_deploy.providers.azure.vm_manager import AzureVMManager

if TYPE_CHECKING:
    from ca1_deploy.core.credentials import AdminLogin


class AzureProvisioningClient(ProvisioningClient):
    """Azure implementation of the provisioning API."""

    def __init__(
        self,
        resource_groups: AzureResourceGroupManager,
        network: AzureNetworkManager,
        compute: AzureVMManager,
    ) -> None:
        self.resource_groups = resource_groups
        self.network = network
        self.compute = compute

    @classmethod
    def from_credential(cls, credential: Any, subscription_id: str) -> "AzureProvisioningClient":
        return cls(
            AzureResourceGroupManager(credential, subscription_id),
            AzureNetworkManager(credential, subscription_id),
            AzureVMManager(credential, subscription_id),
        )

    def get_resource_group(self, name: str) -> Optional[ProvisionedResource]:
        return self.resource_groups.get(name)

    def create_resource_group(self, name: str, location: str) -> ProvisionedResource:
        return self.resource_groups.create(name, location)

    def delete_resource_group(self, name: str) -> None:
        self.resource_groups.delete(name)

    def get_virtual_network(self, resource_group: str, name: str) -> Optional[ProvisionedResource]:
        return self.network.get_virtual_network(resource_group, name)

    def create_virtual_network(
        self,
        resource_group: str,
        name: str,
        location: str,
        address_prefix: str,
        subnet_name: str,
        subnet_prefix: str,
    ) -> ProvisionedResource:
        return self.network.create_virtual_network(
            resource_group, name, location, address_prefix, subnet_name, subnet_prefix
        )

    def get_subnet(self, resource_group: str, vnet_name: str, name: str) -> Optional[ProvisionedResource]:
        return self.network.get_subnet(resource_group, vnet_name, name)

    def add_subnet(
        self, resource_group: str, vnet_name: str, name: str, address_prefix: str
    ) -> ProvisionedResource:
        return self.network.add_subnet(resource_group, vnet_name, name, address_prefix)

    def get_network_security_group(self, resource_group: str, name: str) -> Optional[ProvisionedResource]:
        return self.network.get_network_security_group(resource_group, name)

    def create_network_security_group(
        self,
        resource_group: str,
        name: str,
        location: str,
        rules: Sequence[SecurityRuleSpec],
    ) -> ProvisionedResource:
        return self.network.create_network_security_group(resource_group, name, location, rules)

    def get_public_ip(self, resource_group: str, name: str) -> Optional[ProvisionedResource]:
        return self.network.get_public_ip(resource_group, name)

    def create_public_ip(self, resource_group: str, name: str, location: str) -> ProvisionedResource:
        return self.network.create_public_ip(resource_group, name, location)

    def get_network_interface(self, resource_group: str, name: str) -> Optional[ProvisionedResource]:
        return self.network.get_network_interface(resource_group, name)

    def create_network_interface(
        self,
        resource_group: str,
        name: str,
        location: str,
        subnet_id: str,
        nsg_id: str,
        public_ip_id: str,
    ) -> ProvisionedResource:
        return self.network.create_network_interface(
            resource_group, name, location, subnet_id, nsg_id, public_ip_id
        )

    def get_virtual_machine(self, resource_group: str, name: str) -> Optional[ProvisionedResource]:
        return self.compute.get(resource_group, name)

    def create_virtual_machine(
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
        return self.compute.create(
            resource_group, name, location, vm_size, image, nic_id, login, custom_data
        )
