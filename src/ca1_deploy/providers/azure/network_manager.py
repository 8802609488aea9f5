"""
Azure Network Manager — virtual network, subnet, NSG, public IP and NIC.

All create calls are long-running operations; each one waits on its poller
so the next dependent resource sees a finished parent.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from ca1_deploy.core.base_client import ProvisionedResource
from ca1_deploy.core.desired_state import ResourceKind, SecurityRuleSpec
from ca1_deploy.core.exceptions import SDKNotInstalledError
from ca1_deploy.providers.azure.utils import get_or_none, to_resource

logger = logging.getLogger("ca1-deploy.azure.network")


class AzureNetworkManager:
    """Network resources via NetworkManagementClient."""

    def __init__(self, credential: Any, subscription_id: str, client: Optional[Any] = None) -> None:
        if client is None:
            try:
                from azure.mgmt.network import NetworkManagementClient
            except ImportError:
                raise SDKNotInstalledError("azure-mgmt-network is not installed")
            client = NetworkManagementClient(credential, subscription_id)

        self.subscription_id = subscription_id
        self._client = client

    # ── Virtual network & subnet ───────────────────────────────────────────

    def get_virtual_network(self, resource_group: str, name: str) -> Optional[ProvisionedResource]:
        vnet = get_or_none(self._client.virtual_networks.get, resource_group, name)
        if vnet is None:
            return None
        return to_resource(ResourceKind.VIRTUAL_NETWORK, vnet)

    def create_virtual_network(
        self,
        resource_group: str,
        name: str,
        location: str,
        address_prefix: str,
        subnet_name: str,
        subnet_prefix: str,
    ) -> ProvisionedResource:
        op = self._client.virtual_networks.begin_create_or_update(
            resource_group,
            name,
            {
                "location": location,
                "address_space": {"address_prefixes": [address_prefix]},
                "subnets": [{"name": subnet_name, "address_prefix": subnet_prefix}],
            },
        )
        return to_resource(ResourceKind.VIRTUAL_NETWORK, op.result())

    def get_subnet(self, resource_group: str, vnet_name: str, name: str) -> Optional[ProvisionedResource]:
        subnet = get_or_none(self._client.subnets.get, resource_group, vnet_name, name)
        if subnet is None:
            return None
        return to_resource(ResourceKind.SUBNET, subnet, address_prefix=subnet.address_prefix)

    def add_subnet(
        self, resource_group: str, vnet_name: str, name: str, address_prefix: str
    ) -> ProvisionedResource:
        """Append the subnet to the network's configuration and write the network back."""
        from azure.mgmt.network.models import Subnet

        vnet = self._client.virtual_networks.get(resource_group, vnet_name)
        vnet.subnets = list(vnet.subnets or []) + [Subnet(name=name, address_prefix=address_prefix)]
        updated = self._client.virtual_networks.begin_create_or_update(
            resource_group, vnet_name, vnet
        ).result()

        for subnet in updated.subnets or []:
            if subnet.name == name:
                return to_resource(ResourceKind.SUBNET, subnet, address_prefix=subnet.address_prefix)
        raise RuntimeError(f"Subnet {name} missing from {vnet_name} after update")

    # ── Security group ─────────────────────────────────────────────────────

    def get_network_security_group(self, resource_group: str, name: str) -> Optional[ProvisionedResource]:
        nsg = get_or_none(self._client.network_security_groups.get, resource_group, name)
        if nsg is None:
            return None
        return to_resource(ResourceKind.NETWORK_SECURITY_GROUP, nsg)

    def create_network_security_group(
        self,
        resource_group: str,
        name: str,
        location: str,
        rules: Sequence[SecurityRuleSpec],
    ) -> ProvisionedResource:
        op = self._client.network_security_groups.begin_create_or_update(
            resource_group,
            name,
            {
                "location": location,
                "security_rules": [rule.to_dict() for rule in rules],
            },
        )
        nsg = op.result()
        logger.debug(f"NSG {name} rules: {', '.join(r.name for r in rules)}")
        return to_resource(ResourceKind.NETWORK_SECURITY_GROUP, nsg)

    # ── Public IP ──────────────────────────────────────────────────────────

    def get_public_ip(self, resource_group: str, name: str) -> Optional[ProvisionedResource]:
        ip = get_or_none(self._client.public_ip_addresses.get, resource_group, name)
        if ip is None:
            return None
        return to_resource(ResourceKind.PUBLIC_IP, ip, ip_address=getattr(ip, "ip_address", None))

    def create_public_ip(self, resource_group: str, name: str, location: str) -> ProvisionedResource:
        op = self._client.public_ip_addresses.begin_create_or_update(
            resource_group,
            name,
            {
                "location": location,
                "sku": {"name": "Standard"},
                "public_ip_allocation_method": "Static",
                "public_ip_address_version": "IPv4",
            },
        )
        ip = op.result()
        return to_resource(ResourceKind.PUBLIC_IP, ip, ip_address=getattr(ip, "ip_address", None))

    # ── Network interface ──────────────────────────────────────────────────

    def get_network_interface(self, resource_group: str, name: str) -> Optional[ProvisionedResource]:
        nic = get_or_none(self._client.network_interfaces.get, resource_group, name)
        if nic is None:
            return None
        return to_resource(ResourceKind.NETWORK_INTERFACE, nic)

    def create_network_interface(
        self,
        resource_group: str,
        name: str,
        location: str,
        subnet_id: str,
        nsg_id: str,
        public_ip_id: str,
    ) -> ProvisionedResource:
        op = self._client.network_interfaces.begin_create_or_update(
            resource_group,
            name,
            {
                "location": location,
                "ip_configurations": [
                    {
                        "name": "ipconfig1",
                        "subnet": {"id": subnet_id},
                        "public_ip_address": {"id": public_ip_id},
                    }
                ],
                "network_security_group": {"id": nsg_id},
            },
        )
        return to_resource(ResourceKind.NETWORK_INTERFACE, op.result())
