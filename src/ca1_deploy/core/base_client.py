"""
Base provisioning client — abstract interface to the cloud provider.

The Reconciler only ever talks to a ProvisioningClient. Lookups return a
ProvisionedResource or None when the resource does not exist; create, update
and delete calls block until the provider has finished and let provider
errors propagate.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Optional, Sequence

from ca1_deploy.core.desired_state import ImageReference, ResourceKind, SecurityRuleSpec

if TYPE_CHECKING:
    from ca1_deploy.core.credentials import AdminLogin


@dataclass
class ProvisionedResource:
    """Provider-neutral view of a resource that exists in the cloud."""

    kind: ResourceKind
    name: str
    resource_id: str
    properties: Dict[str, Any] = field(default_factory=dict)


class ProvisioningClient(ABC):
    """
    Abstract provisioning API.

    One lookup/create pair per resource kind, plus the subnet update used to
    repair a network left without its subnet and the resource group delete
    used by teardown.
    """

    # ── Resource group ─────────────────────────────────────────────────────

    @abstractmethod
    def get_resource_group(self, name: str) -> Optional[ProvisionedResource]:
        ...

    @abstractmethod
    def create_resource_group(self, name: str, location: str) -> ProvisionedResource:
        ...

    @abstractmethod
    def delete_resource_group(self, name: str) -> None:
        """Force-delete the group and everything in it, blocking until done."""
        ...

    # ── Network ────────────────────────────────────────────────────────────

    @abstractmethod
    def get_virtual_network(self, resource_group: str, name: str) -> Optional[ProvisionedResource]:
        ...

    @abstractmethod
    def create_virtual_network(
        self,
        resource_group: str,
        name: str,
        location: str,
        address_prefix: str,
        subnet_name: str,
        subnet_prefix: str,
    ) -> ProvisionedResource:
        """Create the network together with its initial subnet."""
        ...

    @abstractmethod
    def get_subnet(self, resource_group: str, vnet_name: str, name: str) -> Optional[ProvisionedResource]:
        ...

    @abstractmethod
    def add_subnet(
        self, resource_group: str, vnet_name: str, name: str, address_prefix: str
    ) -> ProvisionedResource:
        """Add a subnet to an existing network and persist the network update."""
        ...

    @abstractmethod
    def get_network_security_group(self, resource_group: str, name: str) -> Optional[ProvisionedResource]:
        ...

    @abstractmethod
    def create_network_security_group(
        self,
        resource_group: str,
        name: str,
        location: str,
        rules: Sequence[SecurityRuleSpec],
    ) -> ProvisionedResource:
        ...

    @abstractmethod
    def get_public_ip(self, resource_group: str, name: str) -> Optional[ProvisionedResource]:
        ...

    @abstractmethod
    def create_public_ip(self, resource_group: str, name: str, location: str) -> ProvisionedResource:
        """Create a Standard SKU, statically allocated IPv4 address."""
        ...

    @abstractmethod
    def get_network_interface(self, resource_group: str, name: str) -> Optional[ProvisionedResource]:
        ...

    @abstractmethod
    def create_network_interface(
        self,
        resource_group: str,
        name: str,
        location: str,
        subnet_id: str,
        nsg_id: str,
        public_ip_id: str,
    ) -> ProvisionedResource:
        ...

    # ── Compute ────────────────────────────────────────────────────────────

    @abstractmethod
    def get_virtual_machine(self, resource_group: str, name: str) -> Optional[ProvisionedResource]:
        ...

    @abstractmethod
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
        ...
