"""
Reconciler — bring the CA1 topology into existence, or remove it.

Provisioning walks the resources in dependency order (group, network, subnet,
security group, public IP, NIC, VM). Each one is looked up by name and only
created when absent. An existing VM means a previous run finished, so the run
stops there without touching anything else.

Teardown deletes the resource group as a whole and lets the provider cascade.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Tuple

from ca1_deploy.core.base_client import ProvisionedResource, ProvisioningClient
from ca1_deploy.core.bootstrap import load_custom_data
from ca1_deploy.core.credentials import CredentialSource
from ca1_deploy.core.desired_state import (
    ConnectionInfo,
    DesiredState,
    ProvisionResult,
    ResourceKind,
    RunStatus,
    StepOutcome,
    StepResult,
    TeardownResult,
)

logger = logging.getLogger("ca1-deploy.reconciler")

Lookup = Callable[[], Optional[ProvisionedResource]]
Create = Callable[[], ProvisionedResource]
BootstrapLoader = Callable[[str], str]


def _log(message: str, kind: ResourceKind, name: str, action: str) -> None:
    logger.info(message, extra={"resource_kind": kind.value, "resource_name": name, "action": action})


def ensure_resource(
    kind: ResourceKind,
    name: str,
    lookup: Lookup,
    create: Create,
) -> Tuple[ProvisionedResource, StepOutcome]:
    """
    Return the named resource, creating it only if the lookup finds nothing.

    Args:
        kind: Resource kind, for logging.
        name: Resource name, for logging.
        lookup: Returns the existing resource or None.
        create: Creates the resource and returns it. Called at most once.

    Returns:
        The resource and whether it was created or reused.
    """
    existing = lookup()
    if existing is not None:
        _log(f"{kind.label.capitalize()} '{name}' already exists, reusing", kind, name, "reuse")
        return existing, StepOutcome.EXISTING

    _log(f"Creating {kind.label} '{name}'...", kind, name, "create")
    created = create()
    _log(f"Created {kind.label} '{name}'", kind, name, "created")
    return created, StepOutcome.CREATED


class Reconciler:
    """Reconciles a DesiredState against a ProvisioningClient."""

    def __init__(
        self,
        client: ProvisioningClient,
        desired: Optional[DesiredState] = None,
        bootstrap_loader: BootstrapLoader = load_custom_data,
    ) -> None:
        self.client = client
        self.desired = desired or DesiredState()
        self.bootstrap_loader = bootstrap_loader

    # ── Provision ──────────────────────────────────────────────────────────

    def provision(self, credential_source: CredentialSource) -> ProvisionResult:
        """
        Create whatever part of the topology is missing.

        Args:
            credential_source: Supplies the VM admin password, asked only when
                the VM actually has to be created.

        Returns:
            ProvisionResult with status "no-op" when the VM already existed,
            otherwise "created".

        Raises:
            BootstrapFileMissingError: If the VM must be created and the
                bootstrap file is absent.
        """
        d = self.desired
        c = self.client
        rg = d.resource_group
        steps: List[StepResult] = []

        _, outcome = ensure_resource(
            ResourceKind.RESOURCE_GROUP, rg,
            lambda: c.get_resource_group(rg),
            lambda: c.create_resource_group(rg, d.location),
        )
        steps.append(StepResult(ResourceKind.RESOURCE_GROUP, rg, outcome))

        vm_lookup: Lookup = lambda: c.get_virtual_machine(rg, d.vm)

        # A VM can only exist inside a group that existed before this run.
        if outcome is StepOutcome.EXISTING:
            vm = vm_lookup()
            if vm is not None:
                logger.info(f"VM '{d.vm}' already exists, environment is fully provisioned")
                steps.append(StepResult(ResourceKind.VIRTUAL_MACHINE, d.vm, StepOutcome.EXISTING))
                return ProvisionResult(
                    status=RunStatus.NO_OP,
                    connection=self._connection_info(),
                    steps=steps,
                )
            vm_lookup = lambda: None  # already known to be absent

        vnet, vnet_outcome = ensure_resource(
            ResourceKind.VIRTUAL_NETWORK, d.vnet,
            lambda: c.get_virtual_network(rg, d.vnet),
            lambda: c.create_virtual_network(
                rg, d.vnet, d.location, d.vnet_address_prefix, d.subnet, d.subnet_address_prefix
            ),
        )
        steps.append(StepResult(ResourceKind.VIRTUAL_NETWORK, vnet.name, vnet_outcome))

        subnet, subnet_outcome = self._ensure_subnet(vnet_outcome)
        steps.append(StepResult(ResourceKind.SUBNET, subnet.name, subnet_outcome))

        nsg, outcome = ensure_resource(
            ResourceKind.NETWORK_SECURITY_GROUP, d.nsg,
            lambda: c.get_network_security_group(rg, d.nsg),
            lambda: c.create_network_security_group(rg, d.nsg, d.location, d.security_rules),
        )
        steps.append(StepResult(ResourceKind.NETWORK_SECURITY_GROUP, nsg.name, outcome))

        pip, outcome = ensure_resource(
            ResourceKind.PUBLIC_IP, d.public_ip,
            lambda: c.get_public_ip(rg, d.public_ip),
            lambda: c.create_public_ip(rg, d.public_ip, d.location),
        )
        steps.append(StepResult(ResourceKind.PUBLIC_IP, pip.name, outcome))

        nic, outcome = ensure_resource(
            ResourceKind.NETWORK_INTERFACE, d.nic,
            lambda: c.get_network_interface(rg, d.nic),
            lambda: c.create_network_interface(
                rg, d.nic, d.location, subnet.resource_id, nsg.resource_id, pip.resource_id
            ),
        )
        steps.append(StepResult(ResourceKind.NETWORK_INTERFACE, nic.name, outcome))

        vm, outcome = ensure_resource(
            ResourceKind.VIRTUAL_MACHINE, d.vm,
            vm_lookup,
            lambda: self._create_vm(nic.resource_id, credential_source),
        )
        steps.append(StepResult(ResourceKind.VIRTUAL_MACHINE, vm.name, outcome))

        return ProvisionResult(
            status=RunStatus.CREATED,
            connection=self._connection_info(),
            steps=steps,
        )

    def _ensure_subnet(self, vnet_outcome: StepOutcome) -> Tuple[ProvisionedResource, StepOutcome]:
        """Re-check the subnet even when the network existed; add it if missing."""
        d = self.desired
        subnet = self.client.get_subnet(d.resource_group, d.vnet, d.subnet)
        if subnet is not None:
            if vnet_outcome is StepOutcome.CREATED:
                return subnet, StepOutcome.CREATED
            _log(f"Subnet '{d.subnet}' already exists, reusing", ResourceKind.SUBNET, d.subnet, "reuse")
            return subnet, StepOutcome.EXISTING

        logger.warning(
            f"Network '{d.vnet}' exists without subnet '{d.subnet}', adding it",
            extra={"resource_kind": ResourceKind.SUBNET.value, "resource_name": d.subnet, "action": "repair"},
        )
        subnet = self.client.add_subnet(d.resource_group, d.vnet, d.subnet, d.subnet_address_prefix)
        return subnet, StepOutcome.REPAIRED

    def _create_vm(self, nic_id: str, credential_source: CredentialSource) -> ProvisionedResource:
        d = self.desired
        custom_data = self.bootstrap_loader(d.bootstrap_file)
        login = credential_source.login_for(d.admin_username)
        return self.client.create_virtual_machine(
            d.resource_group,
            d.vm,
            d.location,
            d.vm_size,
            d.image,
            nic_id,
            login,
            custom_data,
        )

    def _connection_info(self) -> Optional[ConnectionInfo]:
        pip = self.client.get_public_ip(self.desired.resource_group, self.desired.public_ip)
        address = pip.properties.get("ip_address") if pip else None
        if not address:
            logger.warning(f"Public IP '{self.desired.public_ip}' has no address assigned yet")
            return None
        return ConnectionInfo(public_ip=address, admin_username=self.desired.admin_username)

    # ── Teardown ───────────────────────────────────────────────────────────

    def teardown(self) -> TeardownResult:
        """Delete the resource group if it exists. Safe to repeat."""
        rg = self.desired.resource_group
        kind = ResourceKind.RESOURCE_GROUP

        if self.client.get_resource_group(rg) is None:
            _log(f"Resource group '{rg}' does not exist, nothing to tear down", kind, rg, "skip")
            return TeardownResult(status=RunStatus.NO_OP, resource_group=rg)

        _log(f"Deleting resource group '{rg}' and everything in it...", kind, rg, "delete")
        self.client.delete_resource_group(rg)
        _log(f"Resource group '{rg}' deleted", kind, rg, "deleted")
        return TeardownResult(status=RunStatus.DELETED, resource_group=rg)
