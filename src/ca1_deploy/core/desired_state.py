"""
Desired state — the fixed CA1 topology and the results of reconciling it.

Every resource name is a module-level constant. DesiredState bundles them with
the per-run inputs (location, admin username, bootstrap file) and is handed to
the Reconciler; nothing here talks to Azure.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


# ── Fixed topology ─────────────────────────────────────────────────────────────

RESOURCE_GROUP_NAME = "ca1-rg"
VNET_NAME = "ca1-vnet"
SUBNET_NAME = "ca1-subnet"
NSG_NAME = "ca1-nsg"
PUBLIC_IP_NAME = "ca1-pip"
NIC_NAME = "ca1-nic"
VM_NAME = "ca1-vm"

VNET_ADDRESS_PREFIX = "10.0.0.0/16"
SUBNET_ADDRESS_PREFIX = "10.0.1.0/24"

VM_SIZE = "Standard_B1s"
HTTP_PORT = 8080
SSH_PORT = 22

DEFAULT_LOCATION = "norwayeast"
DEFAULT_ADMIN_USERNAME = "ca1admin"
DEFAULT_BOOTSTRAP_FILE = "vm_init.yml"


class ResourceKind(str, Enum):
    """Resource kinds in dependency order."""

    RESOURCE_GROUP = "resource_group"
    VIRTUAL_NETWORK = "virtual_network"
    SUBNET = "subnet"
    NETWORK_SECURITY_GROUP = "network_security_group"
    PUBLIC_IP = "public_ip"
    NETWORK_INTERFACE = "network_interface"
    VIRTUAL_MACHINE = "virtual_machine"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


class StepOutcome(str, Enum):
    """What reconciliation did with a single resource."""

    CREATED = "created"
    EXISTING = "existing"
    REPAIRED = "repaired"


class RunStatus(str, Enum):
    CREATED = "created"
    NO_OP = "no-op"
    DELETED = "deleted"


@dataclass(frozen=True)
class SecurityRuleSpec:
    """An inbound allow rule on the network security group."""

    name: str
    port: int
    priority: int
    protocol: str = "Tcp"
    direction: str = "Inbound"
    access: str = "Allow"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "protocol": self.protocol,
            "source_port_range": "*",
            "destination_port_range": str(self.port),
            "source_address_prefix": "*",
            "destination_address_prefix": "*",
            "access": self.access,
            "priority": self.priority,
            "direction": self.direction,
        }


@dataclass(frozen=True)
class ImageReference:
    """Marketplace image used for the VM's OS disk."""

    publisher: str = "Canonical"
    offer: str = "0001-com-ubuntu-server-jammy"
    sku: str = "22_04-lts-gen2"
    version: str = "latest"

    def to_dict(self) -> Dict[str, str]:
        return {
            "publisher": self.publisher,
            "offer": self.offer,
            "sku": self.sku,
            "version": self.version,
        }


SECURITY_RULES: Tuple[SecurityRuleSpec, ...] = (
    SecurityRuleSpec(name="allow-ssh", port=SSH_PORT, priority=1000),
    SecurityRuleSpec(name="allow-http-8080", port=HTTP_PORT, priority=1010),
)


@dataclass(frozen=True)
class DesiredState:
    """The complete declared topology for one run."""

    location: str = DEFAULT_LOCATION
    admin_username: str = DEFAULT_ADMIN_USERNAME
    bootstrap_file: str = DEFAULT_BOOTSTRAP_FILE

    resource_group: str = RESOURCE_GROUP_NAME
    vnet: str = VNET_NAME
    subnet: str = SUBNET_NAME
    nsg: str = NSG_NAME
    public_ip: str = PUBLIC_IP_NAME
    nic: str = NIC_NAME
    vm: str = VM_NAME

    vnet_address_prefix: str = VNET_ADDRESS_PREFIX
    subnet_address_prefix: str = SUBNET_ADDRESS_PREFIX
    security_rules: Tuple[SecurityRuleSpec, ...] = SECURITY_RULES
    vm_size: str = VM_SIZE
    image: ImageReference = field(default_factory=ImageReference)


# ── Results ────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ConnectionInfo:
    """How to reach the provisioned VM."""

    public_ip: str
    admin_username: str
    http_port: int = HTTP_PORT

    @property
    def ssh_command(self) -> str:
        return f"ssh {self.admin_username}@{self.public_ip}"

    @property
    def http_url(self) -> str:
        return f"http://{self.public_ip}:{self.http_port}/"

    def to_dict(self) -> Dict[str, str]:
        return {
            "public_ip": self.public_ip,
            "ssh": self.ssh_command,
            "http": self.http_url,
        }


@dataclass
class StepResult:
    """Outcome of reconciling one resource."""

    kind: ResourceKind
    name: str
    outcome: StepOutcome

    def to_dict(self) -> Dict[str, str]:
        return {"kind": self.kind.value, "name": self.name, "outcome": self.outcome.value}


@dataclass
class ProvisionResult:
    """Aggregated result of a provisioning run."""

    status: RunStatus
    connection: Optional[ConnectionInfo] = None
    steps: List[StepResult] = field(default_factory=list)
    finished_at: str = field(
        default_factory=lambda: datetime.datetime.now(datetime.timezone.utc).isoformat()
    )

    @property
    def public_ip(self) -> Optional[str]:
        return self.connection.public_ip if self.connection else None

    @property
    def created_count(self) -> int:
        return sum(1 for s in self.steps if s.outcome is StepOutcome.CREATED)

    def summary(self) -> Dict[str, Any]:
        """Return a summary dictionary."""
        counts: Dict[str, int] = {}
        for s in self.steps:
            counts[s.outcome.value] = counts.get(s.outcome.value, 0) + 1
        return {
            "status": self.status.value,
            "public_ip": self.public_ip,
            "finished_at": self.finished_at,
            "by_outcome": counts,
        }

    def to_dict(self) -> Dict[str, Any]:
        result = self.summary()
        result["connection"] = self.connection.to_dict() if self.connection else None
        result["steps"] = [s.to_dict() for s in self.steps]
        return result


@dataclass
class TeardownResult:
    """Result of a teardown run."""

    status: RunStatus
    resource_group: str
    finished_at: str = field(
        default_factory=lambda: datetime.datetime.now(datetime.timezone.utc).isoformat()
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "resource_group": self.resource_group,
            "finished_at": self.finished_at,
        }
