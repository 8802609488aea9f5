"""
Shared fixtures: an in-memory ProvisioningClient that records every call.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from ca1_deploy.core.base_client import ProvisionedResource, ProvisioningClient
from ca1_deploy.core.credentials import StaticCredentialSource
from ca1_deploy.core.desired_state import DesiredState, ImageReference, ResourceKind, SecurityRuleSpec

FAKE_IP = "20.100.1.2"
BOOTSTRAP_TEXT = "#cloud-config\npackage_update: true\npackages:\n  - nginx\n"

K = ResourceKind


class FakeProvisioningClient(ProvisioningClient):
    """
    Simulates Azure in memory.

    Create calls assert that their dependencies already exist, so any
    out-of-order creation fails the test that triggers it.
    """

    def __init__(self, ip_address: Optional[str] = FAKE_IP) -> None:
        self.resources: Dict[Tuple[ResourceKind, str], ProvisionedResource] = {}
        self.calls: List[str] = []
        self.fail_on: Dict[str, Exception] = {}
        self.ip_address = ip_address
        self.last_vm_args: Dict[str, object] = {}
        self.last_nsg_rules: Sequence[SecurityRuleSpec] = ()

    # ── Test helpers ───────────────────────────────────────────────────────

    def seed(self, kind: ResourceKind, name: str, **properties) -> ProvisionedResource:
        res = ProvisionedResource(kind, name, f"/fake/{kind.value}/{name}", dict(properties))
        self.resources[(kind, name)] = res
        return res

    def seed_all(self, desired: DesiredState) -> None:
        self.seed(K.RESOURCE_GROUP, desired.resource_group)
        self.seed(K.VIRTUAL_NETWORK, desired.vnet)
        self.seed(K.SUBNET, desired.subnet)
        self.seed(K.NETWORK_SECURITY_GROUP, desired.nsg)
        self.seed(K.PUBLIC_IP, desired.public_ip, ip_address=self.ip_address)
        self.seed(K.NETWORK_INTERFACE, desired.nic)
        self.seed(K.VIRTUAL_MACHINE, desired.vm)

    def has(self, kind: ResourceKind, name: str) -> bool:
        return (kind, name) in self.resources

    @property
    def mutations(self) -> List[str]:
        return [c for c in self.calls if c.startswith(("create_", "add_", "delete_"))]

    def _record(self, call: str) -> None:
        self.calls.append(call)
        if call in self.fail_on:
            raise self.fail_on[call]

    def _get(self, call: str, kind: ResourceKind, name: str) -> Optional[ProvisionedResource]:
        self._record(call)
        return self.resources.get((kind, name))

    def _require(self, kind: ResourceKind, resource_id: Optional[str] = None, name: Optional[str] = None) -> None:
        found = [r for (k, _), r in self.resources.items()
                 if k is kind and (resource_id is None or r.resource_id == resource_id)
                 and (name is None or r.name == name)]
        assert found, f"{kind.value} must exist before its dependents are created"

    # ── ProvisioningClient ─────────────────────────────────────────────────

    def get_resource_group(self, name):
        return self._get("get_resource_group", K.RESOURCE_GROUP, name)

    def create_resource_group(self, name, location):
        self._record("create_resource_group")
        return self.seed(K.RESOURCE_GROUP, name, location=location)

    def delete_resource_group(self, name):
        self._record("delete_resource_group")
        self.resources.clear()

    def get_virtual_network(self, resource_group, name):
        return self._get("get_virtual_network", K.VIRTUAL_NETWORK, name)

    def create_virtual_network(self, resource_group, name, location, address_prefix, subnet_name, subnet_prefix):
        self._record("create_virtual_network")
        self._require(K.RESOURCE_GROUP, name=resource_group)
        self.seed(K.SUBNET, subnet_name, address_prefix=subnet_prefix)
        return self.seed(K.VIRTUAL_NETWORK, name, address_prefix=address_prefix)

    def get_subnet(self, resource_group, vnet_name, name):
        self._record("get_subnet")
        if not self.has(K.VIRTUAL_NETWORK, vnet_name):
            return None
        return self.resources.get((K.SUBNET, name))

    def add_subnet(self, resource_group, vnet_name, name, address_prefix):
        self._record("add_subnet")
        self._require(K.VIRTUAL_NETWORK, name=vnet_name)
        return self.seed(K.SUBNET, name, address_prefix=address_prefix)

    def get_network_security_group(self, resource_group, name):
        return self._get("get_network_security_group", K.NETWORK_SECURITY_GROUP, name)

    def create_network_security_group(self, resource_group, name, location, rules):
        self._record("create_network_security_group")
        self._require(K.RESOURCE_GROUP, name=resource_group)
        self.last_nsg_rules = tuple(rules)
        return self.seed(K.NETWORK_SECURITY_GROUP, name)

    def get_public_ip(self, resource_group, name):
        return self._get("get_public_ip", K.PUBLIC_IP, name)

    def create_public_ip(self, resource_group, name, location):
        self._record("create_public_ip")
        self._require(K.RESOURCE_GROUP, name=resource_group)
        return self.seed(K.PUBLIC_IP, name, ip_address=self.ip_address)

    def get_network_interface(self, resource_group, name):
        return self._get("get_network_interface", K.NETWORK_INTERFACE, name)

    def create_network_interface(self, resource_group, name, location, subnet_id, nsg_id, public_ip_id):
        self._record("create_network_interface")
        self._require(K.SUBNET, resource_id=subnet_id)
        self._require(K.NETWORK_SECURITY_GROUP, resource_id=nsg_id)
        self._require(K.PUBLIC_IP, resource_id=public_ip_id)
        return self.seed(K.NETWORK_INTERFACE, name)

    def get_virtual_machine(self, resource_group, name):
        return self._get("get_virtual_machine", K.VIRTUAL_MACHINE, name)

    def create_virtual_machine(self, resource_group, name, location, vm_size, image: ImageReference,
                               nic_id, login, custom_data):
        self._record("create_virtual_machine")
        self._require(K.NETWORK_INTERFACE, resource_id=nic_id)
        self.last_vm_args = {
            "location": location,
            "vm_size": vm_size,
            "image": image,
            "login": login,
            "custom_data": custom_data,
        }
        return self.seed(K.VIRTUAL_MACHINE, name)


class CountingCredentialSource(StaticCredentialSource):
    def __init__(self, password: str = "S3cret-Passw0rd!") -> None:
        super().__init__(password)
        self.asked = 0

    def get_password(self, username: str) -> str:
        self.asked += 1
        return super().get_password(username)


@pytest.fixture
def desired() -> DesiredState:
    return DesiredState()


@pytest.fixture
def fake_client() -> FakeProvisioningClient:
    return FakeProvisioningClient()


@pytest.fixture
def credentials() -> CountingCredentialSource:
    return CountingCredentialSource()


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Empty working directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def bootstrap_file(workdir):
    """Working directory containing vm_init.yml."""
    path = workdir / "vm_init.yml"
    path.write_text(BOOTSTRAP_TEXT, encoding="utf-8")
    return path
