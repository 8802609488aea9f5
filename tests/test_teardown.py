"""
Unit tests for teardown.
"""

from __future__ import annotations

import pytest
from azure.core.exceptions import HttpResponseError

from ca1_deploy.core.desired_state import ResourceKind, RunStatus
from ca1_deploy.core.reconciler import Reconciler


class TestTeardown:
    """Teardown deletes the whole group or does nothing."""

    def test_absent_group_is_a_no_op(self, fake_client, desired):
        result = Reconciler(fake_client, desired).teardown()

        assert result.status is RunStatus.NO_OP
        assert result.resource_group == "ca1-rg"
        assert "delete_resource_group" not in fake_client.calls

    def test_present_group_is_deleted(self, fake_client, desired):
        fake_client.seed_all(desired)

        result = Reconciler(fake_client, desired).teardown()

        assert result.status is RunStatus.DELETED
        assert fake_client.mutations == ["delete_resource_group"]
        assert fake_client.resources == {}

    def test_teardown_twice_is_safe(self, fake_client, desired):
        fake_client.seed(ResourceKind.RESOURCE_GROUP, desired.resource_group)
        reconciler = Reconciler(fake_client, desired)

        first = reconciler.teardown()
        second = reconciler.teardown()

        assert first.status is RunStatus.DELETED
        assert second.status is RunStatus.NO_OP
        assert fake_client.mutations == ["delete_resource_group"]

    def test_delete_error_propagates(self, fake_client, desired):
        fake_client.seed(ResourceKind.RESOURCE_GROUP, desired.resource_group)
        fake_client.fail_on["delete_resource_group"] = HttpResponseError(message="ScopeLocked")

        with pytest.raises(HttpResponseError, match="ScopeLocked"):
            Reconciler(fake_client, desired).teardown()

    def test_provision_after_teardown_recreates(self, fake_client, desired, credentials, bootstrap_file):
        reconciler = Reconciler(fake_client, desired)
        reconciler.provision(credentials)
        reconciler.teardown()
        fake_client.calls.clear()

        result = reconciler.provision(credentials)

        assert result.status is RunStatus.CREATED
        assert "create_virtual_machine" in fake_client.mutations

    def test_to_dict(self, fake_client, desired):
        result = Reconciler(fake_client, desired).teardown()
        data = result.to_dict()
        assert data["status"] == "no-op"
        assert data["resource_group"] == "ca1-rg"
        assert "finished_at" in data
