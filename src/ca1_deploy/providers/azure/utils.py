"""Helpers shared by the Azure managers."""

from __future__ import annotations

from typing import Any, Callable, Optional

from azure.core.exceptions import ResourceNotFoundError

from ca1_deploy.core.base_client import ProvisionedResource
from ca1_deploy.core.desired_state import ResourceKind


def get_or_none(getter: Callable[..., Any], *args: Any) -> Optional[Any]:
    """Call an SDK ``get`` and map "not found" to None."""
    try:
        return getter(*args)
    except ResourceNotFoundError:
        return None


def to_resource(kind: ResourceKind, model: Any, **properties: Any) -> ProvisionedResource:
    """Wrap an SDK model in a ProvisionedResource."""
    return ProvisionedResource(
        kind=kind,
        name=model.name,
        resource_id=model.id,
        properties=properties,
    )
