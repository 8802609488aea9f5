"""
Preflight checks, run before anything touches Azure.

Both failures are operator configuration errors: they carry a remediation
hint and are never retried.
"""

from __future__ import annotations

import importlib
import logging
from typing import Any, Callable, Optional, Sequence

from ca1_deploy.core.exceptions import NotAuthenticatedError, SDKNotInstalledError

logger = logging.getLogger("ca1-deploy.preflight")

REQUIRED_MODULES = (
    "azure.identity",
    "azure.mgmt.resource",
    "azure.mgmt.network",
    "azure.mgmt.compute",
)
ARM_SCOPE = "https://management.azure.com/.default"


class Preflight:
    """Verifies the Azure SDK is importable and a signed-in session exists."""

    def __init__(
        self,
        credential_factory: Callable[[], Any],
        required_modules: Sequence[str] = REQUIRED_MODULES,
    ) -> None:
        self.credential_factory = credential_factory
        self.required_modules = tuple(required_modules)
        self.credential: Optional[Any] = None

    def check_sdk(self) -> None:
        missing = []
        for name in self.required_modules:
            try:
                importlib.import_module(name)
            except ImportError:
                missing.append(name)
        if missing:
            raise SDKNotInstalledError(f"Azure SDK modules not installed: {', '.join(missing)}")
        logger.debug("Azure SDK modules available")

    def check_session(self) -> Any:
        """Request an ARM token; returns the working credential."""
        from azure.core.exceptions import ClientAuthenticationError

        credential = self.credential_factory()
        try:
            credential.get_token(ARM_SCOPE)
        except ClientAuthenticationError as e:
            raise NotAuthenticatedError(f"No authenticated Azure session: {e.message}") from e
        logger.debug("Azure session is authenticated")
        return credential

    def run(self) -> Any:
        """Run all checks in order and return the authenticated credential."""
        self.check_sdk()
        self.credential = self.check_session()
        return self.credential
