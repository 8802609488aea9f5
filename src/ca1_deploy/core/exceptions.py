"""
Error taxonomy for ca1-deploy.

Environment errors (missing SDK, no session, missing bootstrap file) are
raised as DeployError subclasses carrying a remediation hint. Provider errors
are the Azure SDK's own exceptions and are never wrapped.
"""

from __future__ import annotations


class DeployError(Exception):
    """Base class for operator-facing, non-retryable errors."""

    default_hint = ""

    def __init__(self, message: str, hint: str = "") -> None:
        super().__init__(message)
        self.hint = hint or self.default_hint


class PreflightError(DeployError):
    """A precondition for talking to Azure is not met."""


class SDKNotInstalledError(PreflightError):
    default_hint = (
        "Install the Azure SDK with: pip install azure-identity azure-mgmt-resource "
        "azure-mgmt-network azure-mgmt-compute"
    )


class NotAuthenticatedError(PreflightError):
    default_hint = "Sign in first with: az login"


class BootstrapFileMissingError(DeployError):
    default_hint = "Create vm_init.yml (cloud-init config) in the current directory."


class CredentialError(DeployError):
    """The admin password could not be obtained."""
