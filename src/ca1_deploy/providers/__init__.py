"""Cloud provider implementations of the provisioning client."""
