"""
Azure provider — ProvisioningClient built on the Azure management SDKs.

- AzureResourceGroupManager: resource group lookup, create, forced delete
- AzureNetworkManager: VNet, subnet, NSG, public IP, NIC
- AzureVMManager: Linux VM with cloud-init custom data
- AzureProvisioningClient: facade the Reconciler talks to
"""
