"""
ca1-deploy — provision and tear down the CA1 course environment on Azure.

Creates one resource group holding a network, a security group, a public IP,
a NIC and a cloud-init bootstrapped Linux VM, creating only what is missing.
"""

from ca1_deploy.__version__ import __version__

__all__ = ["__version__"]
