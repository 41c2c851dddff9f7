"""vmidctl — change the VMID of a Proxmox VE guest."""

__version__ = "0.1.0"
