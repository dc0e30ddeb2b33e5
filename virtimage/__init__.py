"""Disk-image provisioning on top of libvirt storage pools."""
