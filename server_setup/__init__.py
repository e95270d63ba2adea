"""Provisioning tool that hardens a fresh server and creates an admin user."""
