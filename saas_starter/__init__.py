"""Provisioning, schema bootstrap and seeding tools for the SaaS starter."""

__version__ = "1.0.0"
