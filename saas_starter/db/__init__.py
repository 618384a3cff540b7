"""Cloudflare D1 access, schema bootstrap and seeding."""
