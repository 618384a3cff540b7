"""Interactive provisioning wizard for the Stripe and Cloudflare stack."""
