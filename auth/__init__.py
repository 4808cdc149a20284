"""
auth — Credential lifecycle.

Provides:
  • bcrypt password hashing (``auth.password``)
  • HS256 JWT issuance & verification (``auth.tokens``)
  • Register / Login / Validate orchestration (``auth.service``)
  • Register / Login / Validate-token API routes (``auth.routes``)
"""
