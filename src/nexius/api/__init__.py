"""API module for Nexius.

API layer:
- Validates inputs, reads/writes DB through repo
- Returns JSON payloads for the dashboard and public site
- Forbidden: SQL, payment-code generation, ingestion rules
"""
