"""Pydantic schemas package.

Folder intent:
  document.py  — CamelModel base + document workflow response models (/api/v1/documents/*)
  health.py    — HealthResponse for /health
"""
