"""Repositories package — SQLAlchemy adapters behind the workflow's persistence ports.

Files:
  base.py         — Generic BaseRepository (own session per call, pagination)
  application.py  — ApplicationSnapshot lookups
  document.py     — Document metadata with duplicate-category translation
"""
