"""v1 router package — all /api/v1/* endpoints live here.

Files:
  documents.py  — Document upload / download / delete / requirements

Rule: Routers only handle HTTP (request parsing, response shaping).
      All business logic delegates to hostcert/services/.
"""
