"""Services package — all business logic lives here, never in routers.

Files:
  documents.py    — DocumentWorkflowService (upload, batch, list, download, delete, completeness)
  policy.py       — Per-category validation policy table
  permissions.py  — Permission evaluator (role x ownership x application status)
  ports.py        — Abstract collaborators (storage, repositories, audit sink)
  audit.py        — SQL audit sink

Rule: routers call services, services call repositories, repositories call the DB.
      No SQLAlchemy queries in routers. No FastAPI imports in services.
"""
