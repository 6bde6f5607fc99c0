"""
Applications Module

Handles the recruitment application workflow for two tracks
(`baby` applicants and `staff` applicants):
1. Submission: rate limit, challenge, validation, encrypted storage
2. Best-effort email notification to the organizers
3. Admin review: list, fetch, delete, CSV export

API Endpoints:
- POST /applications - Submit new application (public)
- GET /applications - List applications (admin)
- GET /applications/export - CSV export (admin)
- GET /applications/{id} - Get application (admin)
- DELETE /applications/{id} - Delete application (admin)
- PUT /applications/{id} - Always 403, applications are read-only

Background Jobs (via APScheduler):
- rate_limit_sweep: Every 5 minutes, evicts closed rate limit windows
"""

from .admin_router import router as admin_router
from .jobs import register_application_jobs
from .router import router

__all__ = ["router", "admin_router", "register_application_jobs"]
