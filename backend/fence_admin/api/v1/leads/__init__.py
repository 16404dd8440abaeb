"""Leads API package.

This package contains the lead pipeline endpoints organized by domain:
- lead_routes: Lead CRUD operations (create, list, get, stage, delete)
- quote_routes: Quote creation and status changes
- job_routes: Lead to job conversion with invoice
"""

from fastapi import APIRouter

from fence_admin.api.v1.leads.job_routes import router as job_router
from fence_admin.api.v1.leads.lead_routes import router as lead_router
from fence_admin.api.v1.leads.quote_routes import router as quote_router

# Create a combined router for all lead-related endpoints
router = APIRouter()

router.include_router(lead_router)
router.include_router(quote_router)
router.include_router(job_router)

__all__ = ["router"]
