from fastapi import APIRouter

from onboarding.api.v1.endpoints import forms

# Create API router
api_router = APIRouter()

# Include routers
api_router.include_router(forms.router, prefix="/forms", tags=["Forms"])

__all__ = ["api_router"]
