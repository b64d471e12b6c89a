from fastapi import APIRouter
from pulsehustle.api import auth, contact, gigs, payments, profile, stats

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(gigs.router, prefix="/gigs", tags=["gigs"])
api_router.include_router(payments.router, tags=["payments"])
api_router.include_router(profile.router, prefix="/profile", tags=["profile"])
api_router.include_router(stats.router, prefix="/stats", tags=["stats"])
api_router.include_router(contact.router, tags=["contact"])
api_router.include_router(contact.admin_router, prefix="/admin", tags=["admin"])
