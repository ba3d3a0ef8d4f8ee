"""
app/api/routers package marker.
"""

from app.api.routers.policies import router as policies_router
from app.api.routers.scheduled_posts import router as scheduled_posts_router
from app.api.routers.upload import router as upload_router

__all__ = [
    "policies_router",
    "scheduled_posts_router",
    "upload_router",
]
