from fastapi import APIRouter

from .features.list_events.router import router as list_events_router
from .features.manage_events.router import router as manage_events_router
from .features.notify_members.router import router as notify_members_router
from .features.roster.router import router as roster_router

router = APIRouter()

router.include_router(roster_router)
router.include_router(list_events_router)
router.include_router(manage_events_router)
router.include_router(notify_members_router)
