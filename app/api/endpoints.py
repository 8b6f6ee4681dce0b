from fastapi import APIRouter

from app.api.routes import journaling, users


router = APIRouter()

router.include_router(journaling.router)
router.include_router(users.router)
