"""
API v1 routes.
"""

from fastapi import APIRouter

from cryptotutor.api.v1 import lessons, progress, quiz, ai, sessions

router = APIRouter()

# lessons carries /lessons, /subtopics and /resources
router.include_router(lessons.router, tags=["Lessons"])
router.include_router(progress.router, tags=["Progress"])
router.include_router(quiz.router, prefix="/quiz", tags=["Quiz"])
router.include_router(ai.router, prefix="/ai", tags=["AI Tutor"])
router.include_router(sessions.router, prefix="/sessions", tags=["Lesson Sessions"])
