from fastapi import APIRouter

from app.modules.chapter_heads.admin_router import router as admin_chapter_heads_router
from app.modules.chapter_heads.router import profile_router as chapter_head_profile_router
from app.modules.chapter_heads.router import router as chapter_head_router
from app.modules.chapters.admin_router import router as admin_chapters_router
from app.modules.registrations.admin_router import router as admin_maintenance_router
from app.modules.students import router as student_router

api_router = APIRouter()

# Student routes live at the root: /register-student, /get-chapters, /student/...
api_router.include_router(student_router, tags=["Student"])

api_router.include_router(chapter_head_router, prefix="/chapterhead", tags=["Chapter Head"])
api_router.include_router(chapter_head_profile_router, tags=["Chapter Head"])

api_router.include_router(
    admin_chapters_router,
    prefix="/admin/chapters",
    tags=["Admin - Chapters"],
)

api_router.include_router(
    admin_chapter_heads_router,
    prefix="/admin/chapter-heads",
    tags=["Admin - Chapter Heads"],
)

api_router.include_router(
    admin_maintenance_router,
    prefix="/admin/maintenance",
    tags=["Admin - Maintenance"],
)
