"""
API v1 routes.
"""

from fastapi import APIRouter

from blogapi.api.v1 import auth, comments, likes, posts, reports, users

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
# Comments and likes before posts so /posts/{id}/comments and /posts/{id}/likes
# are matched ahead of the post routes
router.include_router(comments.router, tags=["Comments"])
router.include_router(likes.router, prefix="/posts", tags=["Likes"])
router.include_router(posts.router, prefix="/posts", tags=["Posts"])
router.include_router(users.router, prefix="/users", tags=["Users"])
router.include_router(reports.router, prefix="/reports", tags=["Reports"])
