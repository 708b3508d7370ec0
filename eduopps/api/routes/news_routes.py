"""
News Feed Routes

POST /news - Publish a post (manage news)
GET /news - Posts for my school plus global posts
GET /news/{post_id} - Post details
PUT /news/{post_id} - Update post
DELETE /news/{post_id} - Delete post
POST /news/{post_id}/like - Like a post
"""

from fastapi import APIRouter, HTTPException, Depends
from typing import List

from eduopps.core.auth import get_current_user
from eduopps.core.permissions import can_manage_news_post, can_view_news_post, is_superadmin, require_permission
from eduopps.services import news_service
from eduopps.schemas.schemas import NewsPostCreate, NewsPostUpdate, NewsPostResponse, MessageResponse

router = APIRouter(prefix="/news", tags=["News"])


def _visible_post_or_404(post_id: int, user: dict) -> dict:
    post = news_service.get_post_by_id(post_id)
    if not post:
        raise HTTPException(status_code=404, detail="News post not found")
    if not can_view_news_post(user, post):
        raise HTTPException(status_code=403, detail="You do not have access to this post")
    return post


@router.post("", response_model=NewsPostResponse, status_code=201)
async def create_post(request: NewsPostCreate, user: dict = Depends(require_permission("can_manage_news"))):
    if request.is_global and not is_superadmin(user):
        raise HTTPException(status_code=403, detail="Only a superadmin can publish global news")
    return news_service.create_post(request.model_dump(), user)


@router.get("", response_model=List[NewsPostResponse])
async def list_posts(user: dict = Depends(get_current_user)):
    return news_service.get_posts_for_user(user)


@router.get("/{post_id}", response_model=NewsPostResponse)
async def get_post(post_id: int, user: dict = Depends(get_current_user)):
    return _visible_post_or_404(post_id, user)


@router.put("/{post_id}", response_model=NewsPostResponse)
async def update_post(post_id: int, request: NewsPostUpdate, user: dict = Depends(get_current_user)):
    post = _visible_post_or_404(post_id, user)
    if not can_manage_news_post(user, post):
        raise HTTPException(status_code=403, detail="You do not have permission to edit this post")

    updates = request.model_dump(exclude_unset=True)
    if updates.get("is_global") and not is_superadmin(user):
        raise HTTPException(status_code=403, detail="Only a superadmin can publish global news")
    return news_service.update_post(post_id, updates)


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post(post_id: int, user: dict = Depends(get_current_user)):
    post = _visible_post_or_404(post_id, user)
    if not can_manage_news_post(user, post):
        raise HTTPException(status_code=403, detail="You do not have permission to delete this post")
    news_service.delete_post(post_id)
    return MessageResponse(message="News post deleted successfully")


@router.post("/{post_id}/like", response_model=NewsPostResponse)
async def like_post(post_id: int, user: dict = Depends(get_current_user)):
    _visible_post_or_404(post_id, user)
    return news_service.like_post(post_id)
