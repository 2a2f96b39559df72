from fastapi import APIRouter, Depends, status

from social_app.schemas.post import CommentCreate, PostCreate
from social_app.services.post_service import PostService
from social_app.utils.dependencies import get_current_user, get_post_service


router = APIRouter(prefix="/posts", tags=["community"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_post(body: PostCreate, current_user: dict = Depends(get_current_user), service: PostService = Depends(get_post_service)):
    return {"post": await service.create_post(current_user["_id"], body.caption, body.image_url)}


@router.get("/{post_id}")
async def get_post(post_id: str, current_user: dict = Depends(get_current_user), service: PostService = Depends(get_post_service)):
    return {"post": await service.get_post(post_id)}


@router.delete("/{post_id}")
async def delete_post(post_id: str, current_user: dict = Depends(get_current_user), service: PostService = Depends(get_post_service)):
    await service.delete_post(post_id, current_user["_id"])
    return {"msg": "Post deleted successfully"}


@router.post("/{post_id}/like")
async def like_post(post_id: str, current_user: dict = Depends(get_current_user), service: PostService = Depends(get_post_service)):
    liked = await service.toggle_like(post_id, current_user)
    return {"liked": liked}


@router.post("/{post_id}/bookmark")
async def bookmark_post(post_id: str, current_user: dict = Depends(get_current_user), service: PostService = Depends(get_post_service)):
    bookmarked = await service.toggle_bookmark(post_id, current_user["_id"])
    return {"bookmarked": bookmarked}


@router.get("/{post_id}/comments")
async def list_comments(post_id: str, current_user: dict = Depends(get_current_user), service: PostService = Depends(get_post_service)):
    return {"items": await service.list_comments(post_id)}


@router.post("/{post_id}/comments", status_code=status.HTTP_201_CREATED)
async def add_comment(post_id: str, body: CommentCreate, current_user: dict = Depends(get_current_user), service: PostService = Depends(get_post_service)):
    return {"comment": await service.add_comment(post_id, current_user, body.content)}


@router.post("/{post_id}/comments/{comment_id}/like")
async def like_comment(post_id: str, comment_id: str, current_user: dict = Depends(get_current_user), service: PostService = Depends(get_post_service)):
    liked = await service.toggle_comment_like(post_id, comment_id, current_user)
    return {"liked": liked}
