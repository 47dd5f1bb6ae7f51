"""Post routes.

Reads are public and accept an optional token; writes require an
authenticated principal and only touch posts the principal owns.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status

from .. import models
from ..auth import CurrentPrincipal, MaybePrincipal
from ..schemas import CreatePostRequest, DeletePostRequest, GetPostRequest, UpdatePostRequest
from ..services import PostService
from ..validation import validate_request
from .dependencies import get_post_service

router = APIRouter(prefix="/api/posts", tags=["posts"])
logger = logging.getLogger(__name__)


def _post_out(post: models.Post, author_username: str) -> dict:
    return {
        'id': post.id,
        'title': post.title,
        'content': post.content,
        'created_at': post.created_at,
        'updated_at': post.updated_at,
        'author_username': author_username,
    }


@router.get('')
def list_posts(principal: MaybePrincipal, posts: Annotated[PostService, Depends(get_post_service)]):
    """List all posts, newest first, with the author's username."""
    rows = posts.list_posts()
    logger.debug("posts.list count=%d viewer=%s", len(rows), principal.id if principal else None)
    return {'success': True, 'data': [_post_out(post, author) for post, author in rows]}


@router.get('/{id}')
def get_post(
    payload: Annotated[GetPostRequest, Depends(validate_request(GetPostRequest))],
    principal: MaybePrincipal,
    posts: Annotated[PostService, Depends(get_post_service)],
):
    post, author = posts.get_post(payload.params.id)
    return {'success': True, 'data': _post_out(post, author)}


@router.post('', status_code=status.HTTP_201_CREATED)
def create_post(
    payload: Annotated[CreatePostRequest, Depends(validate_request(CreatePostRequest))],
    principal: CurrentPrincipal,
    posts: Annotated[PostService, Depends(get_post_service)],
):
    """Create a post owned by the authenticated user."""
    post = posts.create_post(principal.id, payload.body.title, payload.body.content)
    return {
        'success': True,
        'message': 'Post created successfully',
        'data': {
            'id': post.id,
            'title': post.title,
            'content': post.content,
            'created_at': post.created_at,
        },
    }


@router.put('/{id}')
def update_post(
    payload: Annotated[UpdatePostRequest, Depends(validate_request(UpdatePostRequest))],
    principal: CurrentPrincipal,
    posts: Annotated[PostService, Depends(get_post_service)],
):
    """Replace title and content; 404 when missing or owned by someone else."""
    post = posts.update_post(payload.params.id, principal.id, payload.body.title, payload.body.content)
    return {
        'success': True,
        'message': 'Post updated successfully',
        'data': {
            'id': post.id,
            'title': post.title,
            'content': post.content,
            'updated_at': post.updated_at,
        },
    }


@router.delete('/{id}')
def delete_post(
    payload: Annotated[DeletePostRequest, Depends(validate_request(DeletePostRequest))],
    principal: CurrentPrincipal,
    posts: Annotated[PostService, Depends(get_post_service)],
):
    posts.delete_post(payload.params.id, principal.id)
    return {'success': True, 'message': 'Post deleted successfully'}
