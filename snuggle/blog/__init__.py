"""
Blog data services for Snuggle.

Blogs, posts, comments, skins, subscriptions and authentication, all stored
in and served by Supabase.
"""

from .client import DataUnavailableError, create_supabase_client, get_blog_owner_id
from .auth import AuthService
from .blogs import BlogService
from .posts import PostService, PostAccessError, PrivatePostError
from .comments import CommentService, CommentAccessError
from .skins import SkinService
from .subscriptions import SubscriptionService

__all__ = [
    "DataUnavailableError",
    "create_supabase_client",
    "get_blog_owner_id",
    "AuthService",
    "BlogService",
    "PostService",
    "PostAccessError",
    "PrivatePostError",
    "CommentService",
    "CommentAccessError",
    "SkinService",
    "SubscriptionService",
]
