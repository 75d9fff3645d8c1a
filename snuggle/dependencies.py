from functools import lru_cache
from typing import Annotated, Optional, Union

from fastapi import Depends, Header, HTTPException
from supabase import Client

import snuggle.config as config
from snuggle.blog import (
    AuthService,
    BlogService,
    CommentService,
    PostService,
    SkinService,
    SubscriptionService,
    create_supabase_client,
)


@lru_cache
def get_settings():
    return config.Settings()


@lru_cache
def get_supabase_client() -> Optional[Client]:
    settings = get_settings()
    return create_supabase_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)


def get_supabase() -> Client:
    client = get_supabase_client()
    if client is None:
        raise HTTPException(
            status_code=503,
            detail="Supabase client is not initialized. Ensure SUPABASE_URL and SUPABASE_KEY are set.",
        )
    return client


def get_auth_service(client: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(client, get_settings().SITE_URL)


def get_blog_service(client: Client = Depends(get_supabase)) -> BlogService:
    return BlogService(client)


def get_post_service(client: Client = Depends(get_supabase)) -> PostService:
    return PostService(client)


def get_comment_service(client: Client = Depends(get_supabase)) -> CommentService:
    return CommentService(client)


def get_skin_service(client: Client = Depends(get_supabase)) -> SkinService:
    return SkinService(client)


def get_subscription_service(client: Client = Depends(get_supabase)) -> SubscriptionService:
    return SubscriptionService(client)


def get_bearer_token(
    authorization: Annotated[Union[str, None], Header()] = None,
) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_user_id(
    token: Optional[str] = Depends(get_bearer_token),
    auth_service: AuthService = Depends(get_auth_service),
) -> str:
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    user_id = auth_service.get_user_id(token)
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid access token")
    return user_id


def get_optional_user_id(
    token: Optional[str] = Depends(get_bearer_token),
    auth_service: AuthService = Depends(get_auth_service),
) -> Optional[str]:
    if not token:
        return None
    return auth_service.get_user_id(token)
