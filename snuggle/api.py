import logging
import ollama

from typing import Any, Dict, List, Optional
from fastapi import Depends, FastAPI, HTTPException, Request, Query
from fastapi.responses import JSONResponse, StreamingResponse, RedirectResponse
from pydantic import BaseModel, Field
from supabase import Client

from snuggle.database import init_db, save_theme, get_recent_themes, delete_themes
from snuggle.dependencies import (
    get_settings,
    get_supabase,
    get_auth_service,
    get_blog_service,
    get_comment_service,
    get_post_service,
    get_skin_service,
    get_subscription_service,
    get_current_user_id,
    get_optional_user_id,
)
from snuggle.blog import (
    AuthService,
    BlogService,
    CommentAccessError,
    CommentService,
    DataUnavailableError,
    PostService,
    PostAccessError,
    PrivatePostError,
    SkinService,
    SubscriptionService,
    get_blog_owner_id,
)
from snuggle.constants import TEMPLATE_SECTIONS
from snuggle.generators import theme_event_stream
from snuggle.themes import ThemeGenerator, ThemeGenerationError

from fastapi.middleware.cors import CORSMiddleware

from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

settings = get_settings()
logging.basicConfig(level=settings.LOG_LEVEL)

# Initialize DB
init_db()

# Initialize Limiter
limiter = Limiter(key_func=get_remote_address)

def rate_limit() -> str:
    # Evaluated on every request
    return settings.RATE_LIMIT

def create_ollama_client(url: str):
    try:
        return ollama.AsyncClient(host=url)
    except Exception as e:
        logging.error(f"Failed to create Ollama client: {e}")
        return None

async def init_ollama_client(url: str):
    client = create_ollama_client(url)
    if client is None:
        return None
    try:
        await client.list()
        return client
    except Exception as e:
        logging.error(f"Failed to initialize Ollama client: {e}")
        return None

app = FastAPI(
    title="Snuggle API",
    description="Blog backend for Snuggle with Ollama-powered skin generation.",
    version="1.0.0",
)

# Register Limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(DataUnavailableError)
async def data_unavailable_handler(request: Request, exc: DataUnavailableError):
    return JSONResponse(status_code=503, content={"detail": str(exc)})

origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
if settings.SITE_URL and settings.SITE_URL not in origins:
    origins.append(settings.SITE_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class ThemeRequest(BaseModel):
    request: str = Field(..., description="Natural-language style description, e.g. '보라색 귀여운 느낌'.")

class ChatMessage(BaseModel):
    role: str = Field(..., description="'user' or 'assistant'.")
    content: str = Field("", description="Message text.")

class ChatStreamRequest(BaseModel):
    messages: List[ChatMessage]
    currentCode: Optional[str] = Field(
        None, description="JSON-encoded template sections currently in the editor."
    )

class PostUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    thumbnail_url: Optional[str] = None
    is_private: Optional[bool] = None
    published: Optional[bool] = None

class ApplySkinRequest(BaseModel):
    skin_id: str = Field(..., description="ID of the system skin to apply.")

class CustomSkinPayload(BaseModel):
    sections: Dict[str, str]

class CommentCreate(BaseModel):
    content: str = Field(..., description="Comment text.")
    parent_id: Optional[str] = Field(None, description="Comment being replied to.")


def build_theme_generator(client) -> ThemeGenerator:
    return ThemeGenerator(
        client,
        settings.OLLAMA_MODEL,
        temperature=settings.OLLAMA_TEMPERATURE,
        num_predict=settings.OLLAMA_NUM_PREDICT,
    )

async def get_theme_generator() -> ThemeGenerator:
    return build_theme_generator(await init_ollama_client(settings.OLLAMA_BASE_URL))

def get_health_generator() -> ThemeGenerator:
    # No list() probe here; check_health makes that call itself
    return build_theme_generator(create_ollama_client(settings.OLLAMA_BASE_URL))

def require_ollama(generator: ThemeGenerator):
    if generator.client is None:
        raise HTTPException(
            status_code=503,
            detail="Ollama client is not initialized. Ensure Ollama is running and accessible.",
        )

def require_blog_owner(client: Client, blog_id: str, user_id: str):
    owner_id = get_blog_owner_id(client, blog_id)
    if owner_id is None:
        raise HTTPException(status_code=404, detail="Blog not found")
    if owner_id != user_id:
        raise HTTPException(status_code=403, detail="Not the owner of this blog")


@app.get("/health", tags=["Health"])
async def health():
    return {"status": "ok"}


# ============ Ollama Theme Endpoints ============

@app.get("/api/ollama/health", tags=["Ollama"])
async def ollama_health(generator: ThemeGenerator = Depends(get_health_generator)):
    return await generator.check_health()


@app.post("/api/ollama/theme", tags=["Ollama"])
@limiter.limit(rate_limit)
async def generate_theme(
    request: Request,
    request_data: ThemeRequest,
    user_id: str = Depends(get_current_user_id),
    generator: ThemeGenerator = Depends(get_theme_generator),
):
    style_request = request_data.request.strip()
    if not style_request:
        raise HTTPException(status_code=400, detail="Empty style request")

    require_ollama(generator)

    try:
        theme = await generator.generate_theme(style_request)
    except ThemeGenerationError as e:
        raise HTTPException(status_code=502, detail=str(e))

    save_theme(user_id, style_request, theme["sections"]["custom_css"], generator.model)
    return theme


@app.post("/api/ollama/chat/stream", tags=["Ollama"])
@limiter.limit(rate_limit)
async def chat_stream(
    request: Request,
    request_data: ChatStreamRequest,
    user_id: str = Depends(get_current_user_id),
    generator: ThemeGenerator = Depends(get_theme_generator),
):
    require_ollama(generator)

    def on_theme(style_request: str, theme: Dict[str, Any]):
        save_theme(user_id, style_request, theme["sections"]["custom_css"], generator.model)

    return StreamingResponse(
        theme_event_stream(
            generator,
            [message.model_dump() for message in request_data.messages],
            request_data.currentCode,
            on_theme=on_theme,
        ),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )


@app.get("/api/ollama/themes", tags=["Ollama"])
async def list_themes(user_id: str = Depends(get_current_user_id)):
    return {"themes": get_recent_themes(user_id, settings.THEME_HISTORY_LIMIT)}


@app.delete("/api/ollama/themes", tags=["Ollama"])
async def clear_themes(user_id: str = Depends(get_current_user_id)):
    return {"deleted": delete_themes(user_id)}


# ============ Post Endpoints ============

@app.get("/api/posts", tags=["Posts"])
async def list_posts(
    limit: int = Query(default=20, ge=1, le=100),
    post_service: PostService = Depends(get_post_service),
):
    return {"posts": post_service.list_feed(limit)}


@app.get("/api/posts/{post_id}", tags=["Posts"])
async def get_post(
    post_id: str,
    viewer_id: Optional[str] = Depends(get_optional_user_id),
    post_service: PostService = Depends(get_post_service),
):
    try:
        post = post_service.get_post(post_id, viewer_id)
    except PrivatePostError as e:
        raise HTTPException(status_code=403, detail=str(e))

    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


@app.post("/api/posts/{post_id}/view", tags=["Posts"])
async def increment_view(
    post_id: str,
    post_service: PostService = Depends(get_post_service),
):
    view_count = post_service.increment_view_count(post_id)
    if view_count is None:
        raise HTTPException(status_code=404, detail="Post not found")
    return {"view_count": view_count}


@app.patch("/api/posts/{post_id}", tags=["Posts"])
async def update_post(
    post_id: str,
    changes: PostUpdate,
    user_id: str = Depends(get_current_user_id),
    post_service: PostService = Depends(get_post_service),
):
    try:
        post = post_service.update_post(post_id, user_id, changes.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PostAccessError as e:
        raise HTTPException(status_code=403, detail=str(e))

    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


@app.delete("/api/posts/{post_id}", tags=["Posts"])
async def delete_post(
    post_id: str,
    user_id: str = Depends(get_current_user_id),
    post_service: PostService = Depends(get_post_service),
):
    try:
        deleted = post_service.delete_post(post_id, user_id)
    except PostAccessError as e:
        raise HTTPException(status_code=403, detail=str(e))

    if deleted is None:
        raise HTTPException(status_code=404, detail="Post not found")
    return {"message": "Post deleted"}


@app.post("/api/posts/{post_id}/like", tags=["Posts"])
async def toggle_like(
    post_id: str,
    user_id: str = Depends(get_current_user_id),
    post_service: PostService = Depends(get_post_service),
):
    try:
        result = post_service.toggle_like(post_id, user_id)
    except PrivatePostError as e:
        raise HTTPException(status_code=403, detail=str(e))

    if result is None:
        raise HTTPException(status_code=404, detail="Post not found")
    return result


# ============ Comment Endpoints ============

@app.get("/api/posts/{post_id}/comments", tags=["Comments"])
async def list_comments(
    post_id: str,
    viewer_id: Optional[str] = Depends(get_optional_user_id),
    comment_service: CommentService = Depends(get_comment_service),
):
    try:
        comments = comment_service.list_comments(post_id, viewer_id)
    except PrivatePostError as e:
        raise HTTPException(status_code=403, detail=str(e))

    if comments is None:
        raise HTTPException(status_code=404, detail="Post not found")
    return {"comments": comments}


@app.post("/api/posts/{post_id}/comments", tags=["Comments"])
async def add_comment(
    post_id: str,
    payload: CommentCreate,
    user_id: str = Depends(get_current_user_id),
    comment_service: CommentService = Depends(get_comment_service),
):
    try:
        comment = comment_service.add_comment(post_id, user_id, payload.content, payload.parent_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PrivatePostError as e:
        raise HTTPException(status_code=403, detail=str(e))

    if comment is None:
        raise HTTPException(status_code=404, detail="Post not found")
    return comment


@app.delete("/api/comments/{comment_id}", tags=["Comments"])
async def delete_comment(
    comment_id: str,
    user_id: str = Depends(get_current_user_id),
    comment_service: CommentService = Depends(get_comment_service),
):
    try:
        deleted = comment_service.delete_comment(comment_id, user_id)
    except CommentAccessError as e:
        raise HTTPException(status_code=403, detail=str(e))

    if deleted is None:
        raise HTTPException(status_code=404, detail="Comment not found")
    return {"message": "Comment deleted"}


# ============ Blog Endpoints ============

@app.get("/api/blogs/mine", tags=["Blogs"])
async def list_my_blogs(
    user_id: str = Depends(get_current_user_id),
    blog_service: BlogService = Depends(get_blog_service),
):
    return {"blogs": blog_service.list_user_blogs(user_id)}


@app.get("/api/blogs/{blog_id}", tags=["Blogs"])
async def get_blog(
    blog_id: str,
    viewer_id: Optional[str] = Depends(get_optional_user_id),
    blog_service: BlogService = Depends(get_blog_service),
):
    blog = blog_service.get_blog(blog_id, viewer_id)
    if not blog:
        raise HTTPException(status_code=404, detail="Blog not found")
    return blog


# ============ Skin Endpoints ============

@app.get("/api/skins", tags=["Skins"])
async def list_skins(skin_service: SkinService = Depends(get_skin_service)):
    return {"skins": skin_service.list_system_skins()}


@app.get("/api/skins/sections", tags=["Skins"])
async def list_template_sections():
    return {"sections": TEMPLATE_SECTIONS}


@app.get("/api/blogs/{blog_id}/skin", tags=["Skins"])
async def get_blog_skin(blog_id: str, skin_service: SkinService = Depends(get_skin_service)):
    return skin_service.get_blog_skin(blog_id)


@app.post("/api/blogs/{blog_id}/skin", tags=["Skins"])
async def apply_skin(
    blog_id: str,
    payload: ApplySkinRequest,
    user_id: str = Depends(get_current_user_id),
    client: Client = Depends(get_supabase),
    skin_service: SkinService = Depends(get_skin_service),
):
    require_blog_owner(client, blog_id, user_id)

    application = skin_service.apply_skin(blog_id, payload.skin_id)
    if not application:
        raise HTTPException(status_code=404, detail="Skin not found")
    return application


@app.get("/api/blogs/{blog_id}/custom-skin", tags=["Skins"])
async def get_custom_skin(blog_id: str, skin_service: SkinService = Depends(get_skin_service)):
    custom = skin_service.get_custom_skin(blog_id)
    if not custom:
        raise HTTPException(status_code=404, detail="No custom skin")
    return custom


@app.put("/api/blogs/{blog_id}/custom-skin", tags=["Skins"])
async def save_custom_skin(
    blog_id: str,
    payload: CustomSkinPayload,
    user_id: str = Depends(get_current_user_id),
    client: Client = Depends(get_supabase),
    skin_service: SkinService = Depends(get_skin_service),
):
    require_blog_owner(client, blog_id, user_id)

    try:
        saved = skin_service.save_custom_skin(blog_id, payload.sections)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return saved


# ============ Subscription Endpoints ============

@app.get("/api/subscribe/counts", tags=["Subscriptions"])
async def subscription_counts(
    user_id: str = Query(..., alias="userId"),
    subscription_service: SubscriptionService = Depends(get_subscription_service),
):
    counts = subscription_service.get_counts(user_id)
    if counts is None:
        raise HTTPException(status_code=503, detail="Failed to load subscription counts")
    return counts


@app.get("/api/subscribe/following", tags=["Subscriptions"])
async def subscription_following(
    user_id: str = Query(..., alias="userId"),
    subscription_service: SubscriptionService = Depends(get_subscription_service),
):
    return subscription_service.get_following_ids(user_id)


@app.post("/api/subscribe/{target_id}", tags=["Subscriptions"])
async def subscribe(
    target_id: str,
    user_id: str = Depends(get_current_user_id),
    subscription_service: SubscriptionService = Depends(get_subscription_service),
):
    try:
        created = subscription_service.subscribe(user_id, target_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logging.error(f"Failed to subscribe {user_id} to {target_id}: {e}")
        raise HTTPException(status_code=503, detail="Failed to subscribe")
    return {"subscribed": True, "created": created}


@app.delete("/api/subscribe/{target_id}", tags=["Subscriptions"])
async def unsubscribe(
    target_id: str,
    user_id: str = Depends(get_current_user_id),
    subscription_service: SubscriptionService = Depends(get_subscription_service),
):
    try:
        removed = subscription_service.unsubscribe(user_id, target_id)
    except Exception as e:
        logging.error(f"Failed to unsubscribe {user_id} from {target_id}: {e}")
        raise HTTPException(status_code=503, detail="Failed to unsubscribe")
    return {"subscribed": False, "removed": removed}


# ============ Auth Endpoints ============

@app.get("/auth/callback", tags=["Auth"])
async def auth_callback(
    code: Optional[str] = Query(default=None),
    next: str = Query(default="/"),
    code_verifier: Optional[str] = Query(default=None),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Exchange the OAuth code for a session and send the browser back to the site."""
    return RedirectResponse(url=auth_service.exchange_code(code, next, code_verifier), status_code=302)
