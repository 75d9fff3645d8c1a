import copy
from types import SimpleNamespace
from unittest import mock

import pytest
from fastapi.testclient import TestClient

from snuggle import database
from snuggle.api import app, limiter
from snuggle.dependencies import get_supabase

# Disable rate limiting for all tests
limiter.enabled = False


class FakeResponse:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


class FakeQuery:
    """Minimal in-memory stand-in for a postgrest query builder."""

    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.action = "select"
        self.columns = "*"
        self.count_mode = None
        self.payload = None
        self.on_conflict = None
        self.filters = []
        self.order_by = None
        self.limit_to = None

    def select(self, columns="*", count=None):
        self.columns = columns
        self.count_mode = count
        return self

    def insert(self, row):
        self.action, self.payload = "insert", row
        return self

    def upsert(self, row, on_conflict=None):
        self.action, self.payload, self.on_conflict = "upsert", row, on_conflict
        return self

    def update(self, changes):
        self.action, self.payload = "update", changes
        return self

    def delete(self):
        self.action = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def lt(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and row[column] < value)
        return self

    def gt(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and row[column] > value)
        return self

    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self

    def limit(self, count):
        self.limit_to = count
        return self

    def _matches(self, row):
        return all(f(row) for f in self.filters)

    def _project(self, row):
        if self.columns.strip() == "*":
            return dict(row)
        names = [name.strip() for name in self.columns.split(",")]
        return {name: row.get(name) for name in names}

    def execute(self):
        if self.table in self.db.failing_tables or self.action in self.db.failing_actions:
            raise Exception(f"relation {self.table} is unavailable")

        rows = self.db.tables.setdefault(self.table, [])

        if self.action == "insert":
            # Postgres column defaults
            self.db.inserted += 1
            row = dict(self.payload)
            row.setdefault("id", f"{self.table}-{self.db.inserted}")
            row.setdefault("created_at", f"2026-12-01T00:00:{self.db.inserted:02d}+00:00")
            rows.append(row)
            return FakeResponse([dict(row)])

        if self.action == "upsert":
            for row in rows:
                if self.on_conflict and row.get(self.on_conflict) == self.payload.get(self.on_conflict):
                    row.update(self.payload)
                    return FakeResponse([dict(row)])
            rows.append(dict(self.payload))
            return FakeResponse([dict(self.payload)])

        matched = [row for row in rows if self._matches(row)]

        if self.action == "update":
            for row in matched:
                row.update(self.payload)
            return FakeResponse([dict(row) for row in matched])

        if self.action == "delete":
            self.db.tables[self.table] = [row for row in rows if not self._matches(row)]
            return FakeResponse([dict(row) for row in matched])

        if self.order_by:
            column, desc = self.order_by
            matched = sorted(matched, key=lambda row: row.get(column) or "", reverse=desc)
        count = len(matched) if self.count_mode == "exact" else None
        if self.limit_to is not None:
            matched = matched[: self.limit_to]
        return FakeResponse([self._project(row) for row in matched], count=count)


class FakeAuth:
    def __init__(self, tokens):
        self.tokens = tokens
        self.exchanged = []

    def get_user(self, token):
        if token not in self.tokens:
            raise Exception("invalid JWT")
        return SimpleNamespace(user=SimpleNamespace(id=self.tokens[token]))

    def exchange_code_for_session(self, params):
        self.exchanged.append(params)
        if params["auth_code"] == "expired-code":
            raise Exception("invalid flow state, no valid flow state found")
        return SimpleNamespace(session=SimpleNamespace(access_token="session-token"))


class FakeSupabase:
    def __init__(self, tables, tokens):
        self.tables = copy.deepcopy(tables)
        self.failing_tables = set()
        self.failing_actions = set()
        self.inserted = 0
        self.auth = FakeAuth(tokens)

    def table(self, name):
        return FakeQuery(self, name)


SEED_TABLES = {
    "blogs": [
        {"id": "blog-1", "user_id": "user-alice", "name": "Alice Log", "description": "daily notes", "thumbnail_url": None},
        {"id": "blog-2", "user_id": "user-bob", "name": "Bob Writes", "description": None, "thumbnail_url": "https://img/bob-blog.png"},
    ],
    "profiles": [
        {"id": "user-alice", "nickname": "alice", "profile_image_url": "https://img/alice.png"},
        {"id": "user-bob", "nickname": "bob", "profile_image_url": None},
    ],
    "posts": [
        {"id": "p1", "blog_id": "blog-1", "user_id": "user-alice", "title": "First", "content": "<p>1</p>", "thumbnail_url": None,
         "published": True, "is_private": False, "view_count": 3, "created_at": "2026-01-01T09:00:00+00:00"},
        {"id": "p2", "blog_id": "blog-1", "user_id": "user-alice", "title": "Second", "content": "<p>2</p>", "thumbnail_url": "https://img/p2.png",
         "published": True, "is_private": False, "view_count": 0, "created_at": "2026-01-02T09:00:00+00:00"},
        {"id": "p3", "blog_id": "blog-1", "user_id": "user-alice", "title": "Secret", "content": "<p>3</p>", "thumbnail_url": None,
         "published": True, "is_private": True, "view_count": 0, "created_at": "2026-01-03T09:00:00+00:00"},
        {"id": "p4", "blog_id": "blog-1", "user_id": "user-alice", "title": "Third", "content": "<p>4</p>", "thumbnail_url": None,
         "published": True, "is_private": False, "view_count": 0, "created_at": "2026-01-04T09:00:00+00:00"},
        {"id": "p5", "blog_id": "blog-2", "user_id": "user-bob", "title": "Bob post", "content": "<p>5</p>", "thumbnail_url": None,
         "published": True, "is_private": False, "view_count": 10, "created_at": "2026-01-05T09:00:00+00:00"},
        {"id": "p6", "blog_id": "blog-2", "user_id": "user-bob", "title": "Draft", "content": "<p>6</p>", "thumbnail_url": None,
         "published": False, "is_private": False, "view_count": 0, "created_at": "2026-01-06T09:00:00+00:00"},
    ],
    "categories": [
        {"id": "c1", "name": "Python"},
        {"id": "c2", "name": "Diary"},
    ],
    "post_categories": [
        {"post_id": "p2", "category_id": "c1"},
        {"post_id": "p2", "category_id": "c2"},
    ],
    "likes": [
        {"post_id": "p2", "user_id": "user-bob"},
        {"post_id": "p2", "user_id": "user-carol"},
    ],
    "skins": [
        {"id": "skin-1", "name": "Lavender", "is_system": True, "created_at": "2025-12-01T00:00:00+00:00",
         "css_variables": {"--blog-bg": "#f5f3ff", "--blog-accent": "#7c3aed", "--blog-muted": ""},
         "layout_config": {"layout": "sidebar-left"}},
        {"id": "skin-2", "name": "Midnight", "is_system": True, "created_at": "2025-12-02T00:00:00+00:00",
         "css_variables": {"--blog-bg": "#0f172a", "--blog-fg": "#f1f5f9"}, "layout_config": None},
        {"id": "skin-3", "name": "Alice's own", "is_system": False, "created_at": "2025-12-03T00:00:00+00:00",
         "css_variables": {}, "layout_config": None},
    ],
    "blog_skin_applications": [
        {"blog_id": "blog-2", "skin_id": "skin-1",
         "custom_css_variables": {"--blog-accent": "#db2777"},
         "custom_layout_config": {"showThumbnails": False}},
    ],
    "blog_custom_skins": [],
    "comments": [
        {"id": "cm1", "post_id": "p2", "user_id": "user-bob", "parent_id": None, "content": "Nice post",
         "created_at": "2026-01-02T10:00:00+00:00"},
        {"id": "cm2", "post_id": "p2", "user_id": "user-alice", "parent_id": "cm1", "content": "Thanks!",
         "created_at": "2026-01-02T10:30:00+00:00"},
        {"id": "cm3", "post_id": "p2", "user_id": "user-carol", "parent_id": None, "content": "Me too",
         "created_at": "2026-01-02T11:00:00+00:00"},
        {"id": "cm4", "post_id": "p3", "user_id": "user-alice", "parent_id": None, "content": "note to self",
         "created_at": "2026-01-03T10:00:00+00:00"},
    ],
    "subscriptions": [
        {"subscriber_id": "user-bob", "target_id": "user-alice"},
        {"subscriber_id": "user-carol", "target_id": "user-alice"},
        {"subscriber_id": "user-alice", "target_id": "user-bob"},
    ],
}

TOKENS = {"token-alice": "user-alice", "token-bob": "user-bob"}


@pytest.fixture(scope="module")
def client():
    return TestClient(app)


@pytest.fixture
def fake_supabase():
    return FakeSupabase(SEED_TABLES, TOKENS)


@pytest.fixture
def api_client(fake_supabase):
    app.dependency_overrides[get_supabase] = lambda: fake_supabase
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def alice_headers():
    return {"Authorization": "Bearer token-alice"}


@pytest.fixture
def bob_headers():
    return {"Authorization": "Bearer token-bob"}


@pytest.fixture(autouse=True)
def temp_db(tmp_path):
    db_path = tmp_path / "test_themes.db"
    # Patch the DB_NAME in the database module
    with mock.patch("snuggle.database.DB_NAME", str(db_path)):
        database.init_db()
        yield str(db_path)
