"""
Pytest configuration and a fake hosted backend.

FakeSupabase answers the REST, auth and function endpoints from in-memory
tables through httpx.MockTransport, so the real store and auth clients run
end to end without a network.
"""

import json
import time
import uuid
from typing import Dict, List, Optional, Set
from urllib.parse import unquote

import httpx
import pytest
import pytest_asyncio
from jose import jwt

from saltware.config.settings import Settings
from saltware.models.domain.content import CollectionKind
from saltware.repositories.rest_store import PostgrestStore
from saltware.services.access_gate import AccessGate
from saltware.services.auth_client import AuthClient

SUPABASE_URL = "http://supabase.test"
ANON_KEY = "anon-key"
JWT_SECRET = "test-jwt-secret"


def make_settings(**overrides) -> Settings:
    values = dict(
        supabase_url=SUPABASE_URL,
        supabase_anon_key=ANON_KEY,
        supabase_jwt_secret=JWT_SECRET,
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


class FakeSupabase:
    """
    In-memory stand-in for the hosted store + auth + functions.

    Row-level policy: anyone may read; only admin sessions may write.
    Denied inserts answer 403, denied updates/deletes answer an empty list
    (the rows are invisible to the session), like the real backend.
    """

    def __init__(self):
        self.tables: Dict[str, List[dict]] = {kind.value: [] for kind in CollectionKind}
        self.users: Dict[str, dict] = {}          # email -> user
        self.admins: Set[str] = set()             # user ids
        self.tokens: Dict[str, str] = {}          # token -> user id
        self.requests: List[httpx.Request] = []
        self.offline = False
        self.fail: Dict[tuple, int] = {}          # (method, path) -> status
        self.sign_in_disabled = False
        self.html: Set[tuple] = set()             # (method, path) answered 200 text/html
        self.hide_inserts = False                 # store the row, answer an empty representation

    # -- setup helpers -----------------------------------------------------

    def add_user(self, email: str, password: str, admin: bool = False, name: Optional[str] = None) -> dict:
        user = {"id": str(uuid.uuid4()), "email": email, "password": password, "name": name}
        self.users[email] = user
        if admin:
            self.admins.add(user["id"])
        return user

    def issue_token(self, user: dict, ttl: int = 3600) -> str:
        token = jwt.encode(
            {
                "sub": user["id"],
                "email": user["email"],
                "aud": "authenticated",
                "exp": int(time.time()) + ttl,
                "jti": uuid.uuid4().hex,
            },
            JWT_SECRET,
            algorithm="HS256",
        )
        self.tokens[token] = user["id"]
        return token

    def seed(self, table: str, **row) -> dict:
        row = dict(row)
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", "2026-01-01T00:00:00Z")
        self.tables[table].append(row)
        return row

    def paths(self) -> List[str]:
        return [f"{r.method} {r.url.path}" for r in self.requests]

    # -- transport -----------------------------------------------------------

    def _session_user(self, request: httpx.Request) -> Optional[str]:
        header = request.headers.get("Authorization", "")
        token = header[len("Bearer "):] if header.startswith("Bearer ") else None
        return self.tokens.get(token) if token else None

    def _is_admin(self, request: httpx.Request) -> bool:
        user_id = self._session_user(request)
        return user_id is not None and user_id in self.admins

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.offline:
            raise httpx.ConnectError("connection refused", request=request)

        path = request.url.path
        injected = self.fail.get((request.method, path))
        if injected:
            return httpx.Response(injected, json={"message": f"injected failure {injected}"})
        if (request.method, path) in self.html:
            return httpx.Response(200, text="<html>proxy</html>", headers={"content-type": "text/html"})

        if path.startswith("/rest/v1/rpc/"):
            return self._rpc(request, path.rsplit("/", 1)[-1])
        if path.startswith("/rest/v1/"):
            return self._rest(request, path[len("/rest/v1/"):])
        if path == "/auth/v1/token":
            return self._token(request)
        if path == "/auth/v1/user":
            return self._user(request)
        if path == "/auth/v1/logout":
            return self._logout(request)
        if path == "/functions/v1/create-admin":
            return self._create_admin(request)
        return httpx.Response(404, json={"message": f"no route {path}"})

    def _rest(self, request: httpx.Request, table: str) -> httpx.Response:
        if table not in self.tables:
            return httpx.Response(404, json={"message": f'relation "public.{table}" does not exist'})
        rows = self.tables[table]

        if request.method == "GET":
            ordered = sorted(rows, key=lambda r: r["sort_order"])
            return httpx.Response(200, json=ordered)

        if request.method == "POST":
            if not self._is_admin(request):
                return httpx.Response(
                    403,
                    json={"code": "42501", "message": 'new row violates row-level security policy for table "%s"' % table},
                )
            row = json.loads(request.content)
            row["id"] = str(uuid.uuid4())
            row["created_at"] = "2026-01-01T00:00:00Z"
            rows.append(row)
            return httpx.Response(201, json=[] if self.hide_inserts else [row])

        id_filter = unquote(request.url.params.get("id", ""))
        target_id = id_filter[len("eq."):] if id_filter.startswith("eq.") else None
        matches = [r for r in rows if r["id"] == target_id]

        if not self._is_admin(request):
            return httpx.Response(200, json=[])

        if request.method == "PATCH":
            changes = json.loads(request.content)
            for row in matches:
                row.update(changes)
            return httpx.Response(200, json=matches)

        if request.method == "DELETE":
            for row in matches:
                rows.remove(row)
            return httpx.Response(200, json=matches)

        return httpx.Response(405, json={"message": "method not allowed"})

    def _rpc(self, request: httpx.Request, function: str) -> httpx.Response:
        if function != "has_role":
            return httpx.Response(404, json={"message": f"function {function} not found"})
        body = json.loads(request.content)
        caller = self._session_user(request)
        if caller is None:
            return httpx.Response(401, json={"message": "JWT expired"})
        return httpx.Response(200, json=body["_role"] == "admin" and body["_user_id"] in self.admins)

    def _token(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        user = self.users.get(body.get("email"))
        if self.sign_in_disabled or user is None or user["password"] != body.get("password"):
            return httpx.Response(
                400,
                json={"error": "invalid_grant", "error_description": "Invalid login credentials"},
            )
        token = self.issue_token(user)
        return httpx.Response(200, json={
            "access_token": token,
            "token_type": "bearer",
            "expires_in": 3600,
            "refresh_token": uuid.uuid4().hex,
            "user": {"id": user["id"], "email": user["email"], "user_metadata": {"name": user["name"]}},
        })

    def _user(self, request: httpx.Request) -> httpx.Response:
        user_id = self._session_user(request)
        if user_id is None:
            return httpx.Response(401, json={"msg": "invalid JWT"})
        user = next(u for u in self.users.values() if u["id"] == user_id)
        return httpx.Response(200, json={"id": user["id"], "email": user["email"], "user_metadata": {"name": user["name"]}})

    def _logout(self, request: httpx.Request) -> httpx.Response:
        header = request.headers.get("Authorization", "")
        self.tokens.pop(header[len("Bearer "):], None)
        return httpx.Response(204)

    def _create_admin(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        if self.admins:
            return httpx.Response(200, json={"error": "An admin account already exists"})
        if len(body.get("password", "")) < 6:
            return httpx.Response(200, json={"error": "Password must be at least 6 characters"})
        if body.get("email") in self.users:
            return httpx.Response(400, json={"error": "User already registered"})
        self.add_user(body["email"], body["password"], admin=True, name=body.get("name"))
        return httpx.Response(200, json={"success": True})


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def supabase():
    return FakeSupabase()


@pytest_asyncio.fixture
async def http_client(supabase):
    client = httpx.AsyncClient(transport=httpx.MockTransport(supabase.handler))
    yield client
    await client.aclose()


@pytest.fixture
def store(settings, http_client):
    """Anonymous REST store"""
    return PostgrestStore.from_settings(settings, client=http_client)


@pytest.fixture
def admin_user(supabase):
    return supabase.add_user("admin@saltware.lk", "secret123", admin=True, name="Admin")


@pytest.fixture
def admin_token(supabase, admin_user):
    return supabase.issue_token(admin_user)


@pytest.fixture
def admin_store(store, admin_token):
    """REST store acting as a signed-in admin"""
    return store.scoped(admin_token)


@pytest.fixture
def auth_client(settings, http_client):
    return AuthClient(settings, client=http_client)


@pytest.fixture
def gate(auth_client):
    return AccessGate(auth_client)
