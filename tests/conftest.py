"""
Shared fixtures: an in-memory MeshyDB backend behind httpx.MockTransport.
"""

import json
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qs

import httpx
import jwt
import pytest

import meshydb.sdk.client as sdk_client
from meshydb import MeshyClient

ACCOUNT = "acme"
PUBLIC_KEY = "pk-test"
API_URL = "https://api.test/acme/default"
AUTH_URL = "https://auth.test/acme/default"


def _json(status: int, body: Any = None) -> httpx.Response:
    if body is None:
        return httpx.Response(status)
    return httpx.Response(status, json=body)


class FakeMeshyServer:
    """
    Minimal MeshyDB backend.

    Implements the token, user and mesh endpoints the client talks to,
    and records every request it receives.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.users: Dict[str, Dict[str, Any]] = {}
        self.passwords: Dict[str, str] = {}
        self.access_tokens: Dict[str, str] = {}
        self.refresh_tokens: Dict[str, str] = {}
        self.pending: Dict[str, Dict[str, Any]] = {}
        self.meshes: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.fail_with: Optional[int] = None
        self.expires_in: Optional[int] = 3600
        self.revocation_status = 200
        self.jwt_exp: Optional[datetime] = None

    # Test helpers

    def add_user(self, username: str, password: str, **fields: Any) -> Dict[str, Any]:
        user = {
            "id": str(uuid.uuid4()),
            "username": username,
            "firstName": None,
            "lastName": None,
            "verified": True,
            "isActive": True,
            "phoneNumber": None,
            "emailAddress": None,
            "roles": [],
            "securityQuestions": [],
            "anonymous": False,
        }
        user.update(fields)
        self.users[username] = user
        self.passwords[username] = password
        return user

    def expire_access_tokens(self) -> None:
        self.access_tokens.clear()

    def code_for(self, hash_value: str) -> str:
        return self.pending[hash_value]["code"]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with:
            return _json(self.fail_with, {"message": "Server exploded"})

        url = f"{request.url.scheme}://{request.url.host}{request.url.path}"
        if url.startswith(AUTH_URL):
            return self._auth(request, url[len(AUTH_URL):])
        if url.startswith(API_URL):
            return self._api(request, url[len(API_URL):].strip("/"))
        return _json(404, {"message": "Unknown host"})

    # Auth server

    def _auth(self, request: httpx.Request, path: str) -> httpx.Response:
        if path == "/connect/token":
            form = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
            if form.get("client_id") != PUBLIC_KEY:
                return _json(400, {"error": "invalid_client"})
            if form.get("grant_type") == "password":
                username = form.get("username")
                if self.passwords.get(username) != form.get("password"):
                    return _json(400, {"error": "invalid_grant", "error_description": "invalid_username_or_password"})
            elif form.get("grant_type") == "refresh_token":
                username = self.refresh_tokens.pop(form.get("refresh_token", ""), None)
                if username is None:
                    return _json(400, {"error": "invalid_grant"})
            else:
                return _json(400, {"error": "unsupported_grant_type"})
            return _json(200, self._issue(username))

        if path == "/connect/revocation":
            form = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
            if self.revocation_status >= 400:
                return _json(self.revocation_status, {"message": "Revocation unavailable"})
            self.refresh_tokens.pop(form.get("token", ""), None)
            return _json(200)

        if path == "/connect/userinfo":
            user = self._bearer_user(request)
            if user is None:
                return _json(401)
            return _json(200, {"sub": user["id"], "name": user["username"]})

        return _json(404)

    def _issue(self, username: str) -> Dict[str, Any]:
        access = secrets.token_hex(16)
        if self.jwt_exp is not None:
            access = jwt.encode({"sub": username, "exp": self.jwt_exp}, "server-key", algorithm="HS256")
        refresh = secrets.token_hex(16)
        self.access_tokens[access] = username
        self.refresh_tokens[refresh] = username
        issued = {"access_token": access, "refresh_token": refresh, "token_type": "Bearer"}
        if self.expires_in is not None:
            issued["expires_in"] = self.expires_in
        return issued

    def _bearer_user(self, request: httpx.Request) -> Optional[Dict[str, Any]]:
        header = request.headers.get("Authorization", "")
        if not header.startswith("Bearer "):
            return None
        username = self.access_tokens.get(header[len("Bearer "):])
        return self.users.get(username) if username else None

    # API

    def _verification(self, username: str, attempt: int = 1) -> Dict[str, Any]:
        hash_value = secrets.token_hex(8)
        envelope = {
            "username": username,
            "expires": (datetime.now(timezone.utc) + timedelta(hours=1)).isoformat().replace("+00:00", "Z"),
            "hash": hash_value,
            "hint": f"hint-{attempt}",
            "attempt": attempt,
        }
        self.pending[hash_value] = {"code": f"{attempt:06d}", "username": username}
        return envelope

    def _check(self, body: Dict[str, Any]) -> Optional[str]:
        pending = self.pending.get(body.get("hash"))
        if not pending or pending["code"] != body.get("verificationCode"):
            return None
        return pending["username"]

    def _api(self, request: httpx.Request, path: str) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        method = request.method

        if path.startswith("users/") and not path.startswith("users/me"):
            if request.headers.get("client_id") != PUBLIC_KEY:
                return _json(401)
            return self._users_anonymous(path, body)

        user = self._bearer_user(request)
        if user is None:
            return _json(401, {"message": "Unauthorized"})

        if path == "users/me":
            if method == "GET":
                return _json(200, user)
            if body["id"] != user["id"]:
                return _json(400, {"message": "Id mismatch"})
            user.update({k: v for k, v in body.items() if k not in ("id", "securityQuestions")})
            return _json(200, user)
        if path == "users/me/questions":
            user["securityQuestions"] = [
                {"question": q["question"], "answerHash": f"hash:{q['answer']}"}
                for q in body["securityQuestions"]
            ]
            return _json(204)
        if path == "users/me/password":
            if self.passwords[user["username"]] != body["previousPassword"]:
                return _json(400, {"message": "Invalid password"})
            self.passwords[user["username"]] = body["newPassword"]
            return _json(204)

        if path.startswith("meshes/"):
            return self._meshes(request, path.split("/")[1:], body)

        return _json(404)

    def _users_anonymous(self, path: str, body: Dict[str, Any]) -> httpx.Response:
        if path == "users/register":
            if body["username"] in self.users:
                return _json(409, {"message": "Username already exists"})
            self.add_user(
                body["username"], body["newPassword"],
                firstName=body.get("firstName"), verified=False,
            )
            return _json(201, self._verification(body["username"]))
        if path == "users/register/anonymous":
            if body["username"] in self.users:
                return _json(409, {"message": "Username already exists"})
            user = self.add_user(body["username"], body["newPassword"], anonymous=True)
            return _json(201, user)
        if path == "users/forgotpassword":
            if body["username"] not in self.users:
                return _json(404, {"message": "User not found"})
            return _json(200, self._verification(body["username"], body.get("attempt", 1)))
        if path == "users/resetpassword":
            username = self._check(body)
            if username is None:
                return _json(400, {"message": "Invalid verification"})
            self.passwords[username] = body["newPassword"]
            return _json(204)
        if path == "users/checkhash":
            return _json(200, self._check(body) is not None)
        if path == "users/verify":
            username = self._check(body)
            if username is None:
                return _json(400, {"message": "Invalid verification"})
            self.users[username]["verified"] = True
            return _json(204)
        return _json(404)

    def _meshes(self, request: httpx.Request, parts: List[str], body: Any) -> httpx.Response:
        mesh_name = parts[0]
        doc_id = parts[1] if len(parts) > 1 else None
        mesh = self.meshes.setdefault(mesh_name, {})
        method = request.method

        if doc_id is None:
            if method == "POST":
                doc = dict(body)
                doc["_id"] = str(uuid.uuid4())
                doc["_rid"] = secrets.token_hex(4)
                mesh[doc["_id"]] = doc
                return _json(201, doc)
            if method == "GET":
                return _json(200, self._search(mesh, request.url.params))
            if method == "DELETE":
                self.meshes.pop(mesh_name, None)
                return _json(204)

        if doc_id not in mesh:
            return _json(404, {"message": "Mesh data not found"})
        if method == "GET":
            return _json(200, mesh[doc_id])
        if method == "PUT":
            doc = dict(body)
            doc["_id"] = doc_id
            doc["_rid"] = mesh[doc_id]["_rid"]
            mesh[doc_id] = doc
            return _json(200, doc)
        if method == "DELETE":
            del mesh[doc_id]
            return _json(204)
        return _json(405)

    @staticmethod
    def _search(mesh: Dict[str, Dict[str, Any]], params: httpx.QueryParams) -> Dict[str, Any]:
        docs = list(mesh.values())
        if "filter" in params:
            criteria = json.loads(params["filter"])
            docs = [d for d in docs if all(d.get(k) == v for k, v in criteria.items())]
        if "orderby" in params:
            order = json.loads(params["orderby"])
            for key, direction in reversed(list(order.items())):
                docs.sort(key=lambda d: d.get(key), reverse=direction < 0)
        page = int(params.get("page", 1))
        page_size = int(params.get("pageSize", 25))
        start = (page - 1) * page_size
        return {
            "results": docs[start:start + page_size],
            "page": page,
            "pageSize": page_size,
            "totalRecords": len(docs),
        }


@pytest.fixture(autouse=True)
def reset_current_connection():
    sdk_client._current_connection = None
    yield
    sdk_client._current_connection = None


@pytest.fixture
def server():
    return FakeMeshyServer()


@pytest.fixture
def http_client(server):
    return httpx.AsyncClient(transport=httpx.MockTransport(server.handle))


@pytest.fixture
async def client(http_client):
    meshy = MeshyClient(
        ACCOUNT,
        PUBLIC_KEY,
        api_url=API_URL,
        auth_url=AUTH_URL,
        http_client=http_client,
    )
    yield meshy
    await http_client.aclose()


@pytest.fixture
async def connection(client, server):
    server.add_user("alice", "s3cret", firstName="Alice")
    return await client.login("alice", "s3cret")
