"""In-memory stand-in for the GitHub contents API, served through respx."""

import base64
import json
import textwrap
from typing import Any, Dict, Iterator, List, Optional
from urllib.parse import unquote

import httpx
import pytest
import respx

from gitfolio.repository.encoding import git_blob_sha

API_URL = "https://api.github.com"
OWNER = "octo"
REPOSITORY = "site"
CONTENTS_URL = f"{API_URL}/repos/{OWNER}/{REPOSITORY}/contents"
DOWNLOAD_URL = "https://raw.githubusercontent.com"


def wrapped_base64(data: bytes) -> str:
    """Base64 wrapped at 60 columns, as GitHub returns it."""
    encoded = base64.b64encode(data).decode("ascii")
    return "\n".join(textwrap.wrap(encoded, 60)) + "\n"


def file_item(path: str, data: bytes) -> Dict[str, Any]:
    """Contents API description of a file."""
    return {
        "type": "file",
        "name": path.rsplit("/", 1)[-1],
        "path": path,
        "sha": git_blob_sha(data),
        "size": len(data),
        "download_url": f"{DOWNLOAD_URL}/{OWNER}/{REPOSITORY}/main/{path}",
    }


def dir_item(path: str) -> Dict[str, Any]:
    return {
        "type": "dir",
        "name": path.rsplit("/", 1)[-1],
        "path": path,
        "sha": git_blob_sha(path.encode()),
        "size": 0,
        "download_url": None,
    }


class FakeContentsAPI:
    """Serves GET, PUT and DELETE on repository contents from a dict.

    Writes follow GitHub's rules: updating or deleting requires the current
    blob SHA, and a stale SHA is answered with 409.
    """

    def __init__(self) -> None:
        self.files: Dict[str, bytes] = {}
        self.commits: List[str] = []

    def seed(self, path: str, body: str | bytes) -> str:
        """Store a file directly and return its SHA."""
        data = body.encode("utf-8") if isinstance(body, str) else body
        self.files[path] = data
        return git_blob_sha(data)

    def sha(self, path: str) -> str:
        return git_blob_sha(self.files[path])

    def __call__(self, request: httpx.Request, path: str) -> httpx.Response:
        path = unquote(path).strip("/")
        if request.method == "GET":
            return self._get(path)
        payload = json.loads(request.content)
        if request.method == "PUT":
            return self._put(path, payload)
        if request.method == "DELETE":
            return self._delete(path, payload)
        return httpx.Response(405, json={"message": "Method Not Allowed"})

    def _get(self, path: str) -> httpx.Response:
        if path in self.files:
            data = self.files[path]
            item = file_item(path, data)
            item.update({"encoding": "base64", "content": wrapped_base64(data)})
            return httpx.Response(200, json=item)

        prefix = f"{path}/"
        children: Dict[str, Dict[str, Any]] = {}
        for stored, data in self.files.items():
            if not stored.startswith(prefix):
                continue
            rest = stored[len(prefix) :]
            if "/" in rest:
                child = prefix + rest.split("/", 1)[0]
                children.setdefault(child, dir_item(child))
            else:
                children[stored] = file_item(stored, data)

        if not children:
            return httpx.Response(404, json={"message": "Not Found"})
        return httpx.Response(200, json=[children[key] for key in sorted(children)])

    def _put(self, path: str, payload: Dict[str, Any]) -> httpx.Response:
        sha: Optional[str] = payload.get("sha")
        existing = self.files.get(path)
        if existing is not None and sha is None:
            return httpx.Response(
                422, json={"message": 'Invalid request.\n\n"sha" wasn\'t supplied.'}
            )
        if sha is not None and (existing is None or git_blob_sha(existing) != sha):
            return httpx.Response(
                409, json={"message": f"{path} does not match {sha}"}
            )

        data = base64.b64decode(payload["content"])
        self.files[path] = data
        self.commits.append(payload["message"])
        status = 201 if existing is None else 200
        return httpx.Response(
            status, json={"content": file_item(path, data), "commit": {"sha": "c0"}}
        )

    def _delete(self, path: str, payload: Dict[str, Any]) -> httpx.Response:
        existing = self.files.get(path)
        if existing is None:
            return httpx.Response(404, json={"message": "Not Found"})
        if payload.get("sha") != git_blob_sha(existing):
            return httpx.Response(
                409, json={"message": f"{path} does not match {payload.get('sha')}"}
            )
        del self.files[path]
        self.commits.append(payload["message"])
        return httpx.Response(200, json={"content": None, "commit": {"sha": "c1"}})


@pytest.fixture
def github() -> Iterator[FakeContentsAPI]:
    """Route all contents API traffic to a fresh fake repository."""
    fake = FakeContentsAPI()
    with respx.mock(assert_all_called=False) as router:
        router.route(url__regex=rf"^{CONTENTS_URL}/(?P<path>[^?]*)").mock(
            side_effect=fake
        )
        router.get(f"{API_URL}/user").mock(
            return_value=httpx.Response(200, json={"login": OWNER, "name": "Octo"})
        )
        yield fake
