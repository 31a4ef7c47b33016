"""Path-addressed client for the GitHub contents API.

Reads always go to the remote repository first so public content can be
browsed without a token. Writes and deletes without a token are redirected
to the local emulation store, where they succeed unconditionally. With a
token, every update and delete carries the file's content hash and the
provider rejects stale hashes as conflicts.
"""

from __future__ import annotations

import asyncio
import functools
import sqlite3
from typing import Any, Callable, Optional, TypeVar
from urllib.parse import quote

import httpx

from gitfolio.core.config import Settings
from gitfolio.core.logging import get_module_logger
from gitfolio.repository.credentials import CredentialStore
from gitfolio.repository.emulation import LocalEmulationStore
from gitfolio.repository.encoding import (
    bytes_to_text,
    decode_bytes,
    decode_text,
    encode_bytes,
    encode_text,
    ensure_transport,
)
from gitfolio.repository.exceptions import (
    AuthFailure,
    Conflict,
    NotFound,
    RepositoryError,
    RepositoryNotConfigured,
    TransportError,
)
from gitfolio.repository.models import AuthenticatedUser, RepositoryEntry
from gitfolio.repository.retry import retry_read

logger = get_module_logger("repository_client")

T = TypeVar("T")

# Marker files that keep otherwise empty folders in git
PLACEHOLDER_NAMES = frozenset({".gitkeep"})

EMULATED_LOGIN = "local-test-user"


class RepositoryClient:
    """List, read, write and delete files in the content repository."""

    def __init__(
        self,
        credentials: CredentialStore,
        emulation: LocalEmulationStore,
        *,
        api_url: str = "https://api.github.com",
        raw_url: str = "https://raw.githubusercontent.com",
        branch: Optional[str] = None,
        timeout: float = 30.0,
        read_retries: int = 2,
        retry_base_delay: float = 0.2,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Initialize the repository client.

        Args:
            credentials: Token and repository coordinates
            emulation: Store used for writes when no token is set
            api_url: Base URL of the REST API
            raw_url: Base URL for raw file downloads
            branch: Branch to read and commit to; None uses the default branch
            timeout: HTTP timeout in seconds
            read_retries: Retries for reads failing with a transport error
            retry_base_delay: Initial backoff delay in seconds
            http_client: Shared client; created (and owned) when omitted
        """
        self.credentials = credentials
        self.emulation = emulation
        self.api_url = api_url.rstrip("/")
        self.raw_base_url = raw_url.rstrip("/")
        self.branch = branch
        self.read_retries = read_retries
        self.retry_base_delay = retry_base_delay
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        credentials: CredentialStore,
        emulation: LocalEmulationStore,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> "RepositoryClient":
        return cls(
            credentials,
            emulation,
            api_url=settings.GITHUB_API_URL,
            raw_url=settings.GITHUB_RAW_URL,
            branch=settings.REPO_BRANCH,
            timeout=settings.HTTP_TIMEOUT,
            read_retries=settings.READ_RETRIES,
            retry_base_delay=settings.RETRY_BASE_DELAY,
            http_client=http_client,
        )

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> "RepositoryClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # Public operations

    async def list(self, path: str) -> list[RepositoryEntry]:
        """List the files directly inside a folder.

        A missing folder is a normal state and yields an empty list.
        Directories and placeholder markers are left out. Without a token,
        emulated files in the same folder are merged in.

        Args:
            path: Folder path, e.g. ``content/blogs``

        Returns:
            File entries (no bodies)
        """
        path = _normalize(path)
        entries: list[RepositoryEntry] = []

        if self._remote_reachable():
            try:
                data = await self._get_json(path, "list")
            except NotFound:
                data = []
            except TransportError as e:
                if self.credentials.is_authenticated():
                    raise
                logger.warning("remote_list_unavailable", path=path, error=e.message)
                data = []

            items = data if isinstance(data, list) else [data]
            entries = [
                RepositoryEntry.from_api(item)
                for item in items
                if item.get("type") == "file"
                and item.get("name") not in PLACEHOLDER_NAMES
            ]

        if not self.credentials.is_authenticated():
            entries = await self._emulated(self._merge_emulated, path, entries)

        return entries

    async def read(self, path: str, *, binary: bool = False) -> RepositoryEntry:
        """Read a file and decode its body.

        Args:
            path: File path
            binary: Return the body as bytes instead of UTF-8 text

        Returns:
            RepositoryEntry with ``raw_body`` set

        Raises:
            NotFound: If the path does not exist or is a directory
            AuthFailure: If the token was rejected
            TransportError: If the provider could not be reached
        """
        path = _normalize(path)

        if not self._remote_reachable():
            emulated = await self._emulated(self._read_emulated, path, binary)
            if emulated is None:
                raise NotFound(f"{path} does not exist", status_code=404, path=path)
            return emulated

        try:
            data = await self._get_json(path, "read")
        except (NotFound, TransportError):
            if self.credentials.is_authenticated():
                raise
            emulated = await self._emulated(self._read_emulated, path, binary)
            if emulated is None:
                raise
            return emulated

        if isinstance(data, list) or data.get("type") != "file":
            raise NotFound(f"{path} is not a file", status_code=404, path=path)

        if data.get("encoding") == "none" and data.get("download_url"):
            # Files over 1MB come back without inline content
            raw = await self._download(data["download_url"], path)
            body: str | bytes = raw if binary else bytes_to_text(raw)
        else:
            content = data.get("content") or ""
            body = decode_bytes(content) if binary else decode_text(content)

        return RepositoryEntry.from_api(data, raw_body=body)

    async def write(
        self,
        path: str,
        body: str | bytes,
        commit_message: str,
        expected_hash: Optional[str] = None,
        is_binary: bool = False,
    ) -> RepositoryEntry:
        """Create or replace a file.

        Args:
            path: File path
            body: Text, raw bytes, or (with ``is_binary``) base64 text
            commit_message: Commit message for the change
            expected_hash: Current content hash when replacing; omit to create
            is_binary: ``body`` is already transport-encoded media

        Returns:
            The new entry, carrying the new content hash

        Raises:
            Conflict: If the hash is stale, or omitted for an existing file
            AuthFailure: If the token was rejected
            TransportError: If the provider could not be reached
            ValueError: If a binary body is not valid base64
        """
        path = _normalize(path)
        transport = _to_transport(body, is_binary)

        if not self.credentials.is_authenticated():
            entry = await self._emulated(self._write_emulated, path, transport)
            entry.raw_body = body
            logger.info("emulated_write", path=path, message=commit_message)
            return entry

        payload: dict[str, Any] = {"message": commit_message, "content": transport}
        if expected_hash:
            payload["sha"] = expected_hash
        if self.branch:
            payload["branch"] = self.branch

        data = await self._request("PUT", self._contents_url(path), path, json=payload)
        entry = RepositoryEntry.from_api(data["content"], raw_body=body)
        logger.info(
            "file_written",
            path=path,
            sha=entry.content_hash,
            created=expected_hash is None,
        )
        return entry

    async def delete(
        self, path: str, commit_message: str, expected_hash: Optional[str]
    ) -> bool:
        """Delete a file.

        Args:
            path: File path
            commit_message: Commit message for the change
            expected_hash: Current content hash of the file

        Returns:
            True once the file is gone

        Raises:
            NotFound: If the path does not exist
            Conflict: If the hash does not match the current file
        """
        path = _normalize(path)

        if not self.credentials.is_authenticated():
            removed = await self._emulated(self.emulation.delete, path)
            logger.info("emulated_delete", path=path, removed=removed)
            return True

        payload: dict[str, Any] = {"message": commit_message, "sha": expected_hash}
        if self.branch:
            payload["branch"] = self.branch

        await self._request("DELETE", self._contents_url(path), path, json=payload)
        logger.info("file_deleted", path=path, sha=expected_hash)
        return True

    async def get_authenticated_user(self) -> AuthenticatedUser:
        """Identify the account behind the current token.

        Raises:
            AuthFailure: If the token was rejected
        """
        if not self.credentials.is_authenticated():
            return AuthenticatedUser(login=EMULATED_LOGIN)

        url = f"{self.api_url}/user"
        data = await retry_read(
            lambda: self._request("GET", url, None),
            max_retries=self.read_retries,
            base_delay=self.retry_base_delay,
            description="user",
        )
        return AuthenticatedUser(login=data["login"], name=data.get("name"))

    def raw_url(self, path: str) -> str:
        """Raw download URL for a path in the configured repository."""
        branch = self.branch or "main"
        return (
            f"{self.raw_base_url}/{self.credentials.owner}/"
            f"{self.credentials.repository}/{branch}/{_normalize(path)}"
        )

    # Internals

    def _remote_reachable(self) -> bool:
        # Anonymous reads need coordinates; authenticated calls fail loudly
        # without them
        return self.credentials.has_coordinates or self.credentials.is_authenticated()

    def _contents_url(self, path: str) -> str:
        if not self.credentials.has_coordinates:
            raise RepositoryNotConfigured(
                "Repository information is missing. Please configure owner and repo.",
                path=path,
            )
        return (
            f"{self.api_url}/repos/{self.credentials.owner}/"
            f"{self.credentials.repository}/contents/{quote(path, safe='/')}"
        )

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/vnd.github+json"}
        if self.credentials.token:
            headers["Authorization"] = f"token {self.credentials.token}"
        return headers

    async def _get_json(self, path: str, description: str) -> Any:
        url = self._contents_url(path)
        params = {"ref": self.branch} if self.branch else None
        return await retry_read(
            lambda: self._request("GET", url, path, params=params),
            max_retries=self.read_retries,
            base_delay=self.retry_base_delay,
            description=description,
        )

    async def _request(
        self,
        method: str,
        url: str,
        path: Optional[str],
        *,
        json: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, str]] = None,
    ) -> Any:
        try:
            response = await self._http.request(
                method, url, headers=self._headers(), json=json, params=params
            )
        except httpx.HTTPError as e:
            logger.warning("request_failed", method=method, path=path, error=str(e))
            raise TransportError(f"GitHub request failed: {e}", path=path) from e

        if response.is_error:
            error = _error_for(response, path)
            logger.warning(
                "request_rejected",
                method=method,
                path=path,
                status_code=response.status_code,
                error=error.message,
            )
            raise error

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    async def _download(self, url: str, path: str) -> bytes:
        try:
            response = await self._http.get(url, headers=self._headers())
        except httpx.HTTPError as e:
            raise TransportError(f"GitHub download failed: {e}", path=path) from e
        if response.is_error:
            raise _error_for(response, path)
        return response.content

    async def _emulated(self, operation: Callable[..., T], *args: Any) -> T:
        """Run a local store call in a worker thread.

        SQLite waits on a locked database (and the store retries with
        backoff), so the call must not run on the event loop.

        Raises:
            TransportError: If the local store failed
        """
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(
                None, functools.partial(operation, *args)
            )
        except sqlite3.Error as e:
            path = args[0] if args else None
            logger.warning(
                "emulation_store_failed",
                operation=getattr(operation, "__name__", repr(operation)),
                path=path,
                error=str(e),
            )
            raise TransportError(f"Local store failed: {e}", path=path) from e

    def _write_emulated(self, path: str, transport: str) -> RepositoryEntry:
        self.emulation.set(path, transport)
        return self.emulation.entry_for(path, transport)

    def _read_emulated(self, path: str, binary: bool) -> Optional[RepositoryEntry]:
        stored = self.emulation.get(path)
        if stored is None:
            return None
        entry = self.emulation.entry_for(path, stored)
        entry.raw_body = decode_bytes(stored) if binary else decode_text(stored)
        return entry

    def _merge_emulated(
        self, folder: str, entries: list[RepositoryEntry]
    ) -> list[RepositoryEntry]:
        known = {entry.name for entry in entries}
        merged = list(entries)
        for child in self.emulation.list_prefix(folder):
            stored = self.emulation.get(child)
            if stored is None:
                continue
            entry = self.emulation.entry_for(child, stored)
            if entry.name in known or entry.name in PLACEHOLDER_NAMES:
                continue
            merged.append(entry)
        return merged


def _normalize(path: str) -> str:
    return path.strip().strip("/")


def _to_transport(body: str | bytes, is_binary: bool) -> str:
    if isinstance(body, bytes):
        return encode_bytes(body)
    if is_binary:
        return ensure_transport(body)
    return encode_text(body)


def _provider_message(response: httpx.Response) -> str:
    fallback = f"GitHub API Error: {response.status_code} {response.reason_phrase}"
    try:
        data = response.json()
    except ValueError:
        return fallback
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return fallback


def _error_for(response: httpx.Response, path: Optional[str]) -> RepositoryError:
    """Translate a provider error response into a repository error."""
    status = response.status_code
    message = _provider_message(response)
    lowered = message.lower()

    error_cls: type[RepositoryError]
    if status == 404:
        error_cls = NotFound
    elif status == 409:
        error_cls = Conflict
    elif status == 422 and "sha" in lowered:
        error_cls = Conflict
    elif status == 401:
        error_cls = AuthFailure
    elif status == 403 and "rate limit" not in lowered:
        error_cls = AuthFailure
    else:
        error_cls = TransportError

    return error_cls(message, status_code=status, path=path)
