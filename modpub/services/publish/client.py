"""Code push service client.

This module provides:
- CodePushClient: protocol the publish pipeline talks to (injectable)
- HttpCodePushClient: JSON-over-HTTPS implementation using urllib
- FakeCodePushClient: in-memory service for tests, enforcing the same
  uniqueness rules as the real service
"""

from __future__ import annotations

import http.client
import json
import ssl
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass, field, replace
from typing import Literal, Protocol, runtime_checkable

from modpub import __version__
from modpub.core.result import Err, Ok, Result
from modpub.core.structured import as_obj_list, as_str_dict, get_str
from modpub.services.publish.model import Application, Release

__all__ = [
    "CodePushClient",
    "HttpCodePushClient",
    "FakeCodePushClient",
    "RemoteError",
    "StoredArtifact",
]

RemoteErrorKind = Literal["transport", "http", "conflict", "payload"]


@dataclass(frozen=True, slots=True)
class RemoteError:
    """A failed call to the code push service.

    Attributes:
        message: Human-readable cause
        kind: ``conflict`` when a uniqueness constraint already holds a record
        status: HTTP status (0 when no response was received)
        existing_hash: Hash of the existing artifact, when a conflict reports it
        upload_url: Upload URL a conflict still carries while the existing
            artifact has no bytes yet
    """

    message: str
    kind: RemoteErrorKind = "http"
    status: int = 0
    existing_hash: str | None = None
    upload_url: str | None = None

    @property
    def is_conflict(self) -> bool:
        return self.kind == "conflict"

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message}"
        return self.message


@runtime_checkable
class CodePushClient(Protocol):
    def list_apps(self) -> Result[list[Application], RemoteError]: ...

    def list_releases(self, app_id: str) -> Result[list[Release], RemoteError]: ...

    def create_release(
        self, app_id: str, version: str, toolchain_revision: str
    ) -> Result[Release, RemoteError]: ...

    def create_artifact(
        self,
        release_id: str,
        arch: str,
        platform: str,
        hash: str,
        data: bytes,
    ) -> Result[None, RemoteError]: ...


def _parse_release(obj: object) -> Release | None:
    d = as_str_dict(obj)
    if d is None:
        return None
    release_id = get_str(d, "id")
    app_id = get_str(d, "app_id")
    version = get_str(d, "version")
    if release_id is None or app_id is None or version is None:
        return None
    return Release(
        id=release_id,
        app_id=app_id,
        version=version,
        toolchain_revision=get_str(d, "flutter_revision") or "",
    )


def _parse_app(obj: object) -> Application | None:
    d = as_str_dict(obj)
    if d is None:
        return None
    app_id = get_str(d, "app_id")
    if app_id is None:
        return None
    return Application(id=app_id, display_name=get_str(d, "display_name") or app_id)


class HttpCodePushClient:
    """Client for the code push REST API.

    Endpoints:
    - GET  /api/v1/apps
    - GET  /api/v1/releases?app_id=...
    - POST /api/v1/releases
    - POST /api/v1/releases/{id}/artifacts  -> {"url": upload url}, then PUT bytes

    HTTP 409 is reported as a ``conflict`` RemoteError.

    Creating an artifact takes two requests, so a run can stop after the
    record exists but before its bytes are stored. The service then answers
    the next POST with 409 plus the pending upload ``url``; if the reported
    hash matches ours the upload is finished here and the call succeeds.
    """

    def __init__(
        self,
        *,
        base_url: str,
        token: str,
        timeout: float = 60.0,
        user_agent: str = f"modpub/{__version__}",
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._token = token
        self._user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def _url(self, path: str) -> str:
        return f"{self.base_url}/api/v1/{path}"

    def _request(
        self,
        method: str,
        url: str,
        *,
        body: bytes | None = None,
        content_type: str | None = None,
        authorized: bool = True,
    ) -> Result[bytes, RemoteError]:
        headers = {"User-Agent": self._user_agent, "Accept": "application/json"}
        if authorized:
            headers["Authorization"] = f"Bearer {self._token}"
        if content_type is not None:
            headers["Content-Type"] = content_type

        req = urllib.request.Request(url, data=body, headers=headers, method=method)
        try:
            with urllib.request.urlopen(req, timeout=self.timeout, context=self._ssl_context) as resp:
                return Ok(resp.read())
        except urllib.error.HTTPError as e:
            return Err(_http_error(e))
        except urllib.error.URLError as e:
            return Err(RemoteError(message=str(e.reason), kind="transport"))
        except TimeoutError:
            return Err(RemoteError(message="Request timed out", kind="transport"))
        except http.client.HTTPException as e:
            # Connection dropped mid-response (IncompleteRead, RemoteDisconnected).
            detail = str(e) or type(e).__name__
            return Err(RemoteError(message=f"broken response: {detail}", kind="transport"))
        except (ValueError, OSError) as e:
            return Err(RemoteError(message=str(e), kind="transport"))

    def _json(self, method: str, path: str, payload: object | None = None) -> Result[object, RemoteError]:
        body = json.dumps(payload).encode("utf-8") if payload is not None else None
        result = self._request(
            method,
            self._url(path),
            body=body,
            content_type="application/json" if body is not None else None,
        )
        if isinstance(result, Err):
            return result
        if not result.value:
            return Ok(None)
        try:
            return Ok(json.loads(result.value.decode("utf-8")))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return Err(RemoteError(message=f"invalid JSON response: {e}", kind="payload"))

    def list_apps(self) -> Result[list[Application], RemoteError]:
        result = self._json("GET", "apps")
        if isinstance(result, Err):
            return result
        items = as_obj_list(result.value)
        if items is None:
            return Err(RemoteError(message="unexpected apps payload", kind="payload"))
        apps = [app for app in (_parse_app(item) for item in items) if app is not None]
        return Ok(apps)

    def list_releases(self, app_id: str) -> Result[list[Release], RemoteError]:
        query = urllib.parse.urlencode({"app_id": app_id})
        result = self._json("GET", f"releases?{query}")
        if isinstance(result, Err):
            return result
        items = as_obj_list(result.value)
        if items is None:
            return Err(RemoteError(message="unexpected releases payload", kind="payload"))
        releases = [r for r in (_parse_release(item) for item in items) if r is not None]
        return Ok(releases)

    def create_release(
        self, app_id: str, version: str, toolchain_revision: str
    ) -> Result[Release, RemoteError]:
        result = self._json(
            "POST",
            "releases",
            {"app_id": app_id, "version": version, "flutter_revision": toolchain_revision},
        )
        if isinstance(result, Err):
            return result
        release = _parse_release(result.value)
        if release is None:
            return Err(RemoteError(message="unexpected release payload", kind="payload"))
        return Ok(release)

    def create_artifact(
        self,
        release_id: str,
        arch: str,
        platform: str,
        hash: str,
        data: bytes,
    ) -> Result[None, RemoteError]:
        path = f"releases/{urllib.parse.quote(release_id, safe='')}/artifacts"
        created = self._json(
            "POST",
            path,
            {"arch": arch, "platform": platform, "hash": hash, "size": len(data)},
        )
        if isinstance(created, Err):
            e = created.error
            if e.is_conflict and e.upload_url is not None and e.existing_hash in (None, hash):
                return self._upload(e.upload_url, data)
            return created

        d = as_str_dict(created.value)
        upload_url = get_str(d, "url") if d is not None else None
        if upload_url is None:
            return Err(RemoteError(message="missing artifact upload url", kind="payload"))
        return self._upload(upload_url, data)

    def _upload(self, upload_url: str, data: bytes) -> Result[None, RemoteError]:
        # Signed storage URL: credentials are embedded, do not send ours.
        uploaded = self._request(
            "PUT",
            upload_url,
            body=data,
            content_type="application/octet-stream",
            authorized=False,
        )
        if isinstance(uploaded, Err):
            return uploaded
        return Ok(None)


def _http_error(e: urllib.error.HTTPError) -> RemoteError:
    message = str(e.reason)
    existing_hash: str | None = None
    upload_url: str | None = None
    try:
        raw = e.read()
    except (OSError, http.client.HTTPException):
        raw = b""
    if raw:
        try:
            d = as_str_dict(json.loads(raw.decode("utf-8")))
        except (json.JSONDecodeError, UnicodeDecodeError):
            d = None
        if d is not None:
            message = get_str(d, "message") or message
            existing_hash = get_str(d, "hash")
            upload_url = get_str(d, "url")

    if e.code == 409:
        return RemoteError(
            message=message,
            kind="conflict",
            status=409,
            existing_hash=existing_hash,
            upload_url=upload_url,
        )
    return RemoteError(message=message, kind="http", status=e.code)


# -----------------------------------------------------------------------------
# In-memory service
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class StoredArtifact:
    release_id: str
    arch: str
    platform: str
    hash: str
    # None while the record exists but its upload has not completed.
    data: bytes | None


def _empty_apps() -> list[Application]:
    return []


def _empty_releases() -> list[Release]:
    return []


def _empty_artifacts() -> dict[tuple[str, str], StoredArtifact]:
    return {}


def _empty_failures() -> dict[str, list[RemoteError]]:
    return {}


def _empty_calls() -> list[tuple[str, tuple[str, ...]]]:
    return []


def _empty_upload_failures() -> list[RemoteError]:
    return []


@dataclass
class FakeCodePushClient:
    """In-memory code push service.

    Enforces the service's uniqueness rules: one release per
    (app_id, version) and one artifact per (release_id, arch); violations are
    answered with a ``conflict`` RemoteError just like HTTP 409.

    ``fail_next_upload`` registers the next artifact without its bytes, like a
    storage upload that failed after the record was created. Creating that
    artifact again with the same hash completes the upload.

    Usage:
        client = FakeCodePushClient(apps=[Application("app-1", "Demo")])
        client.fail_next("list_releases", RemoteError("boom", kind="transport"))
    """

    apps: list[Application] = field(default_factory=_empty_apps)
    releases: list[Release] = field(default_factory=_empty_releases)
    artifacts: dict[tuple[str, str], StoredArtifact] = field(default_factory=_empty_artifacts)
    calls: list[tuple[str, tuple[str, ...]]] = field(default_factory=_empty_calls)
    _failures: dict[str, list[RemoteError]] = field(default_factory=_empty_failures)
    _upload_failures: list[RemoteError] = field(default_factory=_empty_upload_failures)

    def fail_next(self, operation: str, error: RemoteError) -> None:
        """Make the next call to ``operation`` fail with ``error``."""
        self._failures.setdefault(operation, []).append(error)

    def fail_next_upload(self, error: RemoteError) -> None:
        """Register the next new artifact but fail storing its bytes."""
        self._upload_failures.append(error)

    def calls_to(self, operation: str) -> list[tuple[str, ...]]:
        return [args for name, args in self.calls if name == operation]

    def _injected(self, operation: str) -> RemoteError | None:
        pending = self._failures.get(operation)
        if pending:
            return pending.pop(0)
        return None

    def list_apps(self) -> Result[list[Application], RemoteError]:
        self.calls.append(("list_apps", ()))
        if (error := self._injected("list_apps")) is not None:
            return Err(error)
        return Ok(list(self.apps))

    def list_releases(self, app_id: str) -> Result[list[Release], RemoteError]:
        self.calls.append(("list_releases", (app_id,)))
        if (error := self._injected("list_releases")) is not None:
            return Err(error)
        return Ok([r for r in self.releases if r.app_id == app_id])

    def create_release(
        self, app_id: str, version: str, toolchain_revision: str
    ) -> Result[Release, RemoteError]:
        self.calls.append(("create_release", (app_id, version, toolchain_revision)))
        if (error := self._injected("create_release")) is not None:
            return Err(error)
        if any(r.app_id == app_id and r.version == version for r in self.releases):
            return Err(RemoteError(message="release already exists", kind="conflict", status=409))
        release = Release(
            id=str(len(self.releases) + 1),
            app_id=app_id,
            version=version,
            toolchain_revision=toolchain_revision,
        )
        self.releases.append(release)
        return Ok(release)

    def create_artifact(
        self,
        release_id: str,
        arch: str,
        platform: str,
        hash: str,
        data: bytes,
    ) -> Result[None, RemoteError]:
        self.calls.append(("create_artifact", (release_id, arch, platform, hash)))
        if (error := self._injected("create_artifact")) is not None:
            return Err(error)
        key = (release_id, arch)
        existing = self.artifacts.get(key)
        if existing is not None and existing.data is None and existing.hash == hash:
            self.artifacts[key] = replace(existing, data=data)
            return Ok(None)
        if existing is not None:
            return Err(
                RemoteError(
                    message="artifact already exists",
                    kind="conflict",
                    status=409,
                    existing_hash=existing.hash,
                )
            )
        if self._upload_failures:
            self.artifacts[key] = StoredArtifact(
                release_id=release_id, arch=arch, platform=platform, hash=hash, data=None
            )
            return Err(self._upload_failures.pop(0))
        self.artifacts[key] = StoredArtifact(
            release_id=release_id, arch=arch, platform=platform, hash=hash, data=data
        )
        return Ok(None)
