"""Find-or-create for applications and releases.

There is no client-side locking: the service is the only authority on
release uniqueness. A creation conflict means another invocation won the
race, and is resolved by re-reading the release list and using the winner.
"""

from __future__ import annotations

from collections.abc import Callable

from modpub.core.result import Err, Ok, Result
from modpub.services.publish.client import CodePushClient
from modpub.services.publish.errors import PreconditionFailed, RemoteServiceFailed
from modpub.services.publish.model import Application, Created, Found, Release, ReleaseLookup

__all__ = ["RevisionProvider", "resolve_app", "resolve_release"]

RevisionProvider = Callable[[], Result[str, RemoteServiceFailed]]


def _find_version(releases: list[Release], version: str) -> Release | None:
    return next((r for r in releases if r.version == version), None)


def resolve_app(
    client: CodePushClient, app_id: str
) -> Result[Application, PreconditionFailed | RemoteServiceFailed]:
    apps = client.list_apps()
    if isinstance(apps, Err):
        e = apps.error
        return Err(RemoteServiceFailed(operation="fetch apps", message=e.message, status=e.status))

    app = next((a for a in apps.value if a.id == app_id), None)
    if app is None:
        return Err(
            PreconditionFailed(
                kind="app_not_found",
                message=f'Could not find app with id: "{app_id}"',
                hint="Check [app] id in modpub.toml, or create the app on the service first.",
            )
        )
    return Ok(app)


def resolve_release(
    client: CodePushClient,
    app_id: str,
    version: str,
    revision_provider: RevisionProvider,
) -> Result[ReleaseLookup, RemoteServiceFailed]:
    """Return the release for ``(app_id, version)``, creating it if needed.

    Args:
        client: Code push service.
        app_id: Application the release belongs to.
        version: Human-specified release version (e.g. "1.2.0").
        revision_provider: Called only when a release has to be created, to
            record which toolchain revision built it.

    Returns:
        Ok(Found) when the release existed, Ok(Created) when it was created
        by this call, Err(RemoteServiceFailed) on any service failure.
    """
    releases = client.list_releases(app_id)
    if isinstance(releases, Err):
        e = releases.error
        return Err(
            RemoteServiceFailed(operation="fetch releases", message=e.message, status=e.status)
        )

    existing = _find_version(releases.value, version)
    if existing is not None:
        return Ok(Found(existing))

    revision = revision_provider()
    if isinstance(revision, Err):
        return revision

    created = client.create_release(app_id, version, revision.value)
    if isinstance(created, Ok):
        return Ok(Created(created.value))

    e = created.error
    if not e.is_conflict:
        return Err(
            RemoteServiceFailed(operation="create release", message=e.message, status=e.status)
        )

    # Lost a creation race: the winner's release is the one to use.
    refetched = client.list_releases(app_id)
    if isinstance(refetched, Err):
        r = refetched.error
        return Err(
            RemoteServiceFailed(operation="fetch releases", message=r.message, status=r.status)
        )
    winner = _find_version(refetched.value, version)
    if winner is None:
        return Err(
            RemoteServiceFailed(
                operation="create release",
                message=f"service reported a conflict but no release {version} exists",
                status=e.status,
            )
        )
    return Ok(Found(winner))
