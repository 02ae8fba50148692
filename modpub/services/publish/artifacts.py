"""Upload a single artifact, idempotently.

Artifacts are append-only on the service. Re-publishing a (release, arch)
pair answers with a conflict, which is the ``ALREADY_EXISTS`` outcome and
counts as success; that is what makes re-running a partially failed publish
safe.
"""

from __future__ import annotations

from modpub.core.result import Err, Ok, Result
from modpub.services.publish.client import CodePushClient
from modpub.services.publish.errors import RemoteServiceFailed
from modpub.services.publish.hasher import HashFunction, sha256_hex
from modpub.services.publish.model import ANDROID_PLATFORM, ArtifactResult, PublishOutcome

__all__ = ["publish_artifact"]


def publish_artifact(
    client: CodePushClient,
    release_id: str,
    arch: str,
    data: bytes,
    *,
    platform: str = ANDROID_PLATFORM,
    hasher: HashFunction = sha256_hex,
) -> Result[ArtifactResult, RemoteServiceFailed]:
    """Create the ``arch`` artifact of a release from ``data``.

    Returns:
        Ok(ArtifactResult) with outcome CREATED or ALREADY_EXISTS.
        ``hash_mismatch`` is set when the existing artifact's hash is known
        and differs from ``data``'s; the existing artifact is left untouched.
        Err(RemoteServiceFailed) for any other service failure.
    """
    digest = hasher(data)
    result = client.create_artifact(release_id, arch, platform, digest, data)

    if isinstance(result, Ok):
        return Ok(
            ArtifactResult(arch=arch, hash=digest, size=len(data), outcome=PublishOutcome.CREATED)
        )

    e = result.error
    if e.is_conflict:
        mismatch = e.existing_hash is not None and e.existing_hash != digest
        return Ok(
            ArtifactResult(
                arch=arch,
                hash=digest,
                size=len(data),
                outcome=PublishOutcome.ALREADY_EXISTS,
                hash_mismatch=mismatch,
            )
        )

    return Err(
        RemoteServiceFailed(operation=f"upload {arch} artifact", message=e.message, status=e.status)
    )
