"""Positional parsing of SigV4 credential scopes and REST string-to-sign blocks.

A V4 REST block sent by the uploader looks like::

    AWS4-HMAC-SHA256
    20130524T000000Z
    20130524/us-east-1/s3/aws4_request
    <canonical request, any number of lines>

The uploader supplies the canonical request in clear text rather than its
hash, so the hash that actually gets signed is always computed here.
Every parser returns ``None`` for malformed input instead of raising.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

from uploadgate.services.signing import V4_SCOPE_TERMINATOR, V4_SERVICE

_SCOPE_SUFFIX = (V4_SERVICE, V4_SCOPE_TERMINATOR)


@dataclass(frozen=True)
class CredentialScope:
    date: str
    region: str


@dataclass(frozen=True)
class RestStringToSign:
    algorithm: str
    request_date: str
    scope_line: str
    scope: CredentialScope
    canonical_request: str

    @property
    def hashed_canonical_request(self) -> str:
        return hashlib.sha256(self.canonical_request.encode("utf-8")).hexdigest()

    def to_string_to_sign(self) -> str:
        return "\n".join(
            [self.algorithm, self.request_date, self.scope_line, self.hashed_canonical_request]
        )


def _scope_from_parts(date: str, region: str) -> CredentialScope | None:
    if not date or not (date.isascii() and date.isdigit()):
        return None
    if not region or region.strip() != region:
        return None
    return CredentialScope(date=date, region=region)


def parse_scope_line(scope_line: str) -> CredentialScope | None:
    """Parse ``<date>/<region>/s3/aws4_request``."""
    parts = scope_line.split("/")
    if len(parts) != 4 or tuple(parts[2:]) != _SCOPE_SUFFIX:
        return None
    return _scope_from_parts(parts[0], parts[1])


def parse_credential(credential: str) -> CredentialScope | None:
    """Parse ``<access-key>/<date>/<region>/s3/aws4_request``.

    The access key is opaque and only has to be non-empty.
    """
    parts = credential.split("/")
    if len(parts) < 5 or tuple(parts[-2:]) != _SCOPE_SUFFIX:
        return None
    if not "/".join(parts[:-4]):
        return None
    return _scope_from_parts(parts[-4], parts[-3])


def parse_rest_string_to_sign(headers: str) -> RestStringToSign | None:
    parts = headers.split("\n", 3)
    if len(parts) != 4:
        return None
    algorithm, request_date, scope_line, canonical_request = parts
    if not algorithm or not request_date:
        return None
    scope = parse_scope_line(scope_line)
    if scope is None:
        return None
    return RestStringToSign(
        algorithm=algorithm,
        request_date=request_date,
        scope_line=scope_line,
        scope=scope,
        canonical_request=canonical_request,
    )
