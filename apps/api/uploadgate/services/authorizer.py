"""Decide whether an uploader's signing request is acceptable and sign it.

Requests arrive as raw JSON and are decoded once into either a policy
request (simple uploads) or a REST string-to-sign request (chunked uploads).
Hostile or malformed input always ends in :class:`Rejected`; nothing in this
module raises for bad client data.
"""

from __future__ import annotations

import base64
import enum
import json
import logging
from dataclasses import dataclass

from uploadgate.config import GatewaySettings
from uploadgate.services.policy_validator import collect_policy_conditions, validate_policy
from uploadgate.services.rest_validator import is_valid_v2_rest_request, is_valid_v4_rest_request
from uploadgate.services.signing import sign_v2, sign_v4_with_secret
from uploadgate.services.string_to_sign import parse_credential, parse_rest_string_to_sign

logger = logging.getLogger(__name__)


class SchemeVersion(enum.Enum):
    V2 = 2
    V4 = 4

    @classmethod
    def from_v4_flag(cls, v4: str | None) -> SchemeVersion:
        return cls.V4 if v4 is not None else cls.V2


@dataclass(frozen=True)
class PolicySignRequest:
    document: dict
    conditions: list
    policy_text: str


@dataclass(frozen=True)
class RestHeaderSignRequest:
    headers: str


SignRequest = PolicySignRequest | RestHeaderSignRequest


@dataclass(frozen=True)
class Signed:
    signature: str
    policy: str | None = None


@dataclass(frozen=True)
class Rejected:
    invalid: bool = True


AuthorizationResult = Signed | Rejected


def _is_utf8_encodable(text: str) -> bool:
    # json.loads accepts lone surrogates such as "\ud800"; they cannot be signed.
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def decode_sign_request(body: bytes | str) -> SignRequest | None:
    try:
        document = json.loads(body)
    except (ValueError, RecursionError):
        return None
    if not isinstance(document, dict):
        return None

    if "headers" in document:
        headers = document["headers"]
        if isinstance(headers, str) and headers and _is_utf8_encodable(headers):
            return RestHeaderSignRequest(headers=headers)
        return None

    conditions = document.get("conditions")
    if not isinstance(conditions, list):
        return None
    try:
        policy_text = json.dumps(document, separators=(",", ":"), ensure_ascii=False)
    except (ValueError, RecursionError):
        return None
    if not _is_utf8_encodable(policy_text):
        return None
    return PolicySignRequest(document=document, conditions=conditions, policy_text=policy_text)


def _authorize_rest(
    request: RestHeaderSignRequest,
    version: SchemeVersion,
    settings: GatewaySettings,
) -> AuthorizationResult:
    if version is SchemeVersion.V2:
        if not is_valid_v2_rest_request(request.headers, expected_bucket=settings.expected_bucket):
            return Rejected()
        return Signed(signature=sign_v2(secret=settings.client_secret_key, message=request.headers))

    if not is_valid_v4_rest_request(request.headers, expected_host=settings.expected_host):
        return Rejected()
    parsed = parse_rest_string_to_sign(request.headers)
    if parsed is None:
        logger.info("Rejected V4 REST request: malformed string-to-sign")
        return Rejected()
    signature = sign_v4_with_secret(
        secret=settings.client_secret_key,
        date=parsed.scope.date,
        region=parsed.scope.region,
        message=parsed.to_string_to_sign(),
    )
    return Signed(signature=signature)


def _authorize_policy(
    request: PolicySignRequest,
    version: SchemeVersion,
    settings: GatewaySettings,
) -> AuthorizationResult:
    conditions = collect_policy_conditions(request.conditions)
    if not validate_policy(
        conditions,
        expected_bucket=settings.expected_bucket,
        expected_max_size=settings.max_file_size,
    ):
        return Rejected()

    encoded_policy = base64.b64encode(request.policy_text.encode("utf-8")).decode("ascii")

    if version is SchemeVersion.V2:
        return Signed(
            policy=encoded_policy,
            signature=sign_v2(secret=settings.client_secret_key, message=encoded_policy),
        )

    scope = parse_credential(conditions.credential) if conditions.credential else None
    if scope is None:
        logger.info("Rejected V4 policy: missing or malformed x-amz-credential")
        return Rejected()
    signature = sign_v4_with_secret(
        secret=settings.client_secret_key,
        date=scope.date,
        region=scope.region,
        message=encoded_policy,
    )
    return Signed(policy=encoded_policy, signature=signature)


def authorize(
    request: SignRequest | None,
    *,
    version: SchemeVersion,
    settings: GatewaySettings,
) -> AuthorizationResult:
    if request is None:
        logger.info("Rejected signing request: body is not a policy or REST request")
        return Rejected()
    if isinstance(request, RestHeaderSignRequest):
        return _authorize_rest(request, version, settings)
    return _authorize_policy(request, version, settings)
