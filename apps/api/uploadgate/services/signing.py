import base64
import hashlib
import hmac

V4_ALGORITHM = "AWS4-HMAC-SHA256"
V4_KEY_PREFIX = "AWS4"
V4_SERVICE = "s3"
V4_SCOPE_TERMINATOR = "aws4_request"


def sign_v2(*, secret: str, message: str) -> str:
    """Return base64(HMAC-SHA1(secret, message)) for the legacy scheme."""
    digest = hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha1).digest()
    return base64.b64encode(digest).decode("ascii")


def _hmac_sha256(key: bytes, message: str) -> bytes:
    return hmac.new(key, message.encode("utf-8"), hashlib.sha256).digest()


def derive_signing_key(
    *,
    secret: str,
    date: str,
    region: str,
    service: str = V4_SERVICE,
    purpose: str = V4_SCOPE_TERMINATOR,
) -> bytes:
    """Derive the SigV4 signing key scoped to date, region and service."""
    date_key = _hmac_sha256(f"{V4_KEY_PREFIX}{secret}".encode("utf-8"), date)
    date_region_key = _hmac_sha256(date_key, region)
    date_region_service_key = _hmac_sha256(date_region_key, service)
    return _hmac_sha256(date_region_service_key, purpose)


def sign_v4(*, signing_key: bytes, message: str) -> str:
    return hmac.new(signing_key, message.encode("utf-8"), hashlib.sha256).hexdigest()


def sign_v4_with_secret(*, secret: str, date: str, region: str, message: str) -> str:
    signing_key = derive_signing_key(secret=secret, date=date, region=region)
    return sign_v4(signing_key=signing_key, message=message)
