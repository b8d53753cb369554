import logging

from uploadgate.services.signing import V4_ALGORITHM
from uploadgate.services.string_to_sign import parse_rest_string_to_sign

logger = logging.getLogger(__name__)


def _canonicalized_resource(headers: str) -> str:
    lines = headers.rstrip("\n").split("\n")
    return lines[-1]


def is_valid_v2_rest_request(headers: str, *, expected_bucket: str) -> bool:
    """The V2 string-to-sign ends with the resource, ``/<bucket>/<key>...``."""
    prefix = f"/{expected_bucket}/"
    resource = _canonicalized_resource(headers)
    if resource.startswith(prefix) and len(resource) > len(prefix):
        return True
    logger.info("Rejected V2 REST request: resource is outside bucket %r", expected_bucket)
    return False


def is_valid_v4_rest_request(headers: str, *, expected_host: str | None) -> bool:
    """The canonical request part of a V4 block must carry ``host:<expected_host>``."""
    if not expected_host:
        logger.info("Rejected V4 REST request: no expected host is configured")
        return False
    parsed = parse_rest_string_to_sign(headers)
    if parsed is None or parsed.algorithm != V4_ALGORITHM:
        logger.info("Rejected V4 REST request: malformed string-to-sign")
        return False
    expected_line = f"host:{expected_host}"
    if any(line.rstrip("\r") == expected_line for line in parsed.canonical_request.split("\n")):
        return True
    logger.info("Rejected V4 REST request: host line does not match %r", expected_host)
    return False
