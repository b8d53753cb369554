from uploadgate.services.authorizer import (
    PolicySignRequest,
    Rejected,
    RestHeaderSignRequest,
    SchemeVersion,
    Signed,
    authorize,
    decode_sign_request,
)
from uploadgate.services.policy_validator import collect_policy_conditions, normalize_size, validate_policy
from uploadgate.services.rest_validator import is_valid_v2_rest_request, is_valid_v4_rest_request
from uploadgate.services.s3_storage import (
    ObjectStore,
    S3ObjectStore,
    StorageServiceError,
    create_s3_client,
    delete_object,
    generate_presigned_get_url,
    get_object_size,
)
from uploadgate.services.signing import derive_signing_key, sign_v2, sign_v4, sign_v4_with_secret
from uploadgate.services.string_to_sign import parse_credential, parse_rest_string_to_sign, parse_scope_line
from uploadgate.services.upload_verifier import (
    UploadTooLarge,
    UploadVerified,
    is_viewable_image,
    should_include_thumbnail,
    verify_uploaded_object,
)

__all__ = [
    "authorize",
    "decode_sign_request",
    "PolicySignRequest",
    "RestHeaderSignRequest",
    "SchemeVersion",
    "Signed",
    "Rejected",
    "collect_policy_conditions",
    "normalize_size",
    "validate_policy",
    "is_valid_v2_rest_request",
    "is_valid_v4_rest_request",
    "ObjectStore",
    "S3ObjectStore",
    "StorageServiceError",
    "create_s3_client",
    "delete_object",
    "get_object_size",
    "generate_presigned_get_url",
    "sign_v2",
    "sign_v4",
    "sign_v4_with_secret",
    "derive_signing_key",
    "parse_credential",
    "parse_scope_line",
    "parse_rest_string_to_sign",
    "verify_uploaded_object",
    "should_include_thumbnail",
    "is_viewable_image",
    "UploadVerified",
    "UploadTooLarge",
]
