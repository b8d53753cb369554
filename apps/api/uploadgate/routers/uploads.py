import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from uploadgate.config import GatewaySettings
from uploadgate.schemas.uploads import (
    InvalidSignatureResponse,
    SignatureResponse,
    UploadErrorResponse,
    UploadSuccessRequest,
    UploadSuccessResponse,
)
from uploadgate.services.authorizer import SchemeVersion, Signed, authorize, decode_sign_request
from uploadgate.services.s3_storage import ObjectStore, StorageServiceError
from uploadgate.services.upload_verifier import (
    UploadTooLarge,
    should_include_thumbnail,
    verify_uploaded_object,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/s3", tags=["uploads"])


def get_settings(request: Request) -> GatewaySettings:
    return request.app.state.settings


def get_object_store(request: Request) -> ObjectStore:
    return request.app.state.object_store


def _reject_unexpected_bucket(bucket: str, settings: GatewaySettings) -> JSONResponse | None:
    if bucket == settings.expected_bucket:
        return None
    logger.info("Refused operation on unexpected bucket %r", bucket)
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content=UploadErrorResponse(error="Unexpected bucket").model_dump(by_alias=True),
    )


@router.post(
    "/signature",
    response_model=SignatureResponse | InvalidSignatureResponse,
    response_model_exclude_none=True,
)
async def sign_upload_request(
    request: Request,
    v4: str | None = Query(default=None),
    settings: GatewaySettings = Depends(get_settings),
) -> SignatureResponse | InvalidSignatureResponse:
    # Rejections stay on 200 so cross-origin uploaders can read the body.
    body = await request.body()
    result = authorize(
        decode_sign_request(body),
        version=SchemeVersion.from_v4_flag(v4),
        settings=settings,
    )
    if isinstance(result, Signed):
        return SignatureResponse(policy=result.policy, signature=result.signature)
    return InvalidSignatureResponse()


@router.post("/success", response_model=UploadSuccessResponse, response_model_exclude_none=True)
def confirm_upload(
    payload: UploadSuccessRequest,
    settings: GatewaySettings = Depends(get_settings),
    store: ObjectStore = Depends(get_object_store),
) -> UploadSuccessResponse | JSONResponse:
    rejection = _reject_unexpected_bucket(payload.bucket, settings)
    if rejection is not None:
        return rejection

    try:
        result = verify_uploaded_object(
            store=store,
            bucket=payload.bucket,
            key=payload.key,
            max_size=settings.max_file_size,
            include_thumbnail=should_include_thumbnail(
                filename=payload.name,
                is_browser_preview_capable=payload.is_browser_preview_capable,
            ),
        )
    except StorageServiceError as exc:
        logger.exception("Upload verification failed for s3://%s/%s", payload.bucket, payload.key)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to verify uploaded object: {exc}",
        ) from exc

    if isinstance(result, UploadTooLarge):
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=UploadErrorResponse(error="File is too big!").model_dump(by_alias=True),
        )
    return UploadSuccessResponse(temp_link=result.temp_link, thumbnail_url=result.thumbnail_url)


def _delete_uploaded_object(bucket: str, key: str, settings: GatewaySettings, store: ObjectStore) -> Response:
    rejection = _reject_unexpected_bucket(bucket, settings)
    if rejection is not None:
        return rejection
    try:
        store.delete(bucket, key)
    except StorageServiceError as exc:
        logger.exception("Delete failed for s3://%s/%s", bucket, key)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to delete object: {exc}",
        ) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/files", status_code=status.HTTP_204_NO_CONTENT)
def delete_file(
    bucket: str = Query(min_length=1),
    key: str = Query(min_length=1),
    settings: GatewaySettings = Depends(get_settings),
    store: ObjectStore = Depends(get_object_store),
) -> Response:
    return _delete_uploaded_object(bucket, key, settings, store)


_FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def _read_request_fields(request: Request) -> dict[str, str]:
    """Merge query parameters with form or JSON body fields; body fields win."""
    fields = dict(request.query_params)
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(_FORM_CONTENT_TYPES):
        form = await request.form()
        fields.update({name: value for name, value in form.items() if isinstance(value, str)})
    elif content_type.startswith("application/json"):
        try:
            document = await request.json()
        except (ValueError, RecursionError) as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Request body is not valid JSON",
            ) from exc
        if isinstance(document, dict):
            fields.update({name: value for name, value in document.items() if isinstance(value, str)})
    return fields


@router.post("/files", status_code=status.HTTP_204_NO_CONTENT)
async def delete_file_with_method_override(
    request: Request,
    settings: GatewaySettings = Depends(get_settings),
    store: ObjectStore = Depends(get_object_store),
) -> Response:
    # Old browsers cannot send a cross-origin DELETE, so they POST with _method,
    # either in the query string or in the form body.
    fields = await _read_request_fields(request)
    if fields.get("_method", "").upper() != "DELETE":
        raise HTTPException(
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
            detail="Only _method=DELETE is supported on POST /s3/files",
        )
    bucket = fields.get("bucket", "")
    key = fields.get("key", "")
    if not bucket or not key:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="bucket and key are required",
        )
    return await run_in_threadpool(_delete_uploaded_object, bucket, key, settings, store)
