from __future__ import annotations

import logging
from typing import Protocol

import boto3
from botocore.client import BaseClient
from botocore.exceptions import BotoCoreError, ClientError

from uploadgate.config import GatewaySettings

logger = logging.getLogger(__name__)

TEMP_LINK_TTL_SECONDS = 900


class StorageServiceError(RuntimeError):
    """A storage backend call (delete, head or presign) failed."""


class ObjectStore(Protocol):
    def delete(self, bucket: str, key: str) -> None: ...

    def head_size(self, bucket: str, key: str) -> int: ...

    def presign(self, bucket: str, key: str, ttl: int) -> str: ...


def create_s3_client(settings: GatewaySettings) -> BaseClient:
    endpoint_url = settings.endpoint_url or f"https://s3.{settings.region}.amazonaws.com"
    return boto3.client(
        "s3",
        region_name=settings.region,
        aws_access_key_id=settings.server_public_key,
        aws_secret_access_key=settings.server_private_key,
        aws_session_token=settings.session_token,
        endpoint_url=endpoint_url,
    )


def delete_object(*, client: BaseClient, bucket: str, key: str) -> None:
    client.delete_object(Bucket=bucket, Key=key)


def get_object_size(*, client: BaseClient, bucket: str, key: str) -> int:
    response = client.head_object(Bucket=bucket, Key=key)
    return int(response["ContentLength"])


def generate_presigned_get_url(
    *,
    client: BaseClient,
    bucket: str,
    key: str,
    expires_in: int = TEMP_LINK_TTL_SECONDS,
) -> str:
    return client.generate_presigned_url(
        "get_object",
        Params={
            "Bucket": bucket,
            "Key": key,
        },
        ExpiresIn=expires_in,
        HttpMethod="GET",
    )


class S3ObjectStore:
    """ObjectStore backed by a boto3 S3 client.

    Backend failures surface as StorageServiceError so callers can tell them
    apart from validation outcomes.
    """

    def __init__(self, client: BaseClient) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, settings: GatewaySettings) -> S3ObjectStore:
        return cls(create_s3_client(settings))

    def delete(self, bucket: str, key: str) -> None:
        try:
            delete_object(client=self._client, bucket=bucket, key=key)
        except (BotoCoreError, ClientError) as exc:
            raise StorageServiceError(f"Failed to delete s3://{bucket}/{key}: {exc}") from exc
        logger.info("Deleted s3://%s/%s", bucket, key)

    def head_size(self, bucket: str, key: str) -> int:
        try:
            return get_object_size(client=self._client, bucket=bucket, key=key)
        except (BotoCoreError, ClientError, KeyError, ValueError) as exc:
            raise StorageServiceError(f"Failed to read size of s3://{bucket}/{key}: {exc}") from exc

    def presign(self, bucket: str, key: str, ttl: int) -> str:
        try:
            return generate_presigned_get_url(client=self._client, bucket=bucket, key=key, expires_in=ttl)
        except (BotoCoreError, ClientError) as exc:
            raise StorageServiceError(f"Failed to presign s3://{bucket}/{key}: {exc}") from exc
