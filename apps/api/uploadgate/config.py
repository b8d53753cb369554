import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv


_ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
load_dotenv(_ENV_PATH, override=False)


class ConfigurationError(ValueError):
    """Raised when the process cannot start with the current environment."""


def _get_env(name: str) -> str | None:
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def get_client_secret_key() -> str | None:
    return _get_env("AWS_CLIENT_SECRET_KEY")


def get_server_public_key() -> str | None:
    return _get_env("AWS_SERVER_PUBLIC_KEY")


def get_server_private_key() -> str | None:
    return _get_env("AWS_SERVER_PRIVATE_KEY")


def get_s3_bucket_name() -> str | None:
    return _get_env("S3_BUCKET_NAME")


def get_s3_host_name() -> str | None:
    """Host expected in V4 REST string-to-sign blocks."""
    return _get_env("S3_HOST_NAME")


def get_s3_max_file_size() -> str | None:
    return _get_env("S3_MAX_FILE_SIZE")


def get_s3_region() -> str:
    return _get_env("S3_REGION") or "us-east-1"


def get_s3_session_token() -> str | None:
    return _get_env("S3_SESSION_TOKEN")


def get_s3_endpoint_url() -> str | None:
    return _get_env("S3_ENDPOINT_URL")


def get_cors_allow_origins() -> list[str]:
    raw = _get_env("CORS_ALLOW_ORIGINS") or "http://localhost:3000"
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def get_log_level() -> str:
    return (_get_env("LOG_LEVEL") or "INFO").upper()


@dataclass(frozen=True)
class GatewaySettings:
    """Process-wide configuration, built once at startup and shared read-only."""

    client_secret_key: str = field(repr=False)
    server_public_key: str
    server_private_key: str = field(repr=False)
    expected_bucket: str
    expected_host: str | None = None
    max_file_size: int | None = None
    region: str = "us-east-1"
    endpoint_url: str | None = None
    session_token: str | None = field(default=None, repr=False)
    cors_allow_origins: tuple[str, ...] = ("http://localhost:3000",)
    log_level: str = "INFO"


def parse_max_file_size(raw: str | None) -> int | None:
    if raw is None:
        return None
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"S3_MAX_FILE_SIZE must be an integer, got {raw!r}") from exc
    if value < 0:
        raise ConfigurationError("S3_MAX_FILE_SIZE must not be negative")
    return value


def load_settings() -> GatewaySettings:
    required = {
        "AWS_CLIENT_SECRET_KEY": get_client_secret_key(),
        "AWS_SERVER_PUBLIC_KEY": get_server_public_key(),
        "AWS_SERVER_PRIVATE_KEY": get_server_private_key(),
        "S3_BUCKET_NAME": get_s3_bucket_name(),
    }
    missing = [name for name, value in required.items() if value is None]
    if missing:
        raise ConfigurationError(f"Missing required configuration: {', '.join(missing)}")

    return GatewaySettings(
        client_secret_key=required["AWS_CLIENT_SECRET_KEY"],
        server_public_key=required["AWS_SERVER_PUBLIC_KEY"],
        server_private_key=required["AWS_SERVER_PRIVATE_KEY"],
        expected_bucket=required["S3_BUCKET_NAME"],
        expected_host=get_s3_host_name(),
        max_file_size=parse_max_file_size(get_s3_max_file_size()),
        region=get_s3_region(),
        endpoint_url=get_s3_endpoint_url(),
        session_token=get_s3_session_token(),
        cors_allow_origins=tuple(get_cors_allow_origins()),
        log_level=get_log_level(),
    )
