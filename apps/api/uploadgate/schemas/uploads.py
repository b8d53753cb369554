from pydantic import BaseModel, ConfigDict, Field


class SignatureResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    policy: str | None = None
    signature: str


class InvalidSignatureResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    invalid: bool = True


class UploadSuccessRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    bucket: str = Field(min_length=1)
    key: str = Field(min_length=1)
    name: str = ""
    is_browser_preview_capable: bool = Field(default=False, alias="isBrowserPreviewCapable")


class UploadSuccessResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    temp_link: str = Field(alias="tempLink")
    thumbnail_url: str | None = Field(default=None, alias="thumbnailUrl")


class UploadErrorResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    error: str
    prevent_retry: bool = Field(default=True, alias="preventRetry")
