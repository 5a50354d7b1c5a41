"""Option and result types for storage operations.

Enumerated fields (ACL, storage class, ...) accept either the enum
member or a plain string. Strings the enums do not list are sent to
the backend unchanged, so provider-specific values keep working.

"""

import datetime
import enum
import typing

import pydantic


class ACL(str, enum.Enum):
    PRIVATE = 'private'
    PUBLIC_READ = 'public-read'
    PUBLIC_READ_WRITE = 'public-read-write'
    AUTHENTICATED_READ = 'authenticated-read'


class ServerSideEncryption(str, enum.Enum):
    AES256 = 'AES256'
    AWS_KMS = 'aws:kms'


class StorageClass(str, enum.Enum):
    STANDARD = 'STANDARD'
    REDUCED_REDUNDANCY = 'REDUCED_REDUNDANCY'
    GLACIER = 'GLACIER'
    STANDARD_IA = 'STANDARD_IA'


class MetadataDirective(str, enum.Enum):
    COPY = 'COPY'
    REPLACE = 'REPLACE'


UploadData = typing.Union[bytes, bytearray, str, typing.BinaryIO]


def _value(value: enum.Enum | str | None) -> str | None:
    if isinstance(value, enum.Enum):
        return str(value.value)
    return value


def request_params(**params: typing.Any) -> dict[str, typing.Any]:
    """Build botocore request parameters, dropping unset values."""
    return {
        name: _value(value)
        for name, value in params.items()
        if value is not None
    }


class BucketConfig(pydantic.BaseModel):
    """Options for creating a bucket."""

    model_config = pydantic.ConfigDict(extra='forbid')

    acl: ACL | str | None = None
    region: str | None = None


class BucketInfo(pydantic.BaseModel):
    """A bucket as reported by the backend."""

    model_config = pydantic.ConfigDict(frozen=True)

    name: str
    creation_date: datetime.datetime | None = None
    region: str | None = None


class UploadObjectOptions(pydantic.BaseModel):
    """Options for uploading an object or starting a multipart upload."""

    model_config = pydantic.ConfigDict(extra='forbid')

    content_type: str | None = None
    metadata: dict[str, str] | None = None
    cache_control: str | None = None
    content_disposition: str | None = None
    content_encoding: str | None = None
    acl: ACL | str | None = None
    server_side_encryption: ServerSideEncryption | str | None = None
    storage_class: StorageClass | str | None = None

    def to_params(self) -> dict[str, typing.Any]:
        return request_params(
            ContentType=self.content_type,
            Metadata=self.metadata,
            CacheControl=self.cache_control,
            ContentDisposition=self.content_disposition,
            ContentEncoding=self.content_encoding,
            ACL=self.acl,
            ServerSideEncryption=self.server_side_encryption,
            StorageClass=self.storage_class,
        )


class GetObjectOptions(pydantic.BaseModel):
    """Range and conditional-request options for downloads.

    The conditions are forwarded to the backend, which decides whether
    the request succeeds.

    """

    model_config = pydantic.ConfigDict(extra='forbid')

    range: str | None = None
    if_modified_since: datetime.datetime | None = None
    if_unmodified_since: datetime.datetime | None = None
    if_match: str | None = None
    if_none_match: str | None = None

    def to_params(self) -> dict[str, typing.Any]:
        return request_params(
            Range=self.range,
            IfModifiedSince=self.if_modified_since,
            IfUnmodifiedSince=self.if_unmodified_since,
            IfMatch=self.if_match,
            IfNoneMatch=self.if_none_match,
        )


class CopyObjectOptions(pydantic.BaseModel):
    """Options for copying an object."""

    model_config = pydantic.ConfigDict(extra='forbid')

    metadata_directive: MetadataDirective | str | None = None
    metadata: dict[str, str] | None = None
    content_type: str | None = None
    acl: ACL | str | None = None
    copy_source_if_modified_since: datetime.datetime | None = None
    copy_source_if_unmodified_since: datetime.datetime | None = None

    def to_params(self) -> dict[str, typing.Any]:
        return request_params(
            MetadataDirective=self.metadata_directive,
            Metadata=self.metadata,
            ContentType=self.content_type,
            ACL=self.acl,
            CopySourceIfModifiedSince=self.copy_source_if_modified_since,
            CopySourceIfUnmodifiedSince=self.copy_source_if_unmodified_since,
        )


class ListObjectsOptions(pydantic.BaseModel):
    """Filtering and pagination options for listing objects."""

    model_config = pydantic.ConfigDict(extra='forbid')

    prefix: str | None = None
    delimiter: str | None = None
    max_keys: int | None = None
    continuation_token: str | None = None
    start_after: str | None = None

    def to_params(self) -> dict[str, typing.Any]:
        return request_params(
            Prefix=self.prefix,
            Delimiter=self.delimiter,
            MaxKeys=self.max_keys,
            ContinuationToken=self.continuation_token,
            StartAfter=self.start_after,
        )


class Owner(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(frozen=True)

    id: str | None = None
    display_name: str | None = None


class ObjectInfo(pydantic.BaseModel):
    """An entry in an object listing."""

    model_config = pydantic.ConfigDict(frozen=True)

    key: str
    last_modified: datetime.datetime | None = None
    etag: str | None = None
    size: int = 0
    storage_class: str | None = None
    owner: Owner | None = None


class ListObjectsResult(pydantic.BaseModel):
    """One page of an object listing."""

    model_config = pydantic.ConfigDict(frozen=True)

    contents: list[ObjectInfo] = pydantic.Field(default_factory=list)
    common_prefixes: list[str] = pydantic.Field(default_factory=list)
    is_truncated: bool = False
    next_continuation_token: str | None = None
    name: str
    prefix: str | None = None
    max_keys: int | None = None
    key_count: int = 0


class ObjectMetadata(pydantic.BaseModel):
    """Object metadata returned by a HEAD request."""

    model_config = pydantic.ConfigDict(frozen=True)

    content_type: str | None = None
    content_length: int = 0
    last_modified: datetime.datetime | None = None
    etag: str = ''
    metadata: dict[str, str] = pydantic.Field(default_factory=dict)
    cache_control: str | None = None
    content_disposition: str | None = None
    content_encoding: str | None = None
    version_id: str | None = None
    storage_class: str | None = None


class UploadResult(pydantic.BaseModel):
    """Result of an upload, copy or completed multipart upload."""

    model_config = pydantic.ConfigDict(frozen=True)

    etag: str | None = None
    version_id: str | None = None
    server_side_encryption: str | None = None
    location: str | None = None


class DownloadResult(pydantic.BaseModel):
    """A fully downloaded object."""

    model_config = pydantic.ConfigDict(frozen=True)

    body: bytes
    content_type: str | None = None
    content_length: int
    etag: str = ''
    last_modified: datetime.datetime | None = None
    metadata: dict[str, str] = pydantic.Field(default_factory=dict)


class MultipartUploadResult(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(frozen=True)

    upload_id: str
    bucket: str
    key: str


class UploadPart(pydantic.BaseModel):
    """A completed part passed to ``complete_multipart_upload``."""

    model_config = pydantic.ConfigDict(frozen=True)

    part_number: int  # 1..10000, enforced by the backend
    etag: str


class UploadPartResult(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(frozen=True)

    part_number: int
    etag: str

    def as_part(self) -> UploadPart:
        return UploadPart(part_number=self.part_number, etag=self.etag)


class MultipartSession(pydantic.BaseModel):
    """Local record of an in-progress multipart upload."""

    model_config = pydantic.ConfigDict(frozen=True)

    upload_id: str
    bucket: str
    key: str
    created_at: datetime.datetime = pydantic.Field(
        default_factory=lambda: datetime.datetime.now(datetime.UTC)
    )
