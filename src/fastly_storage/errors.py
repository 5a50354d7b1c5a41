"""Normalized error type raised by every storage operation."""

import enum
import typing

from botocore import exceptions as botocore_exceptions


class ErrorCode(str, enum.Enum):
    """Error codes produced by the client itself.

    Errors reported by the storage backend keep the backend's own code
    (for example ``NoSuchKey`` or ``BucketNotEmpty``).

    """

    INVALID_CONFIG = 'InvalidConfig'
    INVALID_BUCKET_NAME = 'InvalidBucketName'
    INVALID_OBJECT_KEY = 'InvalidObjectKey'
    NOT_FOUND = 'NotFound'
    NO_UPLOAD_ID = 'NoUploadId'
    NO_ETAG = 'NoEtag'
    EMPTY_BODY = 'EmptyBody'
    UPLOAD_NOT_FOUND = 'UploadNotFound'
    CLIENT_CLOSED = 'ClientClosed'
    UNKNOWN_ERROR = 'UnknownError'

    def __str__(self) -> str:
        return self.value


# Transport failures botocore raises without an HTTP response
_NETWORK_ERRORS: tuple[type[Exception], ...] = (
    botocore_exceptions.EndpointConnectionError,
    botocore_exceptions.ConnectTimeoutError,
    botocore_exceptions.ReadTimeoutError,
    botocore_exceptions.ConnectionClosedError,
)

_RETRYABLE_CODES = frozenset(
    {
        'ConnectionClosedError',
        'ConnectTimeoutError',
        'ECONNRESET',
        'ETIMEDOUT',
        'EndpointConnectionError',
        'ReadTimeoutError',
    }
)


class StorageError(Exception):
    """Failure of a storage operation.

    Wraps configuration, validation and backend failures in a single
    shape carrying a stable ``code``, the HTTP ``status_code`` when the
    backend responded, a ``context`` dict (bucket, key, operation, ...)
    and the underlying ``cause``.

    """

    def __init__(
        self,
        message: str,
        code: str,
        *,
        status_code: int | None = None,
        context: dict[str, typing.Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = str(code)
        self.status_code = status_code
        self.context: dict[str, typing.Any] = dict(context or {})
        self.cause = cause

    def __repr__(self) -> str:
        return (
            f'{self.__class__.__name__}({self.message!r}, '
            f'code={self.code!r}, status_code={self.status_code!r})'
        )

    @classmethod
    def from_exception(
        cls,
        err: BaseException,
        **context: typing.Any,
    ) -> 'StorageError':
        """Translate an exception raised while talking to the backend.

        A :class:`StorageError` is returned as-is with ``context``
        merged in, so client-side codes such as ``EmptyBody`` survive
        the translation. Otherwise the new error records ``err`` as its
        ``__cause__``.

        Args:
            err: The exception to translate
            context: Fields describing the failed operation

        Returns:
            The normalized error

        """
        if isinstance(err, StorageError):
            for name, value in context.items():
                err.context.setdefault(name, value)
            return err

        if isinstance(err, botocore_exceptions.ClientError):
            error = err.response.get('Error', {})
            metadata = err.response.get('ResponseMetadata', {})
            status_code = metadata.get('HTTPStatusCode')
            if status_code is None and str(error.get('Code', '')).isdigit():
                status_code = int(error['Code'])
            code = error.get('Code') or ErrorCode.UNKNOWN_ERROR.value
            if status_code == 404:
                code = ErrorCode.NOT_FOUND.value
            if metadata.get('RequestId'):
                context['request_id'] = metadata['RequestId']
            instance = cls(
                error.get('Message') or str(err),
                code,
                status_code=status_code,
                context=context,
                cause=err,
            )
            instance.__cause__ = err
            return instance

        instance = cls(
            str(err) or 'Storage operation failed',
            type(err).__name__ or ErrorCode.UNKNOWN_ERROR.value,
            context=context,
            cause=err,
        )
        instance.__cause__ = err
        return instance

    def is_retryable(self) -> bool:
        """Return True if repeating the operation may succeed.

        Server errors, throttling (429), request timeouts (408) and
        transient network failures are retryable.

        """
        if isinstance(self.cause, _NETWORK_ERRORS):
            return True
        if self.code in _RETRYABLE_CODES:
            return True
        if self.status_code is None:
            return False
        return self.status_code >= 500 or self.status_code in (408, 429)
