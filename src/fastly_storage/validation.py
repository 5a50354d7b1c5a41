"""Validation of configuration and caller-supplied identifiers.

All checks run locally and raise :class:`~fastly_storage.errors.StorageError`
before any request is sent to the backend.

"""

import re

import yarl

from fastly_storage import errors, settings

MIN_BUCKET_NAME_LENGTH = 3
MAX_BUCKET_NAME_LENGTH = 63
MAX_OBJECT_KEY_LENGTH = 1024

_BUCKET_NAME_PATTERN = re.compile(r'^[a-z0-9][a-z0-9.-]*[a-z0-9]$')


def validate_config(config: settings.Storage) -> None:
    """Ensure the resolved configuration can build a working client.

    Args:
        config: Resolved storage settings

    Raises:
        StorageError: ``InvalidConfig`` naming the offending field.

    """
    required = (
        ('endpoint', 'Endpoint', 'FASTLY_ENDPOINT'),
        ('access_key_id', 'Access Key ID', 'FASTLY_ACCESS_KEY_ID'),
        (
            'secret_access_key',
            'Secret Access Key',
            'FASTLY_SECRET_ACCESS_KEY',
        ),
    )
    for field, label, env_var in required:
        if not getattr(config, field):
            raise errors.StorageError(
                f'{label} is required. Set the {env_var} environment '
                f'variable or provide it in the configuration.',
                errors.ErrorCode.INVALID_CONFIG,
                context={'field': field},
            )

    if not _is_valid_url(config.endpoint):
        raise errors.StorageError(
            'Invalid endpoint URL',
            errors.ErrorCode.INVALID_CONFIG,
            context={'field': 'endpoint', 'value': config.endpoint},
        )

    if config.max_retries < 0:
        raise errors.StorageError(
            'max_retries must be non-negative',
            errors.ErrorCode.INVALID_CONFIG,
            context={'field': 'max_retries', 'value': config.max_retries},
        )

    if config.timeout <= 0:
        raise errors.StorageError(
            'timeout must be positive',
            errors.ErrorCode.INVALID_CONFIG,
            context={'field': 'timeout', 'value': config.timeout},
        )


def validate_bucket_name(name: str) -> None:
    """Check a bucket name against the S3 naming rules.

    Args:
        name: Bucket name

    Raises:
        StorageError: ``InvalidBucketName`` if the name is malformed.

    """
    if not name:
        raise errors.StorageError(
            'Bucket name is required',
            errors.ErrorCode.INVALID_BUCKET_NAME,
        )

    if not MIN_BUCKET_NAME_LENGTH <= len(name) <= MAX_BUCKET_NAME_LENGTH:
        raise errors.StorageError(
            f'Bucket name must be between {MIN_BUCKET_NAME_LENGTH} and '
            f'{MAX_BUCKET_NAME_LENGTH} characters',
            errors.ErrorCode.INVALID_BUCKET_NAME,
            context={'name': name},
        )

    if not _BUCKET_NAME_PATTERN.match(name):
        raise errors.StorageError(
            'Bucket name must start and end with a letter or number, and '
            'contain only lowercase letters, numbers, dots, and hyphens',
            errors.ErrorCode.INVALID_BUCKET_NAME,
            context={'name': name},
        )

    if '..' in name:
        raise errors.StorageError(
            'Bucket name cannot contain consecutive dots',
            errors.ErrorCode.INVALID_BUCKET_NAME,
            context={'name': name},
        )


def validate_object_key(key: str) -> None:
    """Check that an object key is present and not too long.

    Args:
        key: Object key

    Raises:
        StorageError: ``InvalidObjectKey`` if the key is unusable.

    """
    if not key:
        raise errors.StorageError(
            'Object key is required',
            errors.ErrorCode.INVALID_OBJECT_KEY,
        )

    if len(key) > MAX_OBJECT_KEY_LENGTH:
        raise errors.StorageError(
            f'Object key must not exceed {MAX_OBJECT_KEY_LENGTH} characters',
            errors.ErrorCode.INVALID_OBJECT_KEY,
            context={'key': key, 'length': len(key)},
        )


def _is_valid_url(value: str) -> bool:
    """Return True for an absolute URL with a scheme and host."""
    try:
        url = yarl.URL(value)
    except (TypeError, ValueError):
        return False
    return url.absolute and bool(url.scheme) and bool(url.host)
