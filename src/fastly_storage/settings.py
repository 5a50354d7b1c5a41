"""Connection settings for Fastly Object Storage.

Values are resolved in order: explicit keyword arguments, then
``FASTLY_*`` environment variables (or a ``.env`` file), then the
defaults declared here.

"""

import pydantic
import pydantic_settings


class RetryPolicy(pydantic.BaseModel):
    """Backoff parameters for callers that retry failed operations.

    The client does not retry on its own beyond the attempts performed
    by botocore; this policy is carried in the configuration so callers
    driving their own retries with
    :meth:`~fastly_storage.errors.StorageError.is_retryable` share the
    same numbers.

    """

    model_config = pydantic.ConfigDict(frozen=True)

    max_retries: int = 3
    retry_delay: int = 1000  # milliseconds
    retry_delay_multiplier: float = 2.0
    max_retry_delay: int | None = None  # milliseconds

    def delay_for(self, attempt: int) -> float:
        """Return the delay in seconds before the given retry attempt.

        Args:
            attempt: 1-based retry attempt number

        Returns:
            Delay in seconds

        """
        delay = self.retry_delay * (
            self.retry_delay_multiplier ** max(attempt - 1, 0)
        )
        if self.max_retry_delay is not None:
            delay = min(delay, self.max_retry_delay)
        return delay / 1000


class Storage(pydantic_settings.BaseSettings):
    """Fastly Object Storage connection settings."""

    model_config = pydantic_settings.SettingsConfigDict(
        env_prefix='FASTLY_',
        case_sensitive=False,
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
        frozen=True,
    )

    endpoint: str = ''
    access_key_id: str = ''
    secret_access_key: str = ''
    region: str = 'us-east-1'
    max_retries: int = 3
    timeout: int = 30000  # milliseconds
    force_path_style: bool = True
    debug: bool = False
    multipart_session_ttl: pydantic.PositiveInt | None = None  # seconds
    retry_policy: RetryPolicy = pydantic.Field(default_factory=RetryPolicy)

    @property
    def timeout_seconds(self) -> float:
        return self.timeout / 1000
