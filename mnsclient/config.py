"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
mnsclient, a product of Garudex Labs

Client configuration for mnsclient.

The core is configured by constructor injection only: callers build an
MNSConfig value and hand it to the client. Nothing here reads files or
environment variables.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from mnsclient._version import __version__
from mnsclient.exceptions import SDKConfigurationError


ASYNC_MODES = ("deferred", "background")

# Longest server-side wait the service accepts for a long-poll receive.
MAX_WAIT_SECONDS = 30


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry policy for retryable failures.

    The default policy sends every request exactly once. Only transport
    failures (and, when enabled, throttling replies) are ever retried.

    Attributes:
        max_attempts: Total attempts including the first one (default: 1)
        base_delay: Delay in seconds before the first retry (default: 0.1)
        backoff_factor: Multiplier applied to the delay after each retry (default: 2.0)
        max_delay: Upper bound for a single delay in seconds (default: 5.0)
        retry_on_throttle: Retry ThrottledError replies as well (default: False)
    """
    max_attempts: int = 1
    base_delay: float = 0.1
    backoff_factor: float = 2.0
    max_delay: float = 5.0
    retry_on_throttle: bool = False

    def validate(self) -> None:
        if self.max_attempts < 1:
            raise SDKConfigurationError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.base_delay < 0 or self.max_delay < 0:
            raise SDKConfigurationError("retry delays must not be negative")
        if self.backoff_factor < 1:
            raise SDKConfigurationError(f"backoff_factor must be >= 1, got {self.backoff_factor}")

    def delay_for(self, attempt: int) -> float:
        """Delay in seconds before retry number ``attempt`` (1-based)."""
        return min(self.base_delay * (self.backoff_factor ** (attempt - 1)), self.max_delay)


@dataclass(frozen=True)
class ClientOptions:
    """
    Tuning options for the HTTP transport.

    Attributes:
        connect_timeout: Connect timeout in seconds (default: 10)
        read_timeout: Read timeout in seconds; must exceed the longest
            long-poll window (default: 35)
        pool_maxsize: Connections kept per host (default: 20)
        retry: Retry policy (default: no retries)
        async_mode: "deferred" sends async requests on wait(),
            "background" submits them to a thread pool (default: "deferred")
        max_workers: Thread pool size for background mode (default: 4)
        user_agent: Value of the User-Agent header
    """
    connect_timeout: float = 10.0
    read_timeout: float = 35.0
    pool_maxsize: int = 20
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    async_mode: str = "deferred"
    max_workers: int = 4
    user_agent: str = f"mnsclient-python/{__version__}"

    def validate(self) -> None:
        if self.connect_timeout <= 0:
            raise SDKConfigurationError(f"connect_timeout must be positive, got {self.connect_timeout}")
        if self.read_timeout <= MAX_WAIT_SECONDS:
            raise SDKConfigurationError(
                f"read_timeout must exceed the {MAX_WAIT_SECONDS}s long-poll window, "
                f"got {self.read_timeout}"
            )
        if self.pool_maxsize < 1:
            raise SDKConfigurationError(f"pool_maxsize must be at least 1, got {self.pool_maxsize}")
        if self.async_mode not in ASYNC_MODES:
            raise SDKConfigurationError(
                f"async_mode must be one of {ASYNC_MODES}, got {self.async_mode!r}"
            )
        if self.max_workers < 1:
            raise SDKConfigurationError(f"max_workers must be at least 1, got {self.max_workers}")
        self.retry.validate()


@dataclass(frozen=True)
class MNSConfig:
    """
    Endpoint, credentials and tuning for one account.

    Immutable once built. Owned by the transport.
    """
    endpoint: str
    access_id: str
    access_key: str = field(repr=False)
    security_token: Optional[str] = field(default=None, repr=False)
    options: ClientOptions = field(default_factory=ClientOptions)

    def __post_init__(self):
        # Normalise once so every consumer sees the same base URL
        object.__setattr__(self, "endpoint", (self.endpoint or "").strip().rstrip("/"))
        self.validate()

    def validate(self) -> None:
        """
        Validate the configuration.

        Raises:
            SDKConfigurationError: If any value is missing or malformed
        """
        if not self.endpoint:
            raise SDKConfigurationError("endpoint is required")
        parsed = urlparse(self.endpoint)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise SDKConfigurationError(
                f"endpoint must be an http(s) URL, got {self.endpoint!r}"
            )
        if parsed.path not in ("", "/"):
            raise SDKConfigurationError(
                f"endpoint must not contain a path, got {self.endpoint!r}"
            )
        if not self.access_id:
            raise SDKConfigurationError("access_id is required")
        if not self.access_key:
            raise SDKConfigurationError("access_key is required")
        self.options.validate()

    @property
    def host(self) -> str:
        return urlparse(self.endpoint).netloc

    def to_dict(self) -> Dict[str, Any]:
        """Describe the configuration without leaking secrets."""
        return {
            "endpoint": self.endpoint,
            "access_id": self.access_id,
            "access_key": "***",
            "security_token": "***" if self.security_token else None,
            "async_mode": self.options.async_mode,
            "max_attempts": self.options.retry.max_attempts,
        }
