from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace

from pydantic import Field, NonNegativeFloat, NonNegativeInt, PositiveInt, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import Headers
from .retry import DEFAULT_RETRY_STATUS_CODES


class LoggingConfig(BaseSettings):
    LOG_LEVEL: str = Field(
        description="Log level for the fetch_client logger.",
        default="INFO",
    )

    LOG_FORMAT: str = Field(
        description="Log record format.",
        default="%(asctime)s.%(msecs)03d %(levelname)s [%(threadName)s] [%(filename)s:%(lineno)d] %(trace_id)s - %(message)s",
    )

    LOG_DATEFORMAT: str | None = Field(
        description="Log date format.",
        default=None,
    )

    LOG_FILE: str | None = Field(
        description="Optional log file path, rotated by size.",
        default=None,
    )

    LOG_FILE_MAX_SIZE: PositiveInt = Field(
        description="Maximum size of the log file in MB before rotation.",
        default=20,
    )

    LOG_FILE_BACKUP_COUNT: NonNegativeInt = Field(
        description="Number of rotated log files to keep.",
        default=5,
    )

    LOG_TZ: str | None = Field(
        description="Timezone used for log timestamps, e.g. Asia/Shanghai.",
        default=None,
    )


class FetchSettings(LoggingConfig):
    FETCH_TIMEOUT: NonNegativeFloat = Field(
        description="Total request timeout in seconds.",
        default=15.0,
    )

    FETCH_CONNECT_TIMEOUT: NonNegativeFloat = Field(
        description="Connect timeout in seconds.",
        default=60.0,
    )

    FETCH_MAX_REDIRECTS: NonNegativeInt = Field(
        description="Maximum number of redirects to follow.",
        default=5,
    )

    FETCH_ALLOW_REDIRECTS: bool = Field(
        description="Follow redirects.",
        default=True,
    )

    FETCH_USER_AGENT: str = Field(
        description="User-Agent header sent with every request; empty to omit.",
        default="",
    )

    FETCH_MAX_RETRIES: NonNegativeInt = Field(
        description="Maximum number of attempts for a retryable status; 0 disables retries.",
        default=0,
    )

    FETCH_RETRY_DELAY: NonNegativeInt = Field(
        description="Delay between attempts in milliseconds.",
        default=1000,
    )

    FETCH_RETRY_STATUS_CODES: str = Field(
        description="Comma-separated list of status codes that trigger a retry.",
        default="500,503",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("FETCH_RETRY_STATUS_CODES")
    @classmethod
    def _check_status_codes(cls, value: str) -> str:
        for code in value.split(","):
            if code.strip() and not code.strip().isdigit():
                raise ValueError(f"invalid status code: {code!r}")
        return value

    @property
    def retry_status_codes(self) -> frozenset[int]:
        return frozenset(int(code) for code in self.FETCH_RETRY_STATUS_CODES.split(",") if code.strip())


@dataclass(frozen=True)
class ClientConfig:
    headers: tuple[tuple[str, str], ...] = ()
    timeout: float = 15.0
    connect_timeout: float = 60.0
    max_redirects: int = 5
    allow_redirects: bool = True
    user_agent: str = ""
    max_retries: int = 0
    retry_delay: int = 1000  # milliseconds
    retry_status_codes: frozenset[int] = field(default=DEFAULT_RETRY_STATUS_CODES)

    @classmethod
    def from_settings(cls, settings: FetchSettings | None = None) -> "ClientConfig":
        settings = settings or FetchSettings()
        return cls(
            timeout=settings.FETCH_TIMEOUT,
            connect_timeout=settings.FETCH_CONNECT_TIMEOUT,
            max_redirects=settings.FETCH_MAX_REDIRECTS,
            allow_redirects=settings.FETCH_ALLOW_REDIRECTS,
            user_agent=settings.FETCH_USER_AGENT,
            max_retries=settings.FETCH_MAX_RETRIES,
            retry_delay=settings.FETCH_RETRY_DELAY,
            retry_status_codes=settings.retry_status_codes,
        )

    @classmethod
    def builder(cls) -> "ClientConfigBuilder":
        return ClientConfigBuilder()

    def with_header(self, key: str, value: str) -> "ClientConfig":
        headers = Headers(self.headers)
        headers[key] = value
        return replace(self, headers=tuple(headers.items()))

    def with_options(self, **changes) -> "ClientConfig":
        if "retry_status_codes" in changes:
            changes["retry_status_codes"] = frozenset(changes["retry_status_codes"])
        return replace(self, **changes)


class ClientConfigBuilder:
    def __init__(self, base: ClientConfig | None = None):
        self._config = base or ClientConfig()

    def header(self, key: str, value: str) -> "ClientConfigBuilder":
        self._config = self._config.with_header(key, value)
        return self

    def headers(self, headers: Mapping[str, str] | Iterable[tuple[str, str]]) -> "ClientConfigBuilder":
        for key, value in Headers(headers).items():
            self.header(key, value)
        return self

    def timeout(self, timeout: float) -> "ClientConfigBuilder":
        self._config = self._config.with_options(timeout=timeout)
        return self

    def connect_timeout(self, timeout: float) -> "ClientConfigBuilder":
        self._config = self._config.with_options(connect_timeout=timeout)
        return self

    def max_redirects(self, max_redirects: int) -> "ClientConfigBuilder":
        self._config = self._config.with_options(max_redirects=max_redirects)
        return self

    def allow_redirects(self, allow: bool) -> "ClientConfigBuilder":
        self._config = self._config.with_options(allow_redirects=allow)
        return self

    def user_agent(self, user_agent: str) -> "ClientConfigBuilder":
        self._config = self._config.with_options(user_agent=user_agent)
        return self

    def max_retries(self, max_retries: int) -> "ClientConfigBuilder":
        self._config = self._config.with_options(max_retries=max_retries)
        return self

    def retry_delay(self, delay_ms: int) -> "ClientConfigBuilder":
        self._config = self._config.with_options(retry_delay=delay_ms)
        return self

    def retry_status_codes(self, codes: Iterable[int]) -> "ClientConfigBuilder":
        self._config = self._config.with_options(retry_status_codes=codes)
        return self

    def build(self) -> ClientConfig:
        return self._config
