"""Pydantic configuration models for aiopreq."""

from datetime import timedelta
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field

from ..errors import ConfigurationError
from .request import AUTO_ENCODING

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; aiopreq/1.0)"


class Duration(float):
    """
    Custom type that parses human-readable durations into seconds.

    Accepts:
        - Integers and floats (seconds)
        - datetime.timedelta
        - Strings like '250ms', '2s', '1.5m', '1h'

    Examples:
        >>> Duration._parse('250ms')
        0.25
        >>> Duration._parse('2m')
        120.0
        >>> Duration._parse(5)
        5.0
    """

    @classmethod
    def __get_pydantic_core_schema__(cls, source: Any, handler: Any) -> Any:
        from pydantic_core import core_schema

        return core_schema.no_info_plain_validator_function(cls._parse)

    @classmethod
    def _parse(cls, v: Any) -> float:
        seconds: Optional[float] = None
        if isinstance(v, bool):
            seconds = None
        elif isinstance(v, (int, float)):
            seconds = float(v)
        elif isinstance(v, timedelta):
            seconds = v.total_seconds()
        elif isinstance(v, str):
            v = v.lower().strip()
            # Order matters: "ms" must be checked before "s" and "m"
            units = [("ms", 0.001), ("s", 1.0), ("m", 60.0), ("h", 3600.0)]
            for unit, mult in units:
                if v.endswith(unit):
                    num_str = v[: -len(unit)].strip()
                    try:
                        seconds = float(num_str) * mult
                    except ValueError as err:
                        raise ValueError(f"Invalid number in duration: {v}") from err
                    break
            else:
                try:
                    seconds = float(v)
                except ValueError:
                    seconds = None
        if seconds is None:
            raise ValueError(f"Invalid duration: {v!r}. Use seconds, a timedelta, or a string like '250ms', '2s'.")
        if seconds <= 0:
            raise ValueError(f"Duration must be positive, got {v!r}")
        return seconds


class RequestOptions(BaseModel):
    """
    Options for a single request call.

    Keys accept both snake_case and the camelCase spelling used by
    JavaScript request libraries, e.g. ``connect_timeout`` or
    ``connectTimeout``. ``url`` is accepted as an alias of ``uri``.

    Unset knobs fall back to the client's ClientConfig.
    """

    uri: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("uri", "url"),
        description="Target URI",
    )
    method: str = Field("GET", min_length=1, description="HTTP method")
    query: Optional[dict[str, Any]] = Field(None, description="Query parameters, serialized in order")
    headers: dict[str, Any] = Field(default_factory=dict, description="Request headers")
    body: Optional[Any] = Field(None, description="Request body: bytes, str, or JSON-serializable value")
    retries: Optional[int] = Field(None, ge=0, description="Retry budget after a transport failure")
    timeout: Optional[Duration] = Field(None, description="Total request timeout")
    connect_timeout: Optional[Duration] = Field(
        None,
        validation_alias=AliasChoices("connect_timeout", "connectTimeout"),
        description="Connect-phase timeout",
    )
    encoding: Optional[str] = Field(
        AUTO_ENCODING,
        description="None for raw bytes, 'auto' for response charset, or a codec name",
    )
    gzip: Optional[bool] = Field(None, description="Request compressed transfer")
    follow_redirects: Optional[bool] = Field(
        None,
        validation_alias=AliasChoices("follow_redirects", "followRedirects"),
        description="Follow 3xx responses",
    )
    max_redirects: Optional[int] = Field(
        None,
        ge=0,
        validation_alias=AliasChoices("max_redirects", "maxRedirects"),
        description="Maximum redirect hops",
    )

    model_config = {"extra": "forbid", "populate_by_name": True}


class ClientConfig(BaseModel):
    """
    Immutable default configuration shared by every request of a client.

    Example:
        config = ClientConfig(retries=3, timeout="30s")
        async with ResilientHttpClient(config) as client:
            response = await client.get("https://example.com")

    YAML format:
        retries: 3
        timeout: 30s
        connect_timeout: 2s
        headers:
          Accept: text/html
    """

    retries: int = Field(0, ge=0, description="Default retry budget after a transport failure")
    retry_base_delay: float = Field(0.125, gt=0, description="Delay before the first retry (seconds)")
    retry_backoff_factor: float = Field(2.0, ge=1, description="Multiplier applied to each later delay")
    retry_max_delay: float = Field(30.0, gt=0, description="Upper bound for a single delay (seconds)")
    retry_jitter: float = Field(
        0.0,
        ge=0,
        lt=1,
        description="Random proportional jitter added to each delay (0 disables)",
    )
    timeout: Optional[Duration] = Field(None, description="Default total request timeout")
    connect_timeout: Optional[Duration] = Field(None, description="Default connect-phase timeout")
    gzip: bool = Field(False, description="Request compressed transfer by default")
    follow_redirects: bool = Field(True, description="Follow 3xx responses by default")
    max_redirects: int = Field(10, ge=0, description="Maximum redirect hops")
    user_agent: Optional[str] = Field(None, description="Custom User-Agent header")
    headers: dict[str, str] = Field(default_factory=dict, description="Headers sent with every request")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "WARNING",
        description="Logging level",
    )

    model_config = {"extra": "forbid", "frozen": True}

    @property
    def effective_user_agent(self) -> str:
        return self.user_agent or DEFAULT_USER_AGENT

    def to_yaml(self) -> str:
        """Serialize config to YAML string."""
        import yaml

        return yaml.dump(self.model_dump(mode="json", exclude_none=True), default_flow_style=False)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "ClientConfig":
        """
        Load config from YAML string.

        Raises:
            ConfigurationError: If PyYAML is missing or the document is not valid YAML
            pydantic.ValidationError: If the values do not fit the model
        """
        try:
            import yaml
        except ImportError as err:
            raise ConfigurationError("YAML config requires PyYAML: pip install 'aiopreq[yaml]'") from err

        try:
            data = yaml.safe_load(yaml_str) or {}
        except yaml.YAMLError as err:
            raise ConfigurationError(f"Invalid YAML config: {err}") from err
        return cls.model_validate(data)

    @classmethod
    def from_yaml_file(cls, path: Path) -> "ClientConfig":
        """Load config from YAML file."""
        return cls.from_yaml(path.read_text())


DEFAULT_CONFIG = ClientConfig()
