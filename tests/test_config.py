"""Tests for configuration models."""

import sys
from datetime import timedelta
from unittest.mock import patch

import pytest
from aiopreq import ClientConfig, ConfigurationError, RequestError, RequestOptions
from aiopreq.models.config import DEFAULT_USER_AGENT, Duration
from pydantic import BaseModel, ValidationError


class DurationModel(BaseModel):
    value: Duration


class TestDuration:
    """Tests for Duration parsing."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (5, 5.0),
            (0.5, 0.5),
            ("250ms", 0.25),
            ("2s", 2.0),
            ("1.5m", 90.0),
            ("1h", 3600.0),
            (" 3S ", 3.0),
            ("10", 10.0),
            (timedelta(milliseconds=1500), 1.5),
        ],
    )
    def test_valid(self, raw, expected):
        """Test accepted spellings."""
        assert DurationModel(value=raw).value == pytest.approx(expected)

    @pytest.mark.parametrize("raw", [0, -1, "soon", "xs", True, None, "0ms"])
    def test_invalid(self, raw):
        """Test that non-positive or unparseable values are rejected."""
        with pytest.raises(ValidationError):
            DurationModel(value=raw)


class TestClientConfig:
    """Tests for ClientConfig."""

    def test_defaults(self):
        """Test default values."""
        config = ClientConfig()
        assert config.retries == 0
        assert config.retry_base_delay == 0.125
        assert config.retry_backoff_factor == 2.0
        assert config.timeout is None
        assert config.gzip is False
        assert config.follow_redirects is True
        assert config.effective_user_agent == DEFAULT_USER_AGENT

    def test_frozen(self):
        """Test that config cannot change after construction."""
        config = ClientConfig()
        with pytest.raises(ValidationError):
            config.retries = 5

    def test_extra_forbidden(self):
        """Test that unknown keys are rejected."""
        with pytest.raises(ValidationError):
            ClientConfig(retry=3)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"retries": -1},
            {"retry_jitter": 1.0},
            {"retry_backoff_factor": 0.5},
            {"retry_base_delay": 0},
            {"log_level": "TRACE"},
        ],
    )
    def test_invalid_values(self, kwargs):
        """Test that out-of-range values are rejected."""
        with pytest.raises(ValidationError):
            ClientConfig(**kwargs)

    def test_custom_user_agent(self):
        """Test that a custom User-Agent replaces the default."""
        assert ClientConfig(user_agent="bot/1.0").effective_user_agent == "bot/1.0"

    def test_yaml_round_trip(self):
        """Test YAML serialization."""
        pytest.importorskip("yaml")
        config = ClientConfig(retries=3, timeout="30s", headers={"Accept": "text/html"})
        loaded = ClientConfig.from_yaml(config.to_yaml())
        assert loaded == config

    def test_from_yaml_file(self, tmp_path):
        """Test loading config from a file."""
        pytest.importorskip("yaml")
        path = tmp_path / "aiopreq.yaml"
        path.write_text("retries: 2\nconnect_timeout: 500ms\ngzip: true\n")

        config = ClientConfig.from_yaml_file(path)

        assert config.retries == 2
        assert config.connect_timeout == 0.5
        assert config.gzip is True

    def test_empty_yaml(self):
        """Test that an empty document gives the defaults."""
        pytest.importorskip("yaml")
        assert ClientConfig.from_yaml("") == ClientConfig()

    def test_malformed_yaml(self):
        """Test that a YAML syntax error is a ConfigurationError."""
        pytest.importorskip("yaml")
        with pytest.raises(ConfigurationError, match="Invalid YAML config"):
            ClientConfig.from_yaml("retries: [1,\n")

    def test_yaml_without_pyyaml(self):
        """Test that a missing PyYAML install is reported as a ConfigurationError."""
        with patch.dict(sys.modules, {"yaml": None}):
            with pytest.raises(ConfigurationError, match="PyYAML"):
                ClientConfig.from_yaml("retries: 1\n")


class TestRequestOptions:
    """Tests for RequestOptions."""

    def test_aliases(self):
        """Test camelCase and url aliases."""
        options = RequestOptions.model_validate(
            {"url": "https://example.com/", "connectTimeout": "1ms", "followRedirects": False, "maxRedirects": 2}
        )
        assert options.uri == "https://example.com/"
        assert options.connect_timeout == 0.001
        assert options.follow_redirects is False
        assert options.max_redirects == 2

    def test_field_names(self):
        """Test snake_case field names."""
        options = RequestOptions(uri="https://example.com/", connect_timeout=2)
        assert options.connect_timeout == 2.0

    def test_defaults(self):
        """Test defaults that defer to the client config."""
        options = RequestOptions()
        assert options.method == "GET"
        assert options.encoding == "auto"
        assert options.retries is None
        assert options.gzip is None

    def test_unknown_key(self):
        """Test that unknown keys are rejected."""
        with pytest.raises(ValidationError):
            RequestOptions(retry=1)


class TestRequestError:
    """Tests for RequestError."""

    def test_str(self):
        """Test the string form."""
        error = RequestError(504, "Connection failed")
        assert str(error) == "504: Connection failed"
        assert error.cause is None

    def test_to_dict(self):
        """Test the problem-style dictionary."""
        error = RequestError(504, "timed out", uri="https://example.com/", method="GET")
        assert error.to_dict() == {
            "type": "internal_http_error",
            "status": 504,
            "description": "timed out",
            "uri": "https://example.com/",
            "method": "GET",
        }
