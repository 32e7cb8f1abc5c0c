"""Tests for the command-line interface."""

from unittest.mock import patch

import pytest
from aiopreq import ConfigurationError
from aiopreq.cli import (
    EXIT_CONFIG_ERROR,
    EXIT_OK,
    EXIT_REQUEST_ERROR,
    build_config,
    build_options,
    create_parser,
    main,
    parse_headers,
    parse_query,
    run_request,
)
from aiopreq.models import ConnectionFailure
from fakes import MAIN_PAGE, MOCK_BODY, ScriptedTransport, ok_response


@pytest.fixture(autouse=True)
def no_logging_setup():
    """Keep the CLI from reconfiguring the aiopreq logger during tests."""
    with patch("aiopreq.cli.setup_logging") as mock:
        yield mock


def _args(*argv):
    return create_parser().parse_args(list(argv))


class TestParsing:
    """Tests for flag parsing helpers."""

    def test_parse_query(self):
        """Test KEY=VALUE items, including repeats and empty values."""
        assert parse_query(["q=foo", "tag=a", "tag=b", "empty="]) == {
            "q": "foo",
            "tag": ["a", "b"],
            "empty": "",
        }

    @pytest.mark.parametrize("item", ["novalue", "=x"])
    def test_parse_query_invalid(self, item):
        """Test that malformed query items are rejected."""
        with pytest.raises(ConfigurationError):
            parse_query([item])

    def test_parse_headers(self):
        """Test 'Name: value' items."""
        assert parse_headers(["Accept: text/html", "X-Token:abc:def"]) == {
            "Accept": "text/html",
            "X-Token": "abc:def",
        }

    def test_parse_headers_invalid(self):
        """Test that headers without a colon are rejected."""
        with pytest.raises(ConfigurationError):
            parse_headers(["Accept text/html"])

    def test_build_options(self):
        """Test mapping flags to request options."""
        args = _args(
            MAIN_PAGE,
            "-X",
            "POST",
            "-q",
            "q=foo",
            "-H",
            "Accept: text/html",
            "-d",
            "hello",
            "--retries",
            "3",
            "--connect-timeout",
            "500ms",
            "--gzip",
            "--no-follow",
            "--raw",
        )
        assert build_options(args) == {
            "method": "POST",
            "query": {"q": "foo"},
            "headers": {"Accept": "text/html"},
            "body": "hello",
            "retries": 3,
            "connect_timeout": "500ms",
            "gzip": True,
            "follow_redirects": False,
            "encoding": None,
        }

    def test_build_options_minimal(self):
        """Test that unset flags leave the options empty."""
        assert build_options(_args(MAIN_PAGE)) == {"method": "GET"}

    def test_data_from_file(self, tmp_path):
        """Test that @FILE reads the body from disk."""
        path = tmp_path / "body.json"
        path.write_bytes(b'{"a": 1}')
        options = build_options(_args(MAIN_PAGE, "-d", f"@{path}"))
        assert options["body"] == b'{"a": 1}'

    def test_build_config_flags(self):
        """Test that flags override config defaults."""
        config = build_config(_args(MAIN_PAGE, "--user-agent", "bot/1.0", "-v"))
        assert config.user_agent == "bot/1.0"
        assert config.log_level == "DEBUG"

    def test_build_config_file(self, tmp_path):
        """Test loading defaults from a YAML file."""
        pytest.importorskip("yaml")
        path = tmp_path / "aiopreq.yaml"
        path.write_text("retries: 2\nuser_agent: from-file\n")

        config = build_config(_args(MAIN_PAGE, "--config", str(path), "--quiet"))

        assert config.retries == 2
        assert config.user_agent == "from-file"
        assert config.log_level == "ERROR"


class TestRunRequest:
    """Tests for running requests from parsed arguments."""

    def test_success(self, capsys, no_logging_setup):
        """Test that the body goes to stdout and the status to stderr."""
        transport = ScriptedTransport(ok_response())

        code = run_request(_args(MAIN_PAGE, "-i"), transport)

        captured = capsys.readouterr()
        assert code == EXIT_OK
        assert captured.out == MOCK_BODY + "\n"
        assert "200" in captured.err
        assert "content-type" in captured.err
        no_logging_setup.assert_called_once_with("WARNING")

    def test_quiet_prints_only_body(self, capsys):
        """Test that --quiet suppresses the status line."""
        code = run_request(_args(MAIN_PAGE, "--quiet"), ScriptedTransport(ok_response()))

        captured = capsys.readouterr()
        assert code == EXIT_OK
        assert captured.out == MOCK_BODY + "\n"
        assert captured.err == ""

    def test_redirect_reported(self, capsys):
        """Test that a changed effective URI is shown."""
        transport = ScriptedTransport(ok_response(effective_uri=MAIN_PAGE))

        run_request(_args("https://en.wikipedia.org/"), transport)

        assert MAIN_PAGE in capsys.readouterr().err

    def test_raw_body(self, capsysbinary):
        """Test that --raw writes the exact bytes."""
        transport = ScriptedTransport(ok_response(body=b"\x00\xff"))

        code = run_request(_args(MAIN_PAGE, "--raw", "--quiet"), transport)

        assert code == EXIT_OK
        assert capsysbinary.readouterr().out == b"\x00\xff"

    def test_http_error_status_is_success(self, capsys):
        """Test that a received 404 still exits cleanly."""
        transport = ScriptedTransport(ok_response(status=404, body=b"missing"))

        code = run_request(_args(MAIN_PAGE), transport)

        assert code == EXIT_OK
        assert "404" in capsys.readouterr().err

    def test_network_failure(self, capsys):
        """Test that a RequestError exits with a request error code."""
        transport = ScriptedTransport(ConnectionFailure(cause=ConnectionRefusedError()))

        code = run_request(_args(MAIN_PAGE), transport)

        assert code == EXIT_REQUEST_ERROR
        assert "504" in capsys.readouterr().err
        assert len(transport.calls) == 1

    def test_invalid_uri(self, capsys):
        """Test that a malformed URI exits with a config error code."""
        transport = ScriptedTransport(ok_response())

        code = run_request(_args("not a uri"), transport)

        assert code == EXIT_CONFIG_ERROR
        assert "Configuration error" in capsys.readouterr().err
        assert transport.calls == []

    def test_invalid_flag_value(self, no_logging_setup):
        """Test that malformed flags fail before logging is configured."""
        code = run_request(_args(MAIN_PAGE, "-q", "novalue"), ScriptedTransport(ok_response()))

        assert code == EXIT_CONFIG_ERROR
        no_logging_setup.assert_not_called()

    def test_missing_config_file(self, tmp_path):
        """Test that an unreadable config file is a config error."""
        code = run_request(_args(MAIN_PAGE, "--config", str(tmp_path / "missing.yaml")))
        assert code == EXIT_CONFIG_ERROR

    def test_malformed_config_file(self, tmp_path):
        """Test that a config file with broken YAML is a config error."""
        pytest.importorskip("yaml")
        path = tmp_path / "aiopreq.yaml"
        path.write_text("retries: [1,\n")

        code = run_request(_args(MAIN_PAGE, "--config", str(path)), ScriptedTransport(ok_response()))

        assert code == EXIT_CONFIG_ERROR


class TestMain:
    """Tests for the entry point."""

    def test_version(self, capsys):
        """Test --version."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert "aiopreq" in capsys.readouterr().out

    def test_missing_url(self):
        """Test that the URL argument is required."""
        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 2
