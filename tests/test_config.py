"""
Tests for configuration dataclasses and environment loading
"""

from unittest.mock import patch

import pytest

from stackex.core.config import BackoffBehavior, ClientConfig, DispatchConfig, LogConfig, _parse_env_numeric
from stackex.core.constants import DEFAULT_TIMEOUT, LOG_FILE_BACKUP_COUNT
from stackex.core.exceptions import ConfigurationError


class TestClientConfig:
    """Test ClientConfig defaults and validation"""

    def test_defaults(self):
        """Test default site, filter and host"""
        config = ClientConfig()
        assert config.default_site == "stackoverflow"
        assert config.default_filter == "default"
        assert config.base_url == "https://api.stackexchange.com"
        assert config.api_version == "2.2"
        assert config.api_key is None

    def test_base_parameters_without_credentials(self):
        """Test only site and filter are sent by default"""
        assert ClientConfig().base_parameters() == {"site": "stackoverflow", "filter": "default"}

    def test_base_parameters_with_credentials(self):
        """Test key and access_token are added when set"""
        config = ClientConfig(default_site="superuser", api_key="k", access_token="t")
        assert config.base_parameters() == {"site": "superuser", "filter": "default", "key": "k", "access_token": "t"}

    def test_trailing_slash_stripped(self):
        """Test the base URL is normalized"""
        assert ClientConfig(base_url="https://example.com/").base_url == "https://example.com"

    @pytest.mark.parametrize(
        "kwargs,field",
        [
            ({"base_url": ""}, "base_url"),
            ({"api_version": ""}, "api_version"),
            ({"timeout": 0}, "timeout"),
            ({"timeout": -1}, "timeout"),
        ],
    )
    def test_invalid_values(self, kwargs, field):
        """Test invalid values raise ConfigurationError naming the field"""
        with pytest.raises(ConfigurationError) as exc_info:
            ClientConfig(**kwargs)
        assert exc_info.value.field == field


class TestClientConfigFromEnv:
    """Test environment loading"""

    def test_reads_variables(self):
        """Test every STACKEX_* variable is mapped"""
        env = {
            "STACKEX_SITE": "serverfault",
            "STACKEX_FILTER": "withbody",
            "STACKEX_API_KEY": "key123",
            "STACKEX_ACCESS_TOKEN": "tok",
            "STACKEX_BASE_URL": "http://localhost:9000",
            "STACKEX_API_VERSION": "2.3",
            "STACKEX_TIMEOUT": "12.5",
        }
        config = ClientConfig.from_env(env)
        assert config == ClientConfig(
            default_site="serverfault",
            default_filter="withbody",
            api_key="key123",
            access_token="tok",
            base_url="http://localhost:9000",
            api_version="2.3",
            timeout=12.5,
        )

    def test_empty_environment(self):
        """Test missing variables keep the defaults"""
        assert ClientConfig.from_env({}) == ClientConfig()

    def test_blank_values_ignored(self):
        """Test whitespace-only values are treated as unset"""
        assert ClientConfig.from_env({"STACKEX_SITE": "   "}).default_site == "stackoverflow"

    def test_values_stripped(self):
        """Test surrounding whitespace is removed"""
        assert ClientConfig.from_env({"STACKEX_API_KEY": " abc \n"}).api_key == "abc"

    @pytest.mark.parametrize("raw", ["fast", "0", "-3", "inf", "nan"])
    def test_invalid_timeout_warns(self, raw, caplog):
        """Test an invalid timeout is ignored with a warning"""
        with caplog.at_level("WARNING", logger="stackex"):
            config = ClientConfig.from_env({"STACKEX_TIMEOUT": raw})
        assert config.timeout == DEFAULT_TIMEOUT
        assert "STACKEX_TIMEOUT" in caplog.text

    def test_loads_dotenv_for_process_environment(self, monkeypatch):
        """Test a .env file is loaded when reading os.environ"""
        monkeypatch.delenv("STACKEX_SITE", raising=False)
        with (
            patch("stackex.core.config.find_dotenv", return_value="/project/.env"),
            patch("stackex.core.config.load_dotenv", return_value=True) as mock_load,
        ):
            ClientConfig.from_env()
        mock_load.assert_called_once_with("/project/.env")

    def test_dotenv_skipped_for_explicit_mapping(self):
        """Test an explicit mapping never touches .env"""
        with patch("stackex.core.config.load_dotenv") as mock_load:
            ClientConfig.from_env({})
        mock_load.assert_not_called()

    def test_dotenv_file_values(self, tmp_path, monkeypatch):
        """Test values from a real .env file are picked up"""
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("STACKEX_SITE", raising=False)
        (tmp_path / ".env").write_text("STACKEX_SITE=askubuntu\n")
        try:
            assert ClientConfig.from_env().default_site == "askubuntu"
        finally:
            monkeypatch.delenv("STACKEX_SITE", raising=False)


class TestDispatchConfig:
    """Test DispatchConfig validation"""

    def test_defaults(self):
        config = DispatchConfig()
        assert config.max_workers == 4
        assert config.max_backoff_wait == 300.0

    def test_unbounded_wait(self):
        """Test None removes the wait bound"""
        assert DispatchConfig(max_backoff_wait=None).max_backoff_wait is None

    @pytest.mark.parametrize("workers", [0, -1, 65])
    def test_invalid_workers(self, workers):
        """Test worker counts outside 1..64 are rejected"""
        with pytest.raises(ConfigurationError):
            DispatchConfig(max_workers=workers)

    def test_negative_wait(self):
        """Test a negative wait bound is rejected"""
        with pytest.raises(ConfigurationError):
            DispatchConfig(max_backoff_wait=-1)


class TestMisc:
    """Test small configuration helpers"""

    def test_log_config_defaults(self):
        config = LogConfig()
        assert config.level == "INFO"
        assert config.file_backup_count == LOG_FILE_BACKUP_COUNT

    def test_backoff_behavior_values(self):
        """Test policies round-trip through their raw values"""
        assert [BackoffBehavior(b.value) for b in BackoffBehavior] == list(BackoffBehavior)
        assert BackoffBehavior("throw_error") is BackoffBehavior.THROW_ERROR

    @pytest.mark.parametrize(
        "value,cast,expected",
        [("5", int, 5), ("2.5", float, 2.5), ("x", int, None), (None, int, None), ("inf", float, None)],
    )
    def test_parse_env_numeric(self, value, cast, expected):
        """Test numeric env parsing"""
        assert _parse_env_numeric(value, cast) == expected
