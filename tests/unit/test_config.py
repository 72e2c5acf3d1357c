import pytest

from es_agent.config import ClientConfig, SearchConfig, load_config, validate_settings
from es_agent.errors import ConfigurationError


def test_anonymous_settings_are_valid() -> None:
    config = validate_settings({"url": "http://localhost:9200"})

    assert config.url == "http://localhost:9200"
    assert config.api_key is None
    assert config.has_basic_auth is False


@pytest.mark.parametrize(
    "credentials",
    [{"username": "elastic"}, {"password": "changeme"}],
)
def test_half_basic_auth_rejected(credentials: dict[str, str]) -> None:
    with pytest.raises(ConfigurationError):
        validate_settings({"url": "http://localhost:9200", **credentials})


@pytest.mark.parametrize("url", ["", "   ", "localhost:9200", "ftp://example.com", "http://"])
def test_bad_url_rejected(url: str) -> None:
    with pytest.raises(ConfigurationError):
        validate_settings({"url": url})


def test_api_key_and_basic_auth_both_accepted(caplog: pytest.LogCaptureFixture) -> None:
    config = validate_settings(
        {
            "url": "https://es.example.com:9243",
            "api_key": "abc==",
            "username": "elastic",
            "password": "changeme",
        }
    )

    assert config.api_key == "abc=="
    assert config.has_basic_auth
    assert "using the API key" in caplog.text


def test_settings_are_immutable() -> None:
    config = validate_settings({"url": "http://localhost:9200"})

    with pytest.raises(Exception):
        config.url = "http://other:9200"  # type: ignore[misc]


def test_load_config_treats_empty_env_values_as_unset() -> None:
    config = load_config(
        {
            "ES_URL": " http://localhost:9200 ",
            "ES_API_KEY": "",
            "ES_USERNAME": "",
            "ES_PASSWORD": "",
            "ES_CA_CERT": "",
            "ES_SSL_SKIP_VERIFY": "true",
        }
    )

    assert config.url == "http://localhost:9200"
    assert config.api_key is None
    assert config.ca_cert is None
    assert config.ssl_skip_verify is True
    assert config.container_mode is False


def test_load_config_requires_url() -> None:
    with pytest.raises(ConfigurationError, match="cannot be empty"):
        load_config({})


def test_policy_defaults() -> None:
    assert ClientConfig().max_retries == 5
    assert ClientConfig().metadata_timeout == 30.0
    assert ClientConfig().request_timeout == 60.0
    assert SearchConfig().timeout == "30s"
