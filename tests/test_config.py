import pytest

from weblate_config import DEFAULT_SERVER_NAME, WeblateSettings, init_env, load_settings

ENV_VARS = (
    "WEBLATE_API_URL", "WEBLATE_API_TOKEN", "WEBLATE_TIMEOUT", "MCP_SERVER_NAME",
    "MCP_SERVER_VERSION", "MCP_TRANSPORT", "MCP_HOST", "MCP_PORT", "LOG_LEVEL", "LOG_FILE", "DEBUG",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # setenv first so teardown also removes values loaded from .env files
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


def test_defaults():
    s = load_settings()
    assert s.api_url == ""
    assert s.timeout == 10.0
    assert s.server_name == DEFAULT_SERVER_NAME
    assert s.transport == "stdio"
    assert s.port == 8000
    assert s.log_level == "INFO"
    assert s.log_file is None
    assert s.debug is False
    assert not s.has_credentials


def test_values_from_environment(monkeypatch):
    monkeypatch.setenv("WEBLATE_API_URL", " https://hosted.weblate.org ")
    monkeypatch.setenv("WEBLATE_API_TOKEN", "wlu_abc")
    monkeypatch.setenv("WEBLATE_TIMEOUT", "2.5")
    monkeypatch.setenv("MCP_TRANSPORT", "HTTP")
    monkeypatch.setenv("MCP_PORT", "9001")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("DEBUG", "true")

    s = load_settings()
    assert s.api_url == "https://hosted.weblate.org"
    assert s.timeout == 2.5
    assert s.transport == "http"
    assert s.port == 9001
    assert s.log_level == "DEBUG"
    assert s.debug is True
    assert s.has_credentials


def test_bad_numbers_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("WEBLATE_TIMEOUT", "soon")
    monkeypatch.setenv("MCP_PORT", "eighty")
    s = load_settings()
    assert s.timeout == 10.0
    assert s.port == 8000


def test_unknown_transport_falls_back_to_stdio(monkeypatch):
    monkeypatch.setenv("MCP_TRANSPORT", "carrier-pigeon")
    assert load_settings().transport == "stdio"


def test_require_credentials():
    with pytest.raises(RuntimeError, match="WEBLATE_API_URL"):
        WeblateSettings(api_url="https://x").require_credentials()
    WeblateSettings(api_url="https://x", api_token="t").require_credentials()


def test_init_env_reads_dotenv_from_cwd(tmp_path, monkeypatch):
    (tmp_path / ".env").write_text("WEBLATE_API_URL=https://from-dotenv.test\n")
    monkeypatch.chdir(tmp_path)
    assert init_env() is True
    assert load_settings().api_url == "https://from-dotenv.test"


def test_init_env_without_any_dotenv(mocker):
    mocker.patch("weblate_config.find_dotenv", return_value="")
    assert not init_env()
