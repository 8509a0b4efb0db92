from configparser import ConfigParser

from githubfs.config import ApiConfig, CacheConfig, Config
from githubfs.constants import GITHUB_API_URL


def test_cache_config_defaults():
    parser = ConfigParser()
    parser.read_string("[cache]")

    cfg = CacheConfig.load(parser["cache"])

    assert cfg == CacheConfig()
    assert cfg.directory_ttl > 0
    assert cfg.content_window > 0


def test_cache_config_load():
    parser = ConfigParser()
    parser.read_string(
        """
        [cache]
        directory_ttl = 120
        entry_timeout = 2.5
        attr_timeout = 3
        content_window = 10
        max_contents = 16
        """
    )

    cfg = CacheConfig.load(parser["cache"])

    assert cfg.directory_ttl == 120
    assert cfg.entry_timeout == 2.5
    assert cfg.attr_timeout == 3
    assert cfg.content_window == 10
    assert cfg.max_contents == 16


def test_api_config_defaults():
    parser = ConfigParser()
    parser.read_string("[api]")

    cfg = ApiConfig.load(parser["api"])

    assert cfg.url == GITHUB_API_URL
    assert cfg.ref is None


def test_api_config_load():
    parser = ConfigParser()
    parser.read_string(
        """
        [api]
        url = https://github.example.com/api/v3
        timeout = 30
        max_requests = 2
        retries = 0
        backoff = 1
        max_backoff = 4
        ref = main
        """
    )

    cfg = ApiConfig.load(parser["api"])

    assert cfg.url == "https://github.example.com/api/v3"
    assert cfg.timeout == 30
    assert cfg.max_requests == 2
    assert cfg.retries == 0
    assert cfg.backoff == 1
    assert cfg.max_backoff == 4
    assert cfg.ref == "main"


def test_config_defaults(tmp_path):
    cfg = Config.load(str(tmp_path / "nonexistent"))

    assert cfg == Config()


def test_config_load(tmp_path):
    (tmp_path / "config").write_text(
        """
        [cache]
        directory_ttl = 5

        [api]
        max_requests = 1
        """
    )

    cfg = Config.load(str(tmp_path / "config"))

    assert cfg.cache.directory_ttl == 5
    assert cfg.api.max_requests == 1


def test_config_load_failure_nonfatal(tmp_path, caplog):
    (tmp_path / "config").write_text("blabla")

    cfg = Config.load(str(tmp_path / "config"))

    assert cfg == Config()
    assert "failed to read config file" in caplog.text


def test_config_invalid_value_nonfatal(tmp_path):
    (tmp_path / "config").write_text("[cache]\ndirectory_ttl = soon\n")

    cfg = Config.load(str(tmp_path / "config"))

    assert cfg.cache == CacheConfig()
