from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from news_crawler.config import ConfigLocator, ConfigRepository, CrawlConfig


def test_config_locator_uses_env_and_creates_directories(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("NEWS_CRAWLER_HOME", str(tmp_path))
    locator = ConfigLocator()

    assert locator.project_root == tmp_path.resolve()
    assert locator.data_dir.exists()
    assert locator.logs_dir.exists()
    assert locator.config_path() == tmp_path.resolve() / "crawler.yaml"
    assert locator.results_path() == tmp_path.resolve() / "data" / "crawled_results.json"


def test_locator_prefers_existing_json_file(tmp_path: Path) -> None:
    (tmp_path / "crawler.json").write_text("{}", encoding="utf-8")

    assert ConfigLocator(project_root=tmp_path).config_path().name == "crawler.json"


def test_missing_config_is_created_with_defaults(temp_config_repository: ConfigRepository) -> None:
    config = temp_config_repository.load()

    path = temp_config_repository.locator.config_path()
    assert path.exists()
    assert config == CrawlConfig()
    assert yaml.safe_load(path.read_text(encoding="utf-8"))["max_depth"] == 3


def test_config_repository_roundtrip(temp_config_repository: ConfigRepository) -> None:
    config = CrawlConfig(
        terms=["economy"],
        websites=["https://example.com"],
        report_time="07:00",
        text_analysis={"language": "EN"},
    )

    temp_config_repository.save(config)
    loaded = temp_config_repository.reload()

    assert loaded == config


def test_json_config_is_read(tmp_path: Path) -> None:
    (tmp_path / "crawler.json").write_text(
        json.dumps({"terms": ["War"], "websites": ["https://example.com"]}), encoding="utf-8"
    )

    config = ConfigRepository(ConfigLocator(project_root=tmp_path)).load()

    assert config.terms == ["war"]


def test_non_mapping_config_is_rejected(tmp_path: Path) -> None:
    (tmp_path / "crawler.yaml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ValueError):
        ConfigRepository(ConfigLocator(project_root=tmp_path)).load()


def test_load_is_cached_until_reload(temp_config_repository: ConfigRepository) -> None:
    first = temp_config_repository.load()
    path = temp_config_repository.locator.config_path()
    path.write_text(yaml.safe_dump({"terms": ["changed"]}), encoding="utf-8")

    assert temp_config_repository.load() is first
    assert temp_config_repository.reload().terms == ["changed"]
