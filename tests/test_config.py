"""Tests for pressroom.config."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from pressroom.config import (
    DEFAULTS,
    ConfigError,
    _deep_merge,
    _validate,
    default_config,
    load_config,
    resolve_paths,
)


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Create a minimal .pressroom/config.yaml in tmp_path."""
    pressroom_dir = tmp_path / ".pressroom"
    pressroom_dir.mkdir()
    config = {
        "database": "data/content.db",
        "compile": {"max_concurrency": 4},
    }
    (pressroom_dir / "config.yaml").write_text(yaml.dump(config))
    return tmp_path


class TestDeepMerge:
    def test_flat_merge(self) -> None:
        base = {"a": 1, "b": 2}
        override = {"b": 3, "c": 4}
        assert _deep_merge(base, override) == {"a": 1, "b": 3, "c": 4}

    def test_nested_merge(self) -> None:
        base = {"x": {"a": 1, "b": 2}}
        override = {"x": {"b": 3}}
        assert _deep_merge(base, override) == {"x": {"a": 1, "b": 3}}

    def test_override_replaces_non_dict(self) -> None:
        base = {"x": {"a": 1}}
        override = {"x": "flat"}
        assert _deep_merge(base, override) == {"x": "flat"}

    def test_base_not_mutated(self) -> None:
        base = {"x": {"a": 1}}
        _deep_merge(base, {"x": {"a": 2}})
        assert base == {"x": {"a": 1}}


class TestValidate:
    def test_defaults_valid(self) -> None:
        _validate(default_config())

    @pytest.mark.parametrize("limit", [0, -1, "3", 1.5, True])
    def test_bad_max_concurrency(self, limit: object) -> None:
        config = _deep_merge(DEFAULTS, {"compile": {"max_concurrency": limit}})
        with pytest.raises(ConfigError, match="max_concurrency"):
            _validate(config)

    def test_null_max_concurrency_allowed(self) -> None:
        _validate(_deep_merge(DEFAULTS, {"compile": {"max_concurrency": None}}))

    @pytest.mark.parametrize("domains", [[], "twitter.com", [""], [1]])
    def test_bad_domains(self, domains: object) -> None:
        config = _deep_merge(DEFAULTS, {"social": {"domains": domains}})
        with pytest.raises(ConfigError, match="social.domains"):
            _validate(config)

    def test_bad_timeout(self) -> None:
        config = _deep_merge(DEFAULTS, {"social": {"timeout": 0}})
        with pytest.raises(ConfigError, match="social.timeout"):
            _validate(config)

    def test_section_must_be_mapping(self) -> None:
        config = _deep_merge(DEFAULTS, {"compile": "fast"})
        with pytest.raises(ConfigError, match="'compile' must be a mapping"):
            _validate(config)


class TestLoadConfig:
    def test_loads_and_merges_defaults(self, project_dir: Path) -> None:
        config = load_config(project_dir)
        assert config["database"] == "data/content.db"
        assert config["compile"]["max_concurrency"] == 4
        assert config["compile"]["external_link_indicator"] == "↗"
        assert config["social"]["domains"] == ["twitter.com", "x.com"]

    def test_missing_config(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Config not found"):
            load_config(tmp_path)

    def test_empty_config_uses_defaults(self, tmp_path: Path) -> None:
        (tmp_path / ".pressroom").mkdir()
        (tmp_path / ".pressroom" / "config.yaml").write_text("")
        assert load_config(tmp_path) == default_config()

    def test_non_mapping(self, tmp_path: Path) -> None:
        (tmp_path / ".pressroom").mkdir()
        (tmp_path / ".pressroom" / "config.yaml").write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="YAML mapping"):
            load_config(tmp_path)

    def test_defaults_to_cwd(self, project_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(project_dir)
        assert load_config()["database"] == "data/content.db"


class TestResolvePaths:
    def test_paths_relative_to_root(self, project_dir: Path) -> None:
        config = load_config(project_dir)
        paths = resolve_paths(config, project_dir)
        assert paths["database"] == project_dir / "data" / "content.db"
        assert paths["watch_source"] == project_dir / "posts"
        assert paths["watch_output"] == project_dir / "build"
        assert paths["social_fixtures"] is None

    def test_fixtures_path(self, tmp_path: Path) -> None:
        config = _deep_merge(DEFAULTS, {"social": {"fixtures": "tweets.yaml"}})
        assert resolve_paths(config, tmp_path)["social_fixtures"] == tmp_path / "tweets.yaml"
