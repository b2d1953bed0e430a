# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Tests for Config: file loading, env overrides, placeholders and binding."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import pytest
from pydantic import BaseModel, Field

from flyrepo.core.config import Config, config_properties


class TestConfig:
    def test_get_simple_value(self):
        config = Config({"app": {"port": 8080}})
        assert config.get("app.port") == 8080

    def test_get_with_default(self):
        config = Config({})
        assert config.get("missing.key", "default") == "default"

    def test_get_section(self):
        config = Config({"flyrepo": {"database": {"url": "x", "echo": True}}})
        assert config.get_section("flyrepo.database") == {"url": "x", "echo": True}
        assert config.get_section("flyrepo.missing") == {}

    def test_load_from_yaml_file(self, tmp_path: Path):
        config_file = tmp_path / "flyrepo.yaml"
        config_file.write_text("flyrepo:\n  repository:\n    chunk_size: 50\n")

        config = Config.from_file(config_file)

        assert config.get("flyrepo.repository.chunk_size") == 50
        assert config.loaded_sources == ["flyrepo-defaults.yaml (defaults)", str(config_file)]

    def test_load_from_toml_file(self, tmp_path: Path):
        config_file = tmp_path / "flyrepo.toml"
        config_file.write_text('[flyrepo.database]\nurl = "postgresql+asyncpg://db/app"\n')

        config = Config.from_file(config_file)

        assert config.get("flyrepo.database.url") == "postgresql+asyncpg://db/app"

    def test_packaged_defaults(self, tmp_path: Path):
        config = Config.from_file(tmp_path / "absent.yaml")

        assert config.get("flyrepo.repository.chunk_size") == 1000
        assert config.get("flyrepo.repository.id_column") == "id"
        assert config.get("flyrepo.logging.level.root") == "INFO"

    def test_defaults_can_be_skipped(self, tmp_path: Path):
        config = Config.from_file(tmp_path / "absent.yaml", load_defaults=False)

        assert config.to_dict() == {}
        assert config.loaded_sources == []

    def test_env_var_override(self, monkeypatch):
        monkeypatch.setenv("FLYREPO_DATABASE_URL", "sqlite+aiosqlite:///env.db")
        config = Config({"flyrepo": {"database": {"url": "sqlite+aiosqlite:///file.db"}}})
        assert config.get("flyrepo.database.url") == "sqlite+aiosqlite:///env.db"


class TestProfiles:
    def test_profile_overlay(self, tmp_path: Path):
        base = tmp_path / "flyrepo.yaml"
        base.write_text("flyrepo:\n  database:\n    url: base\n    echo: false\n")
        (tmp_path / "flyrepo-dev.yaml").write_text("flyrepo:\n  database:\n    echo: true\n")

        config = Config.from_file(base, active_profiles=["dev", "missing"])

        assert config.get("flyrepo.database.url") == "base"
        assert config.get("flyrepo.database.echo") is True

    def test_later_profile_wins(self, tmp_path: Path):
        base = tmp_path / "flyrepo.yaml"
        base.write_text("db:\n  url: base\n")
        (tmp_path / "flyrepo-dev.yaml").write_text("db:\n  url: dev\n")
        (tmp_path / "flyrepo-local.yaml").write_text("db:\n  url: local\n")

        config = Config.from_file(base, active_profiles=["dev", "local"])

        assert config.get("db.url") == "local"


class TestPlaceholders:
    def test_env_placeholder(self, monkeypatch):
        monkeypatch.setenv("DB_HOST", "db.internal")
        config = Config({"flyrepo": {"database": {"url": "postgresql+asyncpg://${DB_HOST}/app"}}})
        assert config.get("flyrepo.database.url") == "postgresql+asyncpg://db.internal/app"

    def test_config_placeholder(self):
        config = Config({"app": {"db": "orders"}, "flyrepo": {"database": {"url": "sqlite+aiosqlite:///${app.db}.db"}}})
        assert config.get("flyrepo.database.url") == "sqlite+aiosqlite:///orders.db"

    def test_placeholder_default(self):
        config = Config({"url": "${MISSING_FLYREPO_HOST:localhost}"})
        assert config.get("url") == "localhost"

    def test_unresolvable_placeholder(self):
        config = Config({"url": "${MISSING_FLYREPO_HOST}"})
        with pytest.raises(ValueError, match="MISSING_FLYREPO_HOST"):
            config.get("url")

    def test_circular_reference(self):
        config = Config({"a": "${b}", "b": "${a}"})
        with pytest.raises(ValueError, match="circular"):
            config.get("a")


class TestBinding:
    def test_bind_to_dataclass(self):
        @config_properties(prefix="pool")
        @dataclass
        class PoolConfig:
            url: str = "sqlite:///default.db"
            size: int = 5
            echo: bool = False

        config = Config({"pool": {"url": "postgresql://localhost/mydb", "size": 20}})
        pool = config.bind(PoolConfig)

        assert pool.url == "postgresql://localhost/mydb"
        assert pool.size == 20
        assert pool.echo is False

    def test_dataclass_env_values_are_coerced(self, monkeypatch):
        @config_properties(prefix="flyrepo.pool")
        @dataclass
        class PoolConfig:
            size: int = 5
            ratio: float = 1.0
            echo: bool = False

        monkeypatch.setenv("FLYREPO_POOL_SIZE", "12")
        monkeypatch.setenv("FLYREPO_POOL_RATIO", "0.5")
        monkeypatch.setenv("FLYREPO_POOL_ECHO", "yes")

        pool = Config({}).bind(PoolConfig)

        assert (pool.size, pool.ratio, pool.echo) == (12, 0.5, True)

    def test_bind_to_pydantic_model(self):
        @config_properties(prefix="batch")
        class BatchConfig(BaseModel):
            chunk_size: int = Field(default=100, ge=1)

        assert Config({"batch": {"chunk_size": "250"}}).bind(BatchConfig).chunk_size == 250
        assert Config({}).bind(BatchConfig).chunk_size == 100

    def test_pydantic_validation_error(self):
        @config_properties(prefix="batch")
        class BatchConfig(BaseModel):
            chunk_size: int = Field(default=100, ge=1)

        with pytest.raises(ValueError, match="BatchConfig"):
            Config({"batch": {"chunk_size": 0}}).bind(BatchConfig)

    def test_undecorated_class(self):
        @dataclass
        class Plain:
            value: int = 1

        with pytest.raises(ValueError, match="not decorated"):
            Config({}).bind(Plain)
