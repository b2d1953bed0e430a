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
"""Tests for StructlogAdapter and the events flyrepo logs."""

import io
import json
import logging

import pytest
import structlog
from structlog.testing import capture_logs

from flyrepo.core.config import Config
from flyrepo.data.resolution import MethodResolutionCache
from flyrepo.logging.structlog_adapter import LIBRARY_LOGGER, StructlogAdapter


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    structlog.reset_defaults()
    library_logger = logging.getLogger(LIBRARY_LOGGER)
    for handler in list(library_logger.handlers):
        library_logger.removeHandler(handler)
    library_logger.setLevel(logging.NOTSET)
    library_logger.propagate = True


class TestStructlogAdapterConfigure:
    def test_configure_with_defaults(self):
        adapter = StructlogAdapter()
        adapter.configure(Config({}))
        assert adapter._root_level == "INFO"
        assert adapter._format == "console"
        assert logging.getLogger(LIBRARY_LOGGER).level == logging.INFO

    def test_configure_reads_root_level(self):
        adapter = StructlogAdapter()
        adapter.configure(Config({"flyrepo": {"logging": {"level": {"root": "debug"}}}}))
        assert adapter._root_level == "DEBUG"
        assert logging.getLogger(LIBRARY_LOGGER).level == logging.DEBUG

    def test_configure_reads_format(self):
        adapter = StructlogAdapter()
        adapter.configure(Config({"flyrepo": {"logging": {"format": "JSON"}}}))
        assert adapter._format == "json"

    def test_configure_reads_per_module_levels(self):
        adapter = StructlogAdapter()
        config = Config({"flyrepo": {"logging": {"level": {"root": "INFO", "flyrepo.sql": "WARNING"}}}})
        adapter.configure(config)
        assert adapter._module_levels == {"flyrepo.sql": "WARNING"}
        assert logging.getLogger("flyrepo.sql").level == logging.WARNING

    def test_root_logger_is_left_alone(self):
        root = logging.getLogger()
        handlers = list(root.handlers)
        level = root.level

        StructlogAdapter().configure(Config({"flyrepo": {"logging": {"level": {"root": "DEBUG"}}}}))

        assert root.handlers == handlers
        assert root.level == level

    def test_reconfigure_replaces_handler(self):
        adapter = StructlogAdapter()
        adapter.configure(Config({}))
        adapter.configure(Config({}))

        assert len(logging.getLogger(LIBRARY_LOGGER).handlers) == 1
        assert logging.getLogger(LIBRARY_LOGGER).propagate is False


class TestStructlogAdapterOutput:
    def test_json_lines(self):
        stream = io.StringIO()
        adapter = StructlogAdapter(stream=stream)
        adapter.configure(Config({"flyrepo": {"logging": {"format": "json"}}}))

        adapter.get_logger("flyrepo.data.test").info("batch_write_completed", table="users", count=3)

        record = json.loads(stream.getvalue().strip())
        assert record["event"] == "batch_write_completed"
        assert record["table"] == "users"
        assert record["count"] == 3
        assert record["level"] == "info"
        assert record["logger"] == "flyrepo.data.test"
        assert "timestamp" in record

    def test_levels_below_threshold_are_dropped(self):
        stream = io.StringIO()
        adapter = StructlogAdapter(stream=stream)
        adapter.configure(Config({"flyrepo": {"logging": {"format": "json", "level": {"root": "WARNING"}}}}))

        adapter.get_logger("flyrepo.data.quiet").info("ignored")

        assert stream.getvalue() == ""

    def test_set_level(self):
        adapter = StructlogAdapter()
        adapter.set_level("flyrepo.data.batch", "debug")
        assert logging.getLogger("flyrepo.data.batch").level == logging.DEBUG


class TestLibraryEvents:
    def test_finder_resolution_is_logged_once(self):
        cache = MethodResolutionCache()

        with capture_logs() as logs:
            cache.resolve("findAllByStatusAndAge")
            cache.resolve("findAllByStatusAndAge")

        assert logs == [
            {
                "event": "finder_resolved",
                "log_level": "debug",
                "method_name": "findAllByStatusAndAge",
                "arity": "collection",
                "predicates": 2,
            }
        ]
