"""Tests for structured errors and the JSONL log sink."""

import json
import logging

from tsloader.errors import LoaderError
from tsloader.errors import ManifestParseError
from tsloader.errors import ModuleNotFoundError
from tsloader.errors import NotFoundError
from tsloader.logging_setup import JsonlHandler
from tsloader.logging_setup import init_json_logging


class TestErrors:
    def test_module_not_found_message(self):
        error = ModuleNotFoundError("./a", "/src/index.ts")
        assert str(error) == "Cannot find module './a' imported from /src/index.ts"
        assert isinstance(error, NotFoundError)

    def test_to_dict(self):
        error = ManifestParseError("/p/package.json", "Expecting value")
        assert error.to_dict() == {
            "type": "ManifestParseError",
            "message": "Error parsing: /p/package.json (Expecting value)",
            "details": {"path": "/p/package.json", "reason": "Expecting value"},
        }
        assert not isinstance(error, NotFoundError)

    def test_with_message_keeps_type_and_copies_details(self):
        error = ModuleNotFoundError("./a.js")
        clone = error.with_message("Cannot find module './a'")

        assert type(clone) is ModuleNotFoundError
        clone.details["specifier"] = "./a"
        assert error.details["specifier"] == "./a.js"
        assert isinstance(clone, LoaderError)


class TestJsonlLogging:
    def test_writes_one_object_per_record(self, tmp_path):
        log_path = tmp_path / "logs" / "tsloader.jsonl"
        handler = init_json_logging(str(log_path), "debug")
        try:
            logging.getLogger("tsloader.test").debug("[resolve] a -> b", extra={"specifier": "a"})
        finally:
            logging.getLogger().removeHandler(handler)

        records = [json.loads(line) for line in log_path.read_text().splitlines()]
        assert records[-1]["message"] == "[resolve] a -> b"
        assert records[-1]["lvl"] == "DEBUG"
        assert records[-1]["specifier"] == "a"
        assert records[-1]["event"] == "resolve"

    def test_untagged_message_has_no_event(self, tmp_path):
        log_path = tmp_path / "tsloader.jsonl"
        handler = init_json_logging(str(log_path), "info")
        try:
            logging.getLogger("tsloader.test").info("Loader ready")
        finally:
            logging.getLogger().removeHandler(handler)

        record = json.loads(log_path.read_text().splitlines()[-1])
        assert "event" not in record

    def test_reinit_replaces_handler(self, tmp_path):
        first = init_json_logging(str(tmp_path / "a.jsonl"))
        second = init_json_logging(str(tmp_path / "b.jsonl"))
        try:
            handlers = [h for h in logging.getLogger().handlers if isinstance(h, JsonlHandler)]
            assert handlers == [second]
            assert first not in handlers
        finally:
            logging.getLogger().removeHandler(second)
