from __future__ import annotations

import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from rotina.store import DATA_KEYS, RecordStore


class TestRecordStoreContract(unittest.TestCase):
    def setUp(self) -> None:
        self._td = tempfile.TemporaryDirectory()
        self.home = Path(self._td.name)
        self.store = RecordStore(self.home)

    def tearDown(self) -> None:
        self._td.cleanup()

    def test_absent_key_reads_as_empty_list(self) -> None:
        self.assertEqual(self.store.get(DATA_KEYS["TASKS"]), [])
        self.assertEqual(self.store.get("missing", default=[1]), [1])
        self.assertFalse(self.store.path.exists())

    def test_set_then_get_roundtrip_through_disk(self) -> None:
        self.store.set(DATA_KEYS["EVENTS"], [{"id": 1, "title": "Médico"}])
        again = RecordStore(self.home)
        self.assertEqual(again.get(DATA_KEYS["EVENTS"]), [{"id": 1, "title": "Médico"}])
        self.assertEqual(self.store.path, self.home / "store.json")
        self.assertFalse((self.home / "store.json.tmp").exists())

    def test_set_rejects_non_list(self) -> None:
        with self.assertRaises(TypeError):
            self.store.set("k", {"a": 1})  # type: ignore[arg-type]

    def test_corrupt_document_reads_as_empty(self) -> None:
        self.store.path.write_text("{not json", encoding="utf-8")
        self.assertEqual(self.store.get(DATA_KEYS["TASKS"]), [])
        self.store.set(DATA_KEYS["TASKS"], [{"id": 2}])
        self.assertEqual(self.store.get(DATA_KEYS["TASKS"]), [{"id": 2}])

    def test_non_list_value_reads_as_default(self) -> None:
        self.store.path.write_text(json.dumps({DATA_KEYS["TASKS"]: "oops"}), encoding="utf-8")
        self.assertEqual(self.store.get(DATA_KEYS["TASKS"]), [])

    def test_non_object_document_reads_as_empty(self) -> None:
        self.store.path.write_text("[1, 2, 3]", encoding="utf-8")
        self.assertEqual(self.store.keys(), [])

    def test_corrupt_document_logs_when_obs_enabled(self) -> None:
        self.store.path.write_text("{not json", encoding="utf-8")
        with patch.dict(os.environ, {"ROTINA_OBS_LOG": "1"}, clear=False), patch("rotina.store.eprint") as ep:
            self.store.get("k")
        combined = "\n".join(str(c.args[0]) for c in ep.call_args_list if c.args)
        self.assertIn("[rotina.store] WARN: unreadable store", combined)

    def test_corrupt_document_is_quiet_when_obs_disabled(self) -> None:
        self.store.path.write_text("{not json", encoding="utf-8")
        with patch.dict(os.environ, {}, clear=True), patch("rotina.store.eprint") as ep:
            self.store.get("k")
        self.assertFalse(ep.called)

    def test_remove_and_clear(self) -> None:
        self.store.set("a", [1])
        self.store.set("b", [2])
        self.store.set("c", [3])
        self.assertTrue(self.store.remove("a"))
        self.assertFalse(self.store.remove("a"))
        self.assertEqual(self.store.clear(["b", "zzz"]), 1)
        self.assertEqual(self.store.keys(), ["c"])

    def test_explicit_json_path_is_used_as_is(self) -> None:
        p = self.home / "custom.json"
        s = RecordStore(p)
        s.set("k", [1])
        self.assertTrue(p.exists())

    def test_at_home_uses_env(self) -> None:
        with patch.dict(os.environ, {"ROTINA_HOME": str(self.home / "envhome")}, clear=False):
            s = RecordStore.at_home()
        self.assertEqual(s.path, self.home / "envhome" / "store.json")


if __name__ == "__main__":
    unittest.main(verbosity=2)
