from __future__ import annotations

import datetime as dt
import io
import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from rotina import cli
from rotina.store import DATA_KEYS, RecordStore
from rotina.util.tz import fixed_clock

NOW = dt.datetime(2024, 3, 15, 10, 0)


class TestCliContract(unittest.TestCase):
    def setUp(self) -> None:
        self._td = tempfile.TemporaryDirectory()
        self.home = Path(self._td.name)
        self.store = RecordStore(self.home)

    def tearDown(self) -> None:
        self._td.cleanup()

    def _run(self, *args: str) -> tuple:
        out = io.StringIO()
        with patch("rotina.cli.system_clock", return_value=fixed_clock(NOW)), patch("sys.stdout", out):
            rc = cli.main(["--home", str(self.home), "--tz", "UTC", *args])
        return rc, out.getvalue()

    def test_task_flow(self) -> None:
        rc, out = self._run("task", "add", "Pagar conta", "--due", "2024-03-15T18:00", "--priority", "high")
        self.assertEqual(rc, 0)
        self.assertIn("Tarefa adicionada!", out)
        task_id = self.store.get(DATA_KEYS["TASKS"])[0]["id"]

        rc, out = self._run("task", "today")
        self.assertIn("Pagar conta (Alta)", out)

        rc, out = self._run("task", "done", str(task_id))
        self.assertEqual(rc, 0)
        self.assertTrue(self.store.get(DATA_KEYS["TASKS"])[0]["completed"])

        rc, out = self._run("task", "list")
        self.assertIn("Todas as tarefas concluídas!", out)
        self.assertIn("[x]", out)

    def test_unknown_id_returns_one(self) -> None:
        with patch("rotina.cli.eprint") as ep:
            rc, _ = self._run("event", "rm", "42")
        self.assertEqual(rc, 1)
        self.assertIn("event #42 not found", ep.call_args.args[0])

    def test_invalid_input_is_a_user_error(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            self._run("fin", "add", "Feira", "abc", "--type", "expense")
        self.assertIn("Invalid input", str(ctx.exception))

    def test_invalid_tz_reports_user_error(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            cli.main(["--home", str(self.home), "--tz", "No/Such_Zone", "task", "list"])
        self.assertIn("Invalid --tz value", str(ctx.exception))

    def test_invalid_month_reports_user_error(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            self._run("cal", "--month", "2024-13")
        self.assertIn("Invalid --month value", str(ctx.exception))

    def test_month_outside_calendar_is_a_user_error(self) -> None:
        for args in (
            ("cal", "--month", "0000-05"),
            ("cal", "--month", "2024-01", "--offset", str(-2024 * 12)),
            ("cal", "--month", "9999-12"),
            ("fin", "summary", "--month", "0000-01"),
        ):
            with self.subTest(args=args):
                with self.assertRaises(SystemExit) as ctx:
                    self._run(*args)
                self.assertIn("Invalid --month value", str(ctx.exception))

    def test_html_target_that_is_a_directory_is_a_user_error(self) -> None:
        target = self.home / "already-a-dir"
        target.mkdir()
        with self.assertRaises(SystemExit) as ctx:
            self._run("cal", "--html", str(target), "--no-open")
        self.assertIn("Cannot write HTML output", str(ctx.exception))

    def test_event_times_follow_tz(self) -> None:
        self._run("event", "add", "Voo", "--start", "2024-03-15T01:30:00Z")
        out = io.StringIO()
        with patch("rotina.cli.system_clock", return_value=fixed_clock(NOW)), patch("sys.stdout", out):
            cli.main(["--home", str(self.home), "--tz", "-03:00", "event", "day", "2024-03-14"])
        self.assertIn("14/03/2024 às 22:30", out.getvalue())

    def test_choice_flags_reject_unknown_codes(self) -> None:
        with patch("sys.stderr", io.StringIO()):
            with self.assertRaises(SystemExit):
                self._run("health", "add", "height", "180")
            with self.assertRaises(SystemExit):
                self._run("fin", "add", "Feira", "10", "--type", "expense", "--category", "pets")
        self.assertEqual(self.store.get(DATA_KEYS["HEALTH"]), [])
        self.assertEqual(self.store.get(DATA_KEYS["FINANCE"]), [])

        rc, _ = self._run("health", "add", "spo2", "98")
        self.assertEqual(rc, 0)
        self.assertEqual(self.store.get(DATA_KEYS["HEALTH"])[0]["type"], "spo2")

    def test_cal_text_uses_stored_week_start(self) -> None:
        self._run("event", "add", "Dentista", "--start", "2024-03-15T14:30")
        rc, out = self._run("cal")
        self.assertEqual(rc, 0)
        self.assertIn("Março de 2024", out)
        self.assertTrue(out.splitlines()[1].startswith("Seg"))
        self.assertIn("• Dentista", out)

        self._run("config", "set", "--week-start", "sunday")
        rc, out = self._run("cal", "--offset", "-1")
        self.assertIn("Fevereiro de 2024", out)
        self.assertTrue(out.splitlines()[1].startswith("Dom"))

    def test_cal_html_writes_file_without_opening(self) -> None:
        target = self.home / "out" / "cal.html"
        with patch("rotina.cli.webbrowser.open") as wb:
            rc, out = self._run("cal", "--month", "2024-03", "--html", str(target), "--no-open")
        self.assertEqual(rc, 0)
        self.assertFalse(wb.called)
        self.assertTrue(target.exists())
        self.assertIn("Março de 2024", target.read_text(encoding="utf-8"))

    def test_export_and_clear(self) -> None:
        self._run("task", "add", "Mercado")
        rc, out = self._run("export", "--out-dir", str(self.home / "bk"))
        path = self.home / "bk" / "minha-rotina-backup-2024-03-15.json"
        self.assertTrue(path.exists())
        data = json.loads(path.read_text(encoding="utf-8"))
        self.assertEqual(data["TASKS"][0]["title"], "Mercado")

        with self.assertRaises(SystemExit):
            self._run("clear")
        self.assertEqual(len(self.store.get(DATA_KEYS["TASKS"])), 1)

        rc, _ = self._run("clear", "--yes")
        self.assertEqual(rc, 0)
        self.assertEqual(self.store.get(DATA_KEYS["TASKS"]), [])

    def test_search(self) -> None:
        self._run("task", "add", "Ligar médico")
        self._run("event", "add", "Médico", "--start", "2024-03-20T09:00")
        rc, out = self._run("search", "médico")
        self.assertIn("Encontrados 2 resultados", out)
        self.assertIn("[tarefa]", out)
        self.assertIn("[compromisso]", out)

    def test_config_set_rejects_bad_tz(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            self._run("config", "set", "--tz", "No/Such_Zone")
        self.assertIn("Invalid --tz value", str(ctx.exception))

    def test_pomodoro_counts_down(self) -> None:
        with patch("rotina.cli.time.sleep") as sleep:
            rc, out = self._run("pomodoro", "--minutes", "1")
        self.assertEqual(rc, 0)
        self.assertEqual(sleep.call_count, 60)
        self.assertIn("00:00", out)
        self.assertIn("Tempo do Pomodoro acabou!", out)

    def test_home_from_env(self) -> None:
        with patch.dict(os.environ, {"ROTINA_HOME": str(self.home)}, clear=False), patch(
            "rotina.cli.system_clock", return_value=fixed_clock(NOW)
        ), patch("sys.stdout", io.StringIO()):
            cli.main(["--tz", "UTC", "task", "add", "Via env"])
        self.assertEqual(self.store.get(DATA_KEYS["TASKS"])[0]["title"], "Via env")


if __name__ == "__main__":
    unittest.main(verbosity=2)
