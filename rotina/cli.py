from __future__ import annotations

import argparse
import datetime as dt
import os
import sys
import time
import webbrowser
from pathlib import Path
from typing import Callable, Optional

from . import backup, events, finance, health, medications, tasks
from .api import month_grid_from_store
from .calendar_grid import InvalidReferenceDate, MonthCursor
from .config import load_settings, save_settings
from .model import WeekStart
from .pomodoro import Pomodoro
from .render import build_calendar_html
from .store import RecordStore, default_home
from .util.console import eprint
from .util.timeparse import parse_date_yyyy_mm_dd, parse_month_yyyy_mm
from .util.tz import Clock, local_naive, normalize_tz_name, resolve_tz, system_clock
from .validate import RecordValidationError
from . import view

Handler = Callable[[argparse.Namespace, "Ctx"], int]


class Ctx:
    def __init__(self, store: RecordStore, tz: dt.tzinfo, now: Clock) -> None:
        self.store = store
        self.tz = tz
        self.now = now

    def today(self) -> dt.date:
        return local_naive(self.now(), self.tz).date()


def _not_found(kind: str, record_id: int) -> int:
    eprint(f"[rotina] WARN: {kind} #{record_id} not found")
    return 1


# --- tasks --------------------------------------------------------------------


def _task_add(ns: argparse.Namespace, ctx: Ctx) -> int:
    t = tasks.add_task(
        ctx.store,
        title=ns.title,
        notes=ns.notes,
        due=ns.due,
        priority=ns.priority,
        project=ns.project,
        now=ctx.now,
    )
    print(f"✓ Tarefa adicionada! #{t['id']}")
    return 0


def _task_list(ns: argparse.Namespace, ctx: Ctx) -> int:
    items = tasks.filter_tasks(ctx.store, ns.filter, now=ctx.now, tz=ctx.tz)
    pending, completed = tasks.split_pending_completed(items)
    print(view.render_tasks(pending, empty="Todas as tarefas concluídas! 🎊", tz=ctx.tz))
    if completed:
        print("")
        print(view.render_tasks(completed, tz=ctx.tz))
    return 0


def _task_today(ns: argparse.Namespace, ctx: Ctx) -> int:
    items = tasks.today_tasks(ctx.store, now=ctx.now, tz=ctx.tz)
    print(view.render_tasks(items, empty="Nenhuma tarefa para hoje. 🎉", tz=ctx.tz))
    return 0


def _task_done(ns: argparse.Namespace, ctx: Ctx) -> int:
    if not tasks.complete_task(ctx.store, ns.id, now=ctx.now):
        return _not_found("task", ns.id)
    print("Tarefa concluída! 🎉")
    return 0


def _task_rm(ns: argparse.Namespace, ctx: Ctx) -> int:
    if not tasks.delete_task(ctx.store, ns.id):
        return _not_found("task", ns.id)
    print("Tarefa excluída")
    return 0


# --- events -------------------------------------------------------------------


def _event_add(ns: argparse.Namespace, ctx: Ctx) -> int:
    e = events.add_event(
        ctx.store,
        title=ns.title,
        start=ns.start,
        end=ns.end,
        location=ns.location,
        reminders=ns.reminders,
        now=ctx.now,
    )
    print(f"📅 Compromisso agendado! #{e['id']}")
    return 0


def _event_list(ns: argparse.Namespace, ctx: Ctx) -> int:
    print(view.render_events(events.all_events_sorted(ctx.store, tz=ctx.tz), tz=ctx.tz))
    return 0


def _event_today(ns: argparse.Namespace, ctx: Ctx) -> int:
    items = events.today_events(ctx.store, now=ctx.now, tz=ctx.tz)
    print(view.render_events(items, empty="Nada marcado para hoje. 😊", tz=ctx.tz))
    return 0


def _event_search(ns: argparse.Namespace, ctx: Ctx) -> int:
    items = events.search_events(ctx.store, ns.term)
    print(view.render_events(items, empty="Nenhum compromisso encontrado.", tz=ctx.tz))
    return 0


def _event_day(ns: argparse.Namespace, ctx: Ctx) -> int:
    try:
        day = parse_date_yyyy_mm_dd(ns.date)
    except ValueError as e:
        raise SystemExit(f"Invalid date: {e}")
    items = events.events_on_day(ctx.store, day, tz=ctx.tz)
    print(view.render_events(items, empty="Nenhum evento para este dia.", tz=ctx.tz))
    return 0


def _event_show(ns: argparse.Namespace, ctx: Ctx) -> int:
    e = events.get_event(ctx.store, ns.id)
    if e is None:
        return _not_found("event", ns.id)
    print(view.render_event_detail(e, tz=ctx.tz))
    return 0


def _event_rm(ns: argparse.Namespace, ctx: Ctx) -> int:
    if not events.delete_event(ctx.store, ns.id):
        return _not_found("event", ns.id)
    print("Compromisso excluído")
    return 0


# --- medications --------------------------------------------------------------


def _med_add(ns: argparse.Namespace, ctx: Ctx) -> int:
    m = medications.add_medication(
        ctx.store,
        name=ns.name,
        dose=ns.dose,
        times=ns.times,
        start_date=ns.start_date,
        end_date=ns.end_date,
        now=ctx.now,
    )
    print(f"💊 Medicação adicionada! #{m['id']}")
    return 0


def _med_list(ns: argparse.Namespace, ctx: Ctx) -> int:
    if ns.today:
        items = medications.active_medications(ctx.store, ctx.today())
    else:
        items = medications.list_medications(ctx.store)
    print(view.render_medications(items))
    return 0


def _med_take(ns: argparse.Namespace, ctx: Ctx) -> int:
    if not medications.take_medication(ctx.store, ns.id, now=ctx.now):
        return _not_found("medication", ns.id)
    print("💊 Medicação registrada!")
    return 0


def _med_rm(ns: argparse.Namespace, ctx: Ctx) -> int:
    if not medications.delete_medication(ctx.store, ns.id):
        return _not_found("medication", ns.id)
    print("Medicação excluída")
    return 0


# --- health -------------------------------------------------------------------


def _health_add(ns: argparse.Namespace, ctx: Ctx) -> int:
    m = health.add_metric(
        ctx.store,
        metric_type=ns.type,
        value=ns.value,
        date=ns.date,
        notes=ns.notes,
        now=ctx.now,
    )
    print(f"Métrica de saúde registrada! #{m['id']}")
    return 0


def _health_list(ns: argparse.Namespace, ctx: Ctx) -> int:
    print(view.render_health(health.recent_metrics(ctx.store, ns.limit)))
    return 0


def _health_rm(ns: argparse.Namespace, ctx: Ctx) -> int:
    if not health.delete_metric(ctx.store, ns.id):
        return _not_found("metric", ns.id)
    print("Métrica excluída")
    return 0


# --- finance ------------------------------------------------------------------


def _fin_add(ns: argparse.Namespace, ctx: Ctx) -> int:
    t = finance.add_transaction(
        ctx.store,
        description=ns.description,
        amount=ns.amount,
        tx_type=ns.type,
        category=ns.category,
        date=ns.date,
        now=ctx.now,
    )
    print(f"Transação registrada! #{t['id']}")
    return 0


def _fin_list(ns: argparse.Namespace, ctx: Ctx) -> int:
    items = finance.filter_transactions(ctx.store, ns.filter)
    print(view.render_transactions(finance.recent_transactions(items, ns.limit)))
    return 0


def _fin_summary(ns: argparse.Namespace, ctx: Ctx) -> int:
    cursor = _cursor_from_flag(ns.month, ctx)
    print(cursor.label())
    print(view.render_finance_summary(finance.monthly_summary(ctx.store, cursor.year, cursor.month)))
    return 0


def _fin_rm(ns: argparse.Namespace, ctx: Ctx) -> int:
    if not finance.delete_transaction(ctx.store, ns.id):
        return _not_found("transaction", ns.id)
    print("Transação excluída")
    return 0


# --- calendar -----------------------------------------------------------------


def _cursor_from_flag(month: Optional[str], ctx: Ctx, offset: int = 0) -> MonthCursor:
    # InvalidReferenceDate is a ValueError too
    try:
        if not month:
            cursor = MonthCursor.from_date(ctx.today())
        else:
            cursor = MonthCursor(*parse_month_yyyy_mm(month))
        return cursor.shift(offset)
    except ValueError as e:
        raise SystemExit(f"Invalid --month value: {e}")


def _cal(ns: argparse.Namespace, ctx: Ctx) -> int:
    settings = load_settings(ctx.store)
    try:
        week_start = WeekStart.parse(ns.week_start) if ns.week_start else settings.week_starts_on
    except ValueError as e:
        raise SystemExit(f"Invalid --week-start value: {e}")

    cursor = _cursor_from_flag(ns.month, ctx, ns.offset)
    try:
        grid = month_grid_from_store(ctx.store, cursor, week_start, now=ctx.now, tz=ctx.tz)
    except InvalidReferenceDate as e:
        raise SystemExit(f"Invalid --month value: {e}")

    if not ns.html:
        print(view.render_month_grid(grid))
        return 0

    out_path = Path(ns.html).resolve()
    try:
        out_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise SystemExit(f"Cannot create output directory '{out_path.parent}': {e}")
    try:
        out_path.write_text(build_calendar_html(grid, tz=ctx.tz), encoding="utf-8")
    except OSError as e:
        raise SystemExit(f"Cannot write HTML output '{out_path}': {e}")
    print(str(out_path))

    if not ns.no_open:
        try:
            webbrowser.open("file://" + str(out_path))
        except webbrowser.Error as e:
            eprint(f"[rotina] WARN: could not open browser: {e}")
    return 0


# --- pomodoro -----------------------------------------------------------------


def _pomodoro(ns: argparse.Namespace, ctx: Ctx) -> int:
    if ns.minutes <= 0:
        raise SystemExit("--minutes must be positive")
    p = Pomodoro(duration_s=ns.minutes * 60)
    p.start()
    print("Pomodoro iniciado! 🎯")
    try:
        while p.running:
            time.sleep(1)
            done = p.tick(1)
            sys.stdout.write("\r" + p.display())
            sys.stdout.flush()
            if done:
                sys.stdout.write("\n")
                print("🎉 Tempo do Pomodoro acabou! Hora de uma pausa.")
    except KeyboardInterrupt:
        p.stop()
        sys.stdout.write("\n")
        print("Pomodoro pausado")
        return 130
    return 0


# --- search / backup / config -------------------------------------------------


def _search(ns: argparse.Namespace, ctx: Ctx) -> int:
    results = backup.global_search(ctx.store, ns.term)
    if not results:
        print("Nenhum resultado.")
        return 0
    print(f'Encontrados {len(results)} resultados para "{ns.term}"')
    for r in results:
        label = "tarefa" if r["kind"] == "task" else "compromisso"
        print(f"  [{label}] #{r.get('id')} {r.get('title') or ''}")
    return 0


def _export(ns: argparse.Namespace, ctx: Ctx) -> int:
    out = backup.write_export(ctx.store, ns.out_dir, ctx.today())
    print(str(out))
    print("Dados exportados com sucesso!")
    return 0


def _clear(ns: argparse.Namespace, ctx: Ctx) -> int:
    if not ns.yes:
        raise SystemExit("Refusing to clear all data without --yes")
    backup.clear_all_data(ctx.store)
    print("Todos os dados foram apagados.")
    return 0


def _config_show(ns: argparse.Namespace, ctx: Ctx) -> int:
    s = load_settings(ctx.store)
    print(f"notifications: {'on' if s.notifications_enabled else 'off'}")
    print(f"week_start: {s.week_start}")
    print(f"tz: {s.tz}")
    return 0


def _config_set(ns: argparse.Namespace, ctx: Ctx) -> int:
    s = load_settings(ctx.store)
    if ns.week_start is not None:
        try:
            s.week_start = WeekStart.parse(ns.week_start).value
        except ValueError as e:
            raise SystemExit(f"Invalid --week-start value: {e}")
    if ns.new_tz is not None:
        try:
            resolve_tz(ns.new_tz)
        except ValueError as e:
            raise SystemExit(f"Invalid --tz value: {e}")
        s.tz = normalize_tz_name(ns.new_tz)
    if ns.notifications is not None:
        s.notifications_enabled = ns.notifications == "on"
    save_settings(ctx.store, s)
    return _config_show(ns, ctx)


# --- parser -------------------------------------------------------------------


def _add_id(p: argparse.ArgumentParser) -> None:
    p.add_argument("id", type=int, help="Record id")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="rotina",
        description="Personal organizer: tasks, events, medications, health, finances and a month calendar.",
    )
    ap.add_argument(
        "--home",
        default=None,
        help="Data directory (default: env ROTINA_HOME or ~/.rotina)",
    )
    ap.add_argument(
        "--tz",
        default=os.getenv("ROTINA_TZ"),
        help="Timezone for day boundaries (default: env ROTINA_TZ, then stored setting, then 'local')",
    )
    sub = ap.add_subparsers(dest="command", metavar="COMMAND")
    sub.required = True

    # tasks
    p_task = sub.add_parser("task", help="Manage tasks")
    s_task = p_task.add_subparsers(dest="action", metavar="ACTION")
    s_task.required = True
    p = s_task.add_parser("add", help="Add a task")
    p.add_argument("title")
    p.add_argument("--notes", default=None)
    p.add_argument("--due", default=None, help="Due timestamp, e.g. 2024-03-15T14:30")
    p.add_argument("--priority", default="medium", choices=tasks.PRIORITIES)
    p.add_argument("--project", default=None)
    p.set_defaults(handler=_task_add)
    p = s_task.add_parser("list", help="List tasks")
    p.add_argument("--filter", default="all", help=" | ".join(tasks.TASK_FILTERS) + " | <project> (default: all)")
    p.set_defaults(handler=_task_list)
    s_task.add_parser("today", help="Pending tasks due today").set_defaults(handler=_task_today)
    p = s_task.add_parser("done", help="Mark a task completed")
    _add_id(p)
    p.set_defaults(handler=_task_done)
    p = s_task.add_parser("rm", help="Delete a task")
    _add_id(p)
    p.set_defaults(handler=_task_rm)

    # events
    p_event = sub.add_parser("event", help="Manage events")
    s_event = p_event.add_subparsers(dest="action", metavar="ACTION")
    s_event.required = True
    p = s_event.add_parser("add", help="Schedule an event")
    p.add_argument("title")
    p.add_argument("--start", required=True, help="Start timestamp, e.g. 2024-03-15T14:30")
    p.add_argument("--end", default=None)
    p.add_argument("--location", default=None)
    p.add_argument("--reminders", default=None, help="Comma-separated minutes before, e.g. 10,60")
    p.set_defaults(handler=_event_add)
    s_event.add_parser("list", help="All events by start").set_defaults(handler=_event_list)
    s_event.add_parser("today", help="Events today").set_defaults(handler=_event_today)
    p = s_event.add_parser("search", help="Search title or location")
    p.add_argument("term")
    p.set_defaults(handler=_event_search)
    p = s_event.add_parser("day", help="Events on a date")
    p.add_argument("date", help="YYYY-MM-DD")
    p.set_defaults(handler=_event_day)
    p = s_event.add_parser("show", help="Event details")
    _add_id(p)
    p.set_defaults(handler=_event_show)
    p = s_event.add_parser("rm", help="Delete an event")
    _add_id(p)
    p.set_defaults(handler=_event_rm)

    # medications
    p_med = sub.add_parser("med", help="Manage medications")
    s_med = p_med.add_subparsers(dest="action", metavar="ACTION")
    s_med.required = True
    p = s_med.add_parser("add", help="Add a medication")
    p.add_argument("name")
    p.add_argument("dose")
    p.add_argument("--times", default=None, help="Comma-separated HH:MM, e.g. 08:00,12:00")
    p.add_argument("--start-date", default=None)
    p.add_argument("--end-date", default=None)
    p.set_defaults(handler=_med_add)
    p = s_med.add_parser("list", help="List medications")
    p.add_argument("--today", action="store_true", help="Only medications active today")
    p.set_defaults(handler=_med_list)
    p = s_med.add_parser("take", help="Record an intake")
    _add_id(p)
    p.set_defaults(handler=_med_take)
    p = s_med.add_parser("rm", help="Delete a medication")
    _add_id(p)
    p.set_defaults(handler=_med_rm)

    # health
    p_health = sub.add_parser("health", help="Health metrics")
    s_health = p_health.add_subparsers(dest="action", metavar="ACTION")
    s_health.required = True
    p = s_health.add_parser("add", help="Record a metric")
    p.add_argument("type", choices=health.METRIC_TYPES)
    p.add_argument("value")
    p.add_argument("--date", default=None)
    p.add_argument("--notes", default=None)
    p.set_defaults(handler=_health_add)
    p = s_health.add_parser("list", help="Latest metrics")
    p.add_argument("--limit", type=int, default=health.RECENT_SHOWN)
    p.set_defaults(handler=_health_list)
    p = s_health.add_parser("rm", help="Delete a metric")
    _add_id(p)
    p.set_defaults(handler=_health_rm)

    # finance
    p_fin = sub.add_parser("fin", help="Finances")
    s_fin = p_fin.add_subparsers(dest="action", metavar="ACTION")
    s_fin.required = True
    p = s_fin.add_parser("add", help="Record a transaction")
    p.add_argument("description")
    p.add_argument("amount")
    p.add_argument("--type", required=True, choices=finance.TRANSACTION_TYPES)
    p.add_argument("--category", default=None, choices=finance.CATEGORIES, help="(default: other)")
    p.add_argument("--date", default=None)
    p.set_defaults(handler=_fin_add)
    p = s_fin.add_parser("list", help="Latest transactions, newest first")
    p.add_argument("--filter", default="all", choices=("all",) + finance.TRANSACTION_TYPES)
    p.add_argument("--limit", type=int, default=finance.RECENT_SHOWN)
    p.set_defaults(handler=_fin_list)
    p = s_fin.add_parser("summary", help="Monthly income, expenses and balance")
    p.add_argument("--month", default=None, help="YYYY-MM (default: current month)")
    p.set_defaults(handler=_fin_summary)
    p = s_fin.add_parser("rm", help="Delete a transaction")
    _add_id(p)
    p.set_defaults(handler=_fin_rm)

    # calendar
    p = sub.add_parser("cal", help="Month calendar")
    p.add_argument("--month", default=None, help="YYYY-MM (default: current month)")
    p.add_argument("--offset", type=int, default=0, help="Months to move from --month, e.g. -1 for previous")
    p.add_argument("--week-start", default=None, help="sunday | monday (default: stored setting)")
    p.add_argument("--html", default=None, help="Write an HTML calendar to this path instead of printing")
    p.add_argument("--no-open", action="store_true", help="Do not open the generated HTML in a browser")
    p.set_defaults(handler=_cal)

    p = sub.add_parser("pomodoro", help="Run a pomodoro countdown")
    p.add_argument("--minutes", type=int, default=25)
    p.set_defaults(handler=_pomodoro)

    p = sub.add_parser("search", help="Search task and event titles")
    p.add_argument("term")
    p.set_defaults(handler=_search)

    p = sub.add_parser("export", help="Write a JSON backup of all data")
    p.add_argument("--out-dir", default=".", help="Output directory (default: .)")
    p.set_defaults(handler=_export)

    p = sub.add_parser("clear", help="Delete ALL data")
    p.add_argument("--yes", action="store_true", help="Confirm deletion")
    p.set_defaults(handler=_clear)

    p_cfg = sub.add_parser("config", help="Show or change settings")
    s_cfg = p_cfg.add_subparsers(dest="action", metavar="ACTION")
    s_cfg.required = True
    s_cfg.add_parser("show").set_defaults(handler=_config_show)
    p = s_cfg.add_parser("set")
    p.add_argument("--week-start", default=None)
    p.add_argument("--tz", dest="new_tz", default=None)
    p.add_argument("--notifications", default=None, choices=("on", "off"))
    p.set_defaults(handler=_config_set)

    return ap


def main(argv: list[str] | None = None) -> int:
    ap = build_parser()
    ns = ap.parse_args(argv)

    store = RecordStore(Path(ns.home).expanduser() if ns.home else default_home())
    tz_name = normalize_tz_name(ns.tz or load_settings(store).tz)
    try:
        tzinfo = resolve_tz(tz_name)
    except ValueError as e:
        raise SystemExit(f"Invalid --tz value: {e}")

    ctx = Ctx(store=store, tz=tzinfo, now=system_clock(tzinfo))
    handler: Handler = ns.handler
    try:
        return handler(ns, ctx)
    except RecordValidationError as e:
        raise SystemExit(f"Invalid input: {e}")


if __name__ == "__main__":
    raise SystemExit(main())
