# rotina/view.py
"""Plain-text views over stored records and month grids.

Every function here is stateless: records in, display string out.
Dates, times and money are formatted the pt-BR way.
"""

from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Optional, Sequence

from .calendar_grid import MonthCursor
from .finance import MonthlySummary
from .model import MonthGrid, WeekStart
from .util.timeparse import parse_timestamp
from .util.tz import local_naive

Record = Dict[str, Any]

PRIORITY_LABELS = {"low": "Baixa", "medium": "Média", "high": "Alta"}
HEALTH_METRIC_LABELS = {
    "weight": "Peso",
    "glucose": "Glicose",
    "spo2": "SpO2",
    "bpm": "BPM",
    "pressure": "Pressão",
}
TRANSACTION_CATEGORY_LABELS = {
    "salary": "Salário",
    "food": "Alimentação",
    "transport": "Transporte",
    "health": "Saúde",
    "entertainment": "Entretenimento",
    "other": "Outro",
}
WEEKDAY_ABBR = ("Seg", "Ter", "Qua", "Qui", "Sex", "Sáb", "Dom")  # Monday first

MAX_EVENTS_PER_DAY = 3
CELL_WIDTH = 16


def _ts(value: Any, tz: Optional[dt.tzinfo]) -> Optional[dt.datetime]:
    ts = parse_timestamp(value)
    return local_naive(ts, tz) if ts is not None else None


def format_date(value: Any, tz: Optional[dt.tzinfo] = None) -> str:
    if not value:
        return ""
    ts = _ts(value, tz)
    return ts.strftime("%d/%m/%Y") if ts is not None else str(value)


def format_time(value: Any, tz: Optional[dt.tzinfo] = None) -> str:
    if not value:
        return ""
    ts = _ts(value, tz)
    return ts.strftime("%H:%M") if ts is not None else str(value)


def format_datetime(value: Any, tz: Optional[dt.tzinfo] = None) -> str:
    if not value:
        return ""
    return f"{format_date(value, tz)} às {format_time(value, tz)}"


def format_currency(amount: float) -> str:
    sign = "-" if amount < 0 else ""
    whole = f"{abs(amount):,.2f}"  # 1,234.56
    return f"{sign}R$ " + whole.replace(",", "_").replace(".", ",").replace("_", ".")


def priority_text(priority: Any) -> str:
    return PRIORITY_LABELS.get(priority, str(priority or ""))


def health_metric_text(metric_type: Any) -> str:
    return HEALTH_METRIC_LABELS.get(metric_type, str(metric_type or ""))


def transaction_category_text(category: Any) -> str:
    return TRANSACTION_CATEGORY_LABELS.get(category, str(category or ""))


def _join(lines: List[str], empty: str) -> str:
    return "\n".join(lines) if lines else empty


def render_tasks(
    tasks: Sequence[Record], *, empty: str = "Nenhuma tarefa.", tz: Optional[dt.tzinfo] = None
) -> str:
    lines = []
    for t in tasks:
        mark = "x" if t.get("completed") else " "
        line = f"[{mark}] #{t.get('id')} {t.get('title') or ''} ({priority_text(t.get('priority'))})"
        if t.get("due"):
            line += f" 📅 {format_date(t.get('due'), tz)}"
        if t.get("project"):
            line += f" @{t.get('project')}"
        lines.append(line)
        if t.get("notes"):
            lines.append(f"      {t.get('notes')}")
        if t.get("completed") and t.get("completed_at"):
            lines.append(f"      ✅ Concluída em {format_datetime(t.get('completed_at'), tz)}")
    return _join(lines, empty)


def render_events(
    events: Sequence[Record], *, empty: str = "Nenhum compromisso agendado.", tz: Optional[dt.tzinfo] = None
) -> str:
    lines = []
    for e in events:
        line = f"#{e.get('id')} {e.get('title') or ''} 📅 {format_datetime(e.get('start'), tz)}"
        if e.get("end"):
            line += f" - {format_time(e.get('end'), tz)}"
        lines.append(line)
        if e.get("location"):
            lines.append(f"      📍 {e.get('location')}")
    return _join(lines, empty)


def render_event_detail(e: Record, tz: Optional[dt.tzinfo] = None) -> str:
    lines = [
        str(e.get("title") or ""),
        f"📅 Início: {format_datetime(e.get('start'), tz)}",
        f"⏰ Fim: {format_datetime(e.get('end'), tz)}",
    ]
    if e.get("location"):
        lines.append(f"📍 Local: {e.get('location')}")
    reminders = e.get("reminders") or []
    if reminders:
        lines.append(f"🔔 Lembretes: {', '.join(str(r) for r in reminders)} min antes")
    return "\n".join(lines)


def render_medications(meds: Sequence[Record], *, empty: str = "Nenhuma medicação cadastrada.") -> str:
    lines = []
    for m in meds:
        times = ", ".join(m.get("times") or [])
        line = f"#{m.get('id')} 💊 {m.get('name') or ''} - {m.get('dose') or ''} | ⏰ {times}"
        if m.get("start_date"):
            line += f" | Início: {format_date(m.get('start_date'))}"
        lines.append(line)
    return _join(lines, empty)


def render_health(metrics: Sequence[Record], *, empty: str = "Nenhuma métrica registrada ainda.") -> str:
    lines = []
    for m in metrics:
        line = f"#{m.get('id')} {health_metric_text(m.get('type'))}: {m.get('value')} 📅 {format_date(m.get('date'))}"
        lines.append(line)
        if m.get("notes"):
            lines.append(f"      {m.get('notes')}")
    return _join(lines, empty)


def render_transactions(txs: Sequence[Record], *, empty: str = "Nenhuma transação encontrada.") -> str:
    lines = []
    for t in txs:
        sign = "+" if t.get("type") == "income" else "-"
        amount = t.get("amount") if isinstance(t.get("amount"), (int, float)) else 0.0
        lines.append(
            f"#{t.get('id')} {t.get('description') or ''} • 📅 {format_date(t.get('date'))}"
            f" • {transaction_category_text(t.get('category'))} • {sign}{format_currency(float(amount))}"
        )
    return _join(lines, empty)


def render_finance_summary(s: MonthlySummary) -> str:
    return "\n".join(
        [
            f"Saldo: {format_currency(s.balance)}",
            f"Receitas: {format_currency(s.income)}",
            f"Despesas: {format_currency(s.expenses)}",
        ]
    )


def weekday_header(week_starts_on: WeekStart) -> List[str]:
    first = week_starts_on.first_weekday
    return [WEEKDAY_ABBR[(first + i) % 7] for i in range(7)]


def _fit(s: str, width: int) -> str:
    return s if len(s) <= width else s[: width - 1] + "…"


def render_month_grid(grid: MonthGrid) -> str:
    """Text table of a month grid: one row of day numbers per week, then up
    to three event titles per day. Today is starred; padding days are
    parenthesized."""
    w = CELL_WIDTH
    out = [MonthCursor(grid.year, grid.month).label()]
    out.append("|".join(h.ljust(w) for h in weekday_header(grid.week_starts_on)))
    for week in grid.weeks():
        nums = []
        for c in week:
            n = str(c.calendar_date.day)
            if not c.is_in_reference_month:
                n = f"({n})"
            if c.is_today:
                n = f"*{n}"
            nums.append(n.ljust(w))
        out.append("|".join(nums))
        depth = max((min(len(c.events), MAX_EVENTS_PER_DAY + 1) for c in week), default=0)
        for row in range(depth):
            cols = []
            for c in week:
                text = ""
                if row < MAX_EVENTS_PER_DAY and row < len(c.events):
                    text = "• " + c.events[row].title
                elif row == MAX_EVENTS_PER_DAY and len(c.events) > MAX_EVENTS_PER_DAY:
                    text = f"+{len(c.events) - MAX_EVENTS_PER_DAY} mais"
                cols.append(_fit(text, w).ljust(w))
            out.append("|".join(cols))
    if grid.dropped_event_count:
        out.append(f"({grid.dropped_event_count} compromisso(s) com data inválida)")
    return "\n".join(out)
