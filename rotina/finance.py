# rotina/finance.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional

from .collection import Record, append_record, delete_record, iso_now, records
from .store import DATA_KEYS, RecordStore
from .util.timeparse import parse_date_value
from .util.tz import Clock
from .validate import next_record_id, optional_text, require_amount, require_choice, require_text

KEY = DATA_KEYS["FINANCE"]
TRANSACTION_TYPES = ("income", "expense")
CATEGORIES = ("salary", "food", "transport", "health", "entertainment", "other")
RECENT_SHOWN = 10


@dataclass(frozen=True)
class MonthlySummary:
    year: int
    month: int
    income: float
    expenses: float

    @property
    def balance(self) -> float:
        return self.income - self.expenses


def add_transaction(
    store: RecordStore,
    *,
    description: str,
    amount: Any,
    tx_type: str,
    now: Clock,
    category: Optional[str] = None,
    date: Optional[str] = None,
) -> Record:
    at = now()
    tx = {
        "id": next_record_id(records(store, KEY), at),
        "description": require_text(description, "description"),
        "amount": require_amount(amount),
        "type": require_choice(tx_type, "type", TRANSACTION_TYPES),
        "category": optional_text(category) or "other",
        "date": optional_text(date) or at.date().isoformat(),
        "created_at": iso_now(at),
    }
    return append_record(store, KEY, tx)


def delete_transaction(store: RecordStore, tx_id: Any) -> bool:
    return delete_record(store, KEY, tx_id)


def _amount(t: Record) -> float:
    v = t.get("amount")
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return float(v)
    return 0.0


def monthly_summary(store: RecordStore, year: int, month: int) -> MonthlySummary:
    income = 0.0
    expenses = 0.0
    for t in records(store, KEY):
        d = parse_date_value(t.get("date"))
        if d is None or d.year != year or d.month != month:
            continue
        if t.get("type") == "income":
            income += _amount(t)
        elif t.get("type") == "expense":
            expenses += _amount(t)
    return MonthlySummary(year=year, month=month, income=income, expenses=expenses)


def filter_transactions(store: RecordStore, flt: str = "all") -> List[Record]:
    txs = records(store, KEY)
    if flt == "all":
        return txs
    return [t for t in txs if t.get("type") == flt]


def recent_transactions(txs: List[Record], limit: int = RECENT_SHOWN) -> List[Record]:
    """Last `limit` transactions, newest first."""
    if limit <= 0:
        return []
    return list(reversed(txs[-limit:]))
