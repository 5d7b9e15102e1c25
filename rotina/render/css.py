# rotina/render/css.py
from __future__ import annotations

CSS_BLOCK = r'''  :root {
    --bg: #0f1115;
    --surface: #171a21;
    --line: #2a2f3a;
    --text: #e6e8ee;
    --muted: #7c8494;
    --accent: #6aa9ff;
  }
  body {
    margin: 0;
    font-family: system-ui, -apple-system, "Segoe UI", sans-serif;
    background: var(--bg);
    color: var(--text);
  }
  .card { max-width: 1100px; margin: 24px auto; background: var(--surface); border: 1px solid var(--line); border-radius: 10px; }
  .card-h { display: flex; justify-content: space-between; align-items: baseline; padding: 12px 16px; border-bottom: 1px solid var(--line); }
  .card-h small { color: var(--muted); }
  .calendar { width: 100%; border-collapse: collapse; table-layout: fixed; }
  .calendar th { padding: 6px; color: var(--muted); font-weight: 500; border-bottom: 1px solid var(--line); }
  .day { vertical-align: top; height: 96px; padding: 4px 6px; border: 1px solid var(--line); }
  .day.other-month { opacity: 0.45; }
  .day.today { outline: 2px solid var(--accent); outline-offset: -2px; }
  .day-number { font-size: 12px; color: var(--muted); }
  .event-item { font-size: 12px; white-space: nowrap; overflow: hidden; text-overflow: ellipsis; }
  .event-dot { display: inline-block; width: 6px; height: 6px; border-radius: 50%; background: var(--accent); margin-right: 4px; }
  .muted { color: var(--muted); font-size: 11px; }
'''
