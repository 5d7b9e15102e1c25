"""rotina.render package

HTML output for the month calendar.
"""

from .inline import build_calendar_html

__all__ = ["build_calendar_html"]
