"""Terminal rendering of pipeline reports, failure summaries and artifacts."""

from wrtforge.monitor.renderer import ReportRenderer

__all__ = ["ReportRenderer"]
