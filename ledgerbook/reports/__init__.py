"""Report execution package."""

from ledgerbook.reports.executor import ReportExecutionError, ReportExecutor, resolve_period

__all__ = ["ReportExecutionError", "ReportExecutor", "resolve_period"]
