# File: link_scout/report/__init__.py
"""link_scout.report: Форматирование найденных URL для вывода (текст или JSON)."""

from .formatter import RecordFormatter, format_json, format_plain

__all__ = ["RecordFormatter", "format_json", "format_plain"]
