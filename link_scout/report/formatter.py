# link_scout/report/formatter.py

"""
Представление LinkRecord в виде строки вывода.

Две кодировки, одна запись на строку:

* текст: ``<url>`` с необязательными ``[source: <kind>]`` и ``[from: <where>]``;
* JSON: ``{"Source": ..., "URL": ..., "Where": ...}``.

Пример:
```python
from link_scout.report import RecordFormatter
fmt = RecordFormatter("plain", show_source=True)
print(fmt(record))   # http://example.com/a [source: href]
```
"""
from __future__ import annotations

import json
from dataclasses import dataclass

from link_scout.crawler.models import LinkRecord


def format_plain(record: LinkRecord, show_source: bool = False, show_where: bool = False) -> str:
    """Строка с URL и, по желанию, источником и страницей-источником."""
    out = record.url
    if show_source:
        out += f" [source: {record.source.value}]"
    if show_where:
        out += f" [from: {record.where}]"
    return out


def format_json(record: LinkRecord) -> str:
    """Компактный JSON-объект с полями Source, URL, Where."""
    return json.dumps(record.to_dict(), ensure_ascii=False, separators=(",", ":"))


@dataclass(frozen=True, slots=True)
class RecordFormatter:
    """Форматтер, выбранный по опциям вывода."""

    output_format: str = "plain"
    show_source: bool = False
    show_where: bool = False

    @classmethod
    def from_config(cls, config) -> RecordFormatter:
        return cls(config.output_format, config.show_source, config.show_where)

    def __call__(self, record: LinkRecord) -> str:
        if self.output_format == "json":
            return format_json(record)
        return format_plain(record, self.show_source, self.show_where)
