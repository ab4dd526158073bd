"""
Модуль для загрузки и валидации конфигурации краулера LinkScout.
Используется Pydantic для описания схемы и проверки данных.

Значения берутся из необязательного YAML/JSON файла, затем поверх них
накладываются опции командной строки (см. :func:`build_config`).
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Dict, Literal, Mapping, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from link_scout.errors import ConfigurationError

HEADER_SEPARATOR = ";;"


def parse_headers(raw: str) -> Dict[str, str]:
    """
    Разбирает строку вида ``"Cookie: a=b;;Referer: http://x/"`` в словарь.

    Пустая строка означает отсутствие пользовательских заголовков.
    """
    if not raw:
        return {}
    if ":" not in raw:
        raise ConfigurationError(
            "headers not formatted properly (no colon to separate header and value)"
        )
    headers: Dict[str, str] = {}
    for chunk in raw.split(HEADER_SEPARATOR):
        if not chunk.strip():
            continue
        name, sep, value = chunk.partition(":")
        if not sep or not name.strip():
            raise ConfigurationError(f"header {chunk.strip()!r} is not in 'Name: Value' form")
        headers[name.strip()] = value.strip()
    return headers


class CrawlerConfig(BaseModel):
    """Конфигурация одного запуска краулера (общая для всех seed URL)."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    inside: bool = Field(False, description="Следовать только по ссылкам внутри пути seed URL.")
    threads: int = Field(16, ge=1, description="Число параллельных загрузок в сессии.")
    max_depth: int = Field(3, ge=0, description="Максимальная глубина обхода ссылок.")
    max_size_kb: int = Field(-1, ge=-1, description="Лимит размера страницы в КБ (-1 = без лимита).")
    insecure: bool = Field(False, description="Отключить проверку TLS.")
    subs: bool = Field(False, description="Включать поддомены в область обхода.")
    output_format: Literal["plain", "json"] = Field("plain", description="Формат вывода.")
    show_source: bool = Field(False, description="Показывать тип источника (href, form, script…).")
    show_where: bool = Field(False, description="Показывать страницу, на которой найден URL.")
    headers: Dict[str, str] = Field(default_factory=dict, description="Пользовательские заголовки.")
    unique: bool = Field(False, description="Выводить только уникальные URL.")
    proxy: Optional[str] = Field(None, description="URL прокси-сервера.")
    timeout: int = Field(360, ge=-1, description="Таймаут обхода одного seed URL (секунд, -1 = без лимита).")
    disable_redirects: bool = Field(False, description="Не следовать HTTP-редиректам.")
    crawl_js: bool = Field(False, description="Искать URL внутри JavaScript-файлов.")
    wayback: bool = Field(False, description="Добавлять URL из Wayback Machine как seed.")
    request_timeout: float = Field(10.0, gt=0, description="Таймаут на один запрос (секунд).")
    user_agent: Optional[str] = Field(None, min_length=1, description="Заголовок User-Agent.")

    @field_validator("headers", mode="before")
    def _parse_raw_headers(cls, v: Any) -> Any:
        if v is None:
            return {}
        if isinstance(v, str):
            return parse_headers(v)
        return v

    @field_validator("max_size_kb")
    def _check_size(cls, v: int) -> int:
        if v == 0:
            raise ValueError("max_size_kb must be -1 (unlimited) or a positive number")
        return v

    @field_validator("timeout")
    def _check_timeout(cls, v: int) -> int:
        if v == 0:
            raise ValueError("timeout must be -1 (unlimited) or a positive number of seconds")
        return v

    @property
    def max_body_size(self) -> Optional[int]:
        """Лимит тела ответа в байтах или None, если лимита нет."""
        return None if self.max_size_kb == -1 else self.max_size_kb * 1024

    @property
    def session_timeout(self) -> Optional[float]:
        """Таймаут сессии в секундах или None, если таймер отключён."""
        return None if self.timeout == -1 else float(self.timeout)

    @property
    def host_override(self) -> Optional[str]:
        """Значение заголовка Host, если он был задан пользователем."""
        for name, value in self.headers.items():
            if name.lower() == "host" and value:
                return value
        return None


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> dict[str, Any]:
    """
    Читает YAML или JSON и возвращает словарь значений по умолчанию.
    Без пути возвращает пустой словарь; для отсутствующего файла FileNotFoundError.
    """
    if path is None:
        return {}
    path_obj = Path(path).expanduser().resolve()
    if not path_obj.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _read_yaml(path_obj)
    if suffix == ".json":
        return _read_json(path_obj)
    raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")


def build_config(
    file_values: Optional[Mapping[str, Any]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> CrawlerConfig:
    """
    Собирает CrawlerConfig: значения из файла, поверх них опции CLI.
    Опции со значением None не переопределяют файл.
    """
    data: dict[str, Any] = dict(file_values or {})
    for key, value in (overrides or {}).items():
        if value is not None:
            data[key] = value
    return CrawlerConfig(**data)


__all__ = ["CrawlerConfig", "parse_headers", "load_config", "build_config"]
