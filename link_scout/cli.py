#!/usr/bin/env python3
"""
Точка входа для запуска краулера LinkScout через командную строку.

Команды:
  crawl     Прочитать seed URL из stdin и вывести найденные ссылки
  config    Показать итоговую конфигурацию

Общие опции:
  --config PATH       YAML/JSON файл со значениями по умолчанию
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (только stderr, если не указан)
  --log-format FORMAT Формат логирования

Дополнительно:
  --version, -v       Показать версию LinkScout

Пример:
  cat urls.txt | link-scout crawl -d 2 -s -w --subs
"""
import asyncio
import sys
from pathlib import Path
from typing import Any, Dict, NoReturn, Optional

import click
from pydantic import ValidationError

from link_scout import __version__
from link_scout.config import CrawlerConfig, build_config, load_config, parse_headers
from link_scout.errors import ArchiveError, ConfigurationError
from link_scout.logger import init_logging
from link_scout.seeds import read_seeds
from link_scout.supervisor import CrawlSupervisor

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str) -> NoReturn:
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def make_config(ctx: click.Context, overrides: Dict[str, Any]) -> CrawlerConfig:
    try:
        return build_config(ctx.obj['file_values'], overrides)
    except (ValidationError, ConfigurationError) as e:
        print_error(f'Ошибка конфигурации: {e}')


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='LinkScout, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='YAML/JSON файл со значениями опций по умолчанию.'
)
@click.option(
    '--log-level', 'log_level',
    default='WARNING', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (только stderr, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд LinkScout CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        file_values = load_config(config_path)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['file_values'] = file_values


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.option('--inside', '-i', is_flag=True, help='Следовать только по ссылкам внутри пути seed URL')
@click.option('--threads', '-t', type=int, default=None, help='Число параллельных загрузок [16]')
@click.option('--depth', '-d', 'max_depth', type=int, default=None, help='Глубина обхода [3]')
@click.option('--size', 'max_size_kb', type=int, default=None, help='Лимит размера страницы, КБ [-1]')
@click.option('--insecure', is_flag=True, help='Отключить проверку TLS')
@click.option('--subs', is_flag=True, help='Включать поддомены в область обхода')
@click.option('--json', 'as_json', is_flag=True, help='Вывод в JSON, одна запись на строку')
@click.option('--show-source', '-s', is_flag=True, help='Показывать источник URL (href, form, script…)')
@click.option('--show-where', '-w', is_flag=True, help='Показывать страницу, на которой найден URL')
@click.option(
    '--headers', '-h', 'raw_headers',
    default=None,
    help='Заголовки через две точки с запятой: "Cookie: foo=bar;;Referer: http://example.com/"'
)
@click.option('--unique', '-u', is_flag=True, help='Выводить только уникальные URL')
@click.option('--proxy', default=None, help='URL прокси, например http://127.0.0.1:8080')
@click.option('--timeout', type=int, default=None, help='Таймаут обхода одного seed URL, секунд (-1 = без лимита) [360]')
@click.option('--dr', '--disable-redirects', 'disable_redirects', is_flag=True, help='Не следовать HTTP-редиректам')
@click.option('--crawl-js', is_flag=True, help='Искать URL внутри JavaScript-файлов')
@click.option('--wayback', is_flag=True, help='Добавить URL из Wayback Machine и обойти их')
@click.option('--user-agent', default=None, help='User-Agent (по умолчанию случайный)')
@click.option('--request-timeout', type=float, default=None, help='Таймаут одного запроса, секунд [10]')
@click.pass_context
def crawl(ctx, raw_headers: Optional[str], as_json: bool, **options):
    """Обойти seed URL из stdin и вывести найденные ссылки."""
    overrides: Dict[str, Any] = {k: v for k, v in options.items() if v is not None and v is not False}
    if as_json:
        overrides['output_format'] = 'json'
    if raw_headers is not None:
        try:
            overrides['headers'] = parse_headers(raw_headers)
        except ConfigurationError as e:
            print_error(f'Ошибка разбора заголовков: {e}')
    cfg = make_config(ctx, overrides)

    stdin = click.get_text_stream('stdin')
    if stdin.isatty():
        print_error('No URLs detected. Hint: cat urls.txt | link-scout crawl')

    supervisor = CrawlSupervisor(cfg, click.echo)
    try:
        asyncio.run(supervisor.run(read_seeds(stdin)))
    except ArchiveError as e:
        print_error(f'Ошибка Wayback Machine: {e}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать итоговую конфигурацию в JSON."""
    cfg = make_config(ctx, {})
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
