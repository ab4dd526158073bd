# cli.py

"""
Точка входа для запуска LinkScout без установки пакета.

Пример запуска:
    cat urls.txt | python cli.py crawl --depth 2 --show-source
"""
from link_scout.cli import cli

if __name__ == '__main__':
    cli()
