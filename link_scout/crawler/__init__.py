"""link_scout.crawler: Обход одного seed URL."""
