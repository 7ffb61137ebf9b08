#!/usr/bin/env python3
"""
CLI редакционной системы.

Использование:
    python cli.py db init
    python cli.py users add --name "Ann" --role editor --email ann@example.com
    python cli.py similarity a.txt b.pdf c.docx --threshold 0.5 --top 10
    python cli.py analyze ./submissions --language python3 --timeout 300
"""

import asyncio
import shutil
import tempfile
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from editorial.infrastructure.config.logging_config import setup_logging
from editorial.infrastructure.config.settings import get_settings

console = Console()


@click.group()
@click.option('--log-level', default=None, help='Уровень логирования (по умолчанию из настроек)')
def cli(log_level):
    """Editorial CLI."""
    setup_logging(log_level or get_settings().log_level)


# =============================================================================
# База данных и пользователи
# =============================================================================

@cli.group()
def db():
    """Команды для работы с базой данных."""
    pass


@db.command('init')
def db_init():
    """Создать таблицы."""
    from editorial.infrastructure.config.database import build_engine, init_models

    async def _init():
        engine = build_engine()
        try:
            await init_models(engine)
        finally:
            await engine.dispose()

    asyncio.run(_init())
    console.print("✅ [bold green]Таблицы созданы[/bold green]")


@cli.group()
def users():
    """Справочник пользователей."""
    pass


@users.command('add')
@click.option('--name', required=True, help='Имя пользователя')
@click.option('--role', required=True, help='Роль (author, editor, reviewer, content_manager, admin, reader)')
@click.option('--email', default=None, help='Email для уведомлений')
def users_add(name: str, role: str, email):
    """Добавить пользователя."""
    from editorial.domain.entities.user import User
    from editorial.domain.value_objects.role import Role
    from editorial.infrastructure.config.database import build_engine, build_session_factory
    from editorial.infrastructure.directory.sql_user_directory import SqlUserDirectory
    from editorial.shared.exceptions.domain_exceptions import DomainValidationError

    try:
        user = User(name=name, role=Role(role), email=email)
    except (ValueError, DomainValidationError) as e:
        raise click.BadParameter(str(e))

    async def _add():
        engine = build_engine()
        try:
            await SqlUserDirectory(build_session_factory(engine)).add(user)
        finally:
            await engine.dispose()

    asyncio.run(_add())
    console.print(f"✅ Пользователь [bold]{user.name}[/bold] ({user.role.value}): {user.id}")


# =============================================================================
# Проверка оригинальности
# =============================================================================

@cli.command()
@click.argument('files', nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--threshold', default=None, type=float, help='Минимальное сходство пары, 0..1')
@click.option('--top', default=None, type=int, help='Максимум пар в выводе')
def similarity(files, threshold, top):
    """
    Сравнить локальные файлы по TF-IDF.

    Примеры:
        python cli.py similarity essay1.txt essay2.docx --threshold 0.3
    """
    from editorial.application.analysis.similarity_engine import SimilarityEngine, SourceDocument
    from editorial.application.analysis.text_extraction import extract_text
    from editorial.shared.exceptions.domain_exceptions import DomainValidationError

    settings = get_settings()
    documents = [
        SourceDocument(doc_id=path.name, filename=path.name, text=extract_text(path.name, path.read_bytes()))
        for path in files
    ]
    engine = SimilarityEngine(
        terms_per_document=settings.similarity_terms_per_document,
        max_chars=settings.similarity_max_chars,
        max_top=settings.similarity_max_top,
    )
    try:
        result = engine.compare(
            documents,
            threshold=settings.similarity_default_threshold if threshold is None else threshold,
            top=settings.similarity_default_top if top is None else top,
        )
    except DomainValidationError as e:
        raise click.BadParameter(str(e), param_hint='--threshold')

    console.print(
        f"\n📄 Документов: {len(result.documents)}, "
        f"пар всего: {result.total_pairs}, словарь: {result.vocabulary_size}\n"
    )
    if not result.pairs:
        console.print("[yellow]Пар выше порога не найдено[/yellow]\n")
        return

    table = Table(title="Похожие пары")
    table.add_column("A")
    table.add_column("B")
    table.add_column("Сходство", justify="right")
    for pair in result.pairs:
        table.add_row(pair.a, pair.b, f"{pair.score:.4f}")
    console.print(table)


@cli.command()
@click.argument('directory', type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option('--language', default=None, help='Языковой профиль инструмента')
@click.option('--timeout', default=None, type=float, help='Таймаут в секундах')
def analyze(directory: Path, language, timeout):
    """
    Запустить внешний инструмент на локальном каталоге работ.

    Примеры:
        python cli.py analyze ./homework --language java --timeout 300
    """
    from editorial.application.analysis.csv_summary import summarize_report
    from editorial.application.analysis.external_orchestrator import locate_report_dir
    from editorial.infrastructure.container import build_analysis_tool
    from editorial.shared.exceptions.infrastructure_exceptions import ExternalToolError

    settings = get_settings()
    tool = build_analysis_tool(settings)
    language = language or settings.analysis_default_language
    timeout = timeout or settings.analysis_timeout_seconds

    async def _run() -> dict:
        work_root = Path(tempfile.mkdtemp(prefix="analysis-cli-"))
        try:
            submissions = work_root / "submissions"
            await asyncio.to_thread(shutil.copytree, directory, submissions)
            await tool.run(work_root, submissions, language, settings.analysis_threads, timeout)
            report_dir = await asyncio.to_thread(locate_report_dir, work_root)
            return await asyncio.to_thread(summarize_report, report_dir, settings.summary_pair_limit)
        finally:
            await asyncio.to_thread(shutil.rmtree, work_root, True)

    console.print(f"\n🚀 [bold green]Анализ[/bold green] {directory} ({language}, таймаут {timeout}s)\n")
    try:
        summary = asyncio.run(_run())
    except ExternalToolError as e:
        console.print(f"[bold red]Ошибка инструмента:[/bold red] {e}")
        if e.stderr_tail:
            console.print(e.stderr_tail)
        raise SystemExit(1)

    if "notice" in summary:
        console.print(f"[yellow]Сводка недоступна: {summary['notice']}[/yellow]\n")
        return

    console.print(f"Максимум: {summary.get('max_similarity')}, среднее: {summary.get('avg_similarity')}")
    table = Table(title="Пары")
    table.add_column("A")
    table.add_column("B")
    table.add_column("Сходство", justify="right")
    for pair in summary.get("pairs", []):
        table.add_row(str(pair.get("a")), str(pair.get("b")), str(pair.get("similarity")))
    console.print(table)


if __name__ == '__main__':
    cli()
