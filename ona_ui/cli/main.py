"""Click entry point of the ``ona-ui`` command."""

import asyncio
import sys
from pathlib import Path

import click
from dotenv import load_dotenv

from ona_ui.core.database import async_session_maker, create_all, drop_all, engine
from ona_ui.core.logging_config import setup_logging
from ona_ui.seeders import run_seeders
from ona_ui.server.services.batch_upload import BatchUploadService
from ona_ui.server.services.files import FileService

from .config_check import check_environment, check_services, summarize
from .manifest import load_manifest

STATUS_COLORS = {"ok": "green", "skipped": "yellow", "missing": "red", "invalid": "red", "failed": "red"}


@click.group()
def cli():
    """Ona UI backend tools."""
    # validate-config reads os.environ, so expose .env there too
    load_dotenv()
    setup_logging()


async def _seed(fresh: bool):
    if fresh:
        await drop_all(engine)
    await create_all(engine)
    async with async_session_maker() as session:
        return await run_seeders(session)


@cli.command()
@click.option("--fresh", is_flag=True, help="Drop and recreate every table before seeding")
def seed(fresh):
    """Insert the deterministic demo catalog, users and licenses."""
    if fresh:
        click.confirm("This drops every table. Continue?", abort=True)
    counts = asyncio.run(_seed(fresh))
    for name, count in counts.items():
        click.echo(f"  {name:<20} {count}")
    click.secho(f"Seeded {sum(counts.values())} rows", fg="green")


@cli.command("validate-config")
@click.option("--skip-services", is_flag=True, help="Only check environment variables")
def validate_config(skip_services):
    """Check required environment variables and ping external services."""
    results = check_environment()
    if not skip_services:
        results.extend(asyncio.run(check_services()))

    for result in results:
        value = f" = {result.value}" if result.value else ""
        click.echo(
            f"{click.style(result.status.upper().ljust(8), fg=STATUS_COLORS[result.status])} "
            f"{result.name}{value}  {result.message}"
        )

    summary = summarize(results)
    click.echo(", ".join(f"{count} {status}" for status, count in sorted(summary.items())))
    if not all(result.passed for result in results):
        click.secho("Configuration is incomplete", fg="red")
        sys.exit(1)
    click.secho("Configuration is valid", fg="green")


async def _upload(manifest_path: Path, skip_existing: bool, concurrency: int):
    request = load_manifest(manifest_path, skip_existing, concurrency)
    async with async_session_maker() as session:
        return await BatchUploadService(FileService(session)).upload(request)


@cli.command("upload-assets")
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--skip-existing/--no-skip-existing", default=True, help="Skip files whose hash is already stored")
@click.option("--concurrency", type=click.IntRange(1, 10), default=10, show_default=True)
def upload_assets(manifest, skip_existing, concurrency):
    """Upload the build assets listed in MANIFEST."""
    try:
        result = asyncio.run(_upload(manifest, skip_existing, concurrency))
    except (ValueError, FileNotFoundError) as e:
        raise click.ClickException(str(e)) from e

    click.echo(
        f"Uploaded {result.total_uploaded}, skipped {result.total_skipped}, "
        f"{result.total_size} bytes in {result.upload_duration:.2f}s"
    )
    for error in result.errors:
        click.secho(f"  {error}", fg="red")
    if result.errors:
        sys.exit(1)
