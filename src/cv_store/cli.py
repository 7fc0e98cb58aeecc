# cli.py
import asyncio
import logging
from pathlib import Path

import click

from cv_store.adapters.base import CvId
from cv_store.config.settings import Settings, get_settings
from cv_store.controller import CvController
from cv_store.schemas import CvFile
from cv_store.storage import create_storage

logger = logging.getLogger(__name__)


def _settings(ctx: click.Context) -> Settings:
    return ctx.obj["settings"]


def _controller(ctx: click.Context) -> CvController:
    return CvController(create_storage(_settings(ctx)))


def _parse_id(controller: CvController, raw: str) -> CvId:
    """Local ids are integers, S3 ids are object keys."""
    if controller.storage.backend != "local":
        return raw
    try:
        return int(raw)
    except ValueError:
        raise click.BadParameter(f"local CV ids are integers, got '{raw}'", param_hint="CV_ID")


def _show(controller: CvController) -> None:
    for line in controller.render():
        click.echo(line)


def _fail_on_error(ctx: click.Context, controller: CvController) -> None:
    if controller.error:
        click.echo(controller.error, err=True)
        ctx.exit(1)


@click.group()
@click.option("--backend", default=None, help="Override the configured storage backend (local, s3, presigned)")
@click.pass_context
def cli(ctx, backend):
    """CLI commands for managing stored CVs and running the signing backend"""
    settings = get_settings()
    if backend:
        settings = Settings(**{**settings.model_dump(), "storage_backend": backend})
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    ctx.obj = {"settings": settings}


@cli.command(name="list")
@click.pass_context
def list_command(ctx):
    """List stored CVs"""
    controller = _controller(ctx)
    asyncio.run(controller.refresh())
    _fail_on_error(ctx, controller)
    _show(controller)


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def upload(ctx, path):
    """Upload a CV file"""
    controller = _controller(ctx)
    cv_id = asyncio.run(controller.upload(CvFile.from_path(path)))
    _fail_on_error(ctx, controller)
    click.echo(f"Uploaded {path.name} as {cv_id}")
    _show(controller)


@cli.command(name="add-samples")
@click.pass_context
def add_samples(ctx):
    """Upload three sample CVs"""
    controller = _controller(ctx)
    asyncio.run(controller.add_samples())
    _fail_on_error(ctx, controller)
    _show(controller)


@cli.command()
@click.argument("cv_id")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Where to write the file (defaults to the CV's name)")
@click.pass_context
def download(ctx, cv_id, output):
    """Download a CV by id"""
    controller = _controller(ctx)
    parsed_id = _parse_id(controller, cv_id)
    record = asyncio.run(controller.download(parsed_id))
    _fail_on_error(ctx, controller)
    if record is None or record.blob is None:
        click.echo(f"CV {cv_id} not found", err=True)
        ctx.exit(1)

    target = output or Path(record.name or "cv")
    target.write_bytes(record.blob)
    click.echo(f"Saved {record.name} ({len(record.blob)} bytes) to {target}")


@cli.command()
@click.argument("cv_id")
@click.pass_context
def delete(ctx, cv_id):
    """Delete a CV by id"""
    controller = _controller(ctx)
    parsed_id = _parse_id(controller, cv_id)
    asyncio.run(controller.delete(parsed_id))
    _fail_on_error(ctx, controller)
    click.echo(f"Deleted {cv_id}")


@cli.command()
@click.pass_context
def show_config(ctx):
    """Show current configuration"""
    settings = _settings(ctx)

    click.echo("Current Configuration:")
    click.echo(f"  Storage Backend: {settings.storage_backend}")
    click.echo(f"  Local Database: {settings.local_db_path}")
    click.echo(f"  AWS Region: {settings.aws_region}")
    click.echo(f"  S3 Bucket: {settings.s3_bucket}")
    click.echo(f"  S3 Prefix: {settings.s3_prefix}")
    click.echo(f"  S3 List Filter: {settings.s3_list_filter}")
    click.echo(f"  S3 Delete Enabled: {settings.s3_delete_enabled}")
    click.echo(f"  Signing Backend: {settings.api_base_url}")


@cli.command()
@click.option("--host", default="0.0.0.0", help="Interface to bind")
@click.option("--port", type=int, default=None, help="Port to listen on (defaults to the configured port)")
@click.pass_context
def serve(ctx, host, port):
    """Run the signing backend"""
    import uvicorn
    from cv_store.server.main import create_app

    settings = _settings(ctx)
    app = create_app(settings)
    port = port or settings.port
    logger.info(f"API listening on http://localhost:{port}")
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    cli()
