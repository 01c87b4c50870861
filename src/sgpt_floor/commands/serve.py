"""HTTP API command."""

import click

from .base import ensure_initialized, get_settings


@click.command()
@click.option("--host", default="127.0.0.1", help="Interface to bind (default: 127.0.0.1)")
@click.option("--port", "-p", default=8000, type=int, help="Port to bind (default: 8000)")
@click.option("--reload", is_flag=True, help="Restart on code changes")
@click.pass_context
def serve(ctx: click.Context, host: str, port: int, reload: bool):
    """Serve the floor API for coach tablets.

    Tablets post check-ins, completed sets, RPE and pain reports to
    /sessions and read the equipment board from /equipment. The decision
    log and coach alerts are under /decisions and /alerts. Interactive
    docs are at /docs.

    The API and the CLI can run against the same database at once.

    Examples:

        # Coach desk only
        sgpt-floor serve

        # Tablets on the gym wifi
        sgpt-floor serve --host 0.0.0.0 --port 8080
    """
    ensure_initialized(ctx)
    settings = get_settings(ctx)

    import uvicorn

    from ..web import create_app

    base = f"http://{host}:{port}"
    click.echo(click.style(f"sgpt-floor API on {base}", fg="green"))
    click.echo(f"  Database: {settings.db_path}")
    click.echo(f"  Docs:     {base}/docs")
    if host == "0.0.0.0":
        click.echo("  Listening on every interface; point tablets at this machine's address.")
    click.echo("Press Ctrl+C to stop.")

    # Reload mode imports the factory by path and rebuilds settings from the environment
    uvicorn.run(
        "sgpt_floor.web:create_app" if reload else create_app(settings),
        host=host,
        port=port,
        reload=reload,
        factory=reload,
        log_level=settings.log_level.lower(),
    )
