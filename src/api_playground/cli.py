"""CLI entry point for api-playground."""

import asyncio
import json
from pathlib import Path

import click
import yaml

from api_playground.config import get_settings
from api_playground.controller import PlaygroundController
from api_playground.errors import PlaygroundError
from api_playground.logs import configure_logging
from api_playground.parser.curl import parse_curl
from api_playground.parser.detect import dump_descriptor, load_descriptor
from api_playground.parser.infer import to_descriptor
from api_playground.preferences import BASE_URL_KEY, TOKEN_KEY, FilePreferenceStore
from api_playground.store import FileEndpointStore


def _preferences() -> FilePreferenceStore:
    settings = get_settings()
    return FilePreferenceStore(settings.preferences_path, scope=settings.preferences_scope)


def _session(
    descriptor_path: Path,
    base_url: str | None,
    token: str | None,
    params: tuple[str, ...],
    body: str | None,
) -> PlaygroundController:
    """Load a descriptor into a controller and apply one-off overrides."""
    controller = PlaygroundController(preferences=_preferences())
    controller.load(load_descriptor(descriptor_path))

    # Overrides apply to this run only; `config` is what persists them.
    if base_url is not None:
        controller.base_url = base_url
    if token is not None:
        controller.auth_token = token
    for item in params:
        name, sep, value = item.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"expected name=value, got {item!r}", param_hint="-p")
        if not controller.set_parameter_text(name, value):
            raise click.BadParameter(controller.error, param_hint="-p")
    if body is not None:
        controller.set_request_body(body)
    return controller


def session_options(func):
    """Options shared by commands that build a request from a descriptor."""
    func = click.option("--body", default=None, help="Raw JSON request body.")(func)
    func = click.option("-p", "--param", "params", multiple=True, help="Parameter value as name=value (repeatable).")(func)
    func = click.option("--token", default=None, help="Bearer token for this run.")(func)
    func = click.option("--base-url", default=None, help="Base URL for this run.")(func)
    func = click.argument("descriptor", type=click.Path(exists=True, dir_okay=False, path_type=Path))(func)
    return func


@click.group()
def main():
    """API Playground: parse curl commands, build requests and run them through a proxy."""
    configure_logging()


@main.command()
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@click.option("--format", "fmt", default="json", type=click.Choice(["json", "yaml"]), help="Output format.")
@click.option("--infer", is_flag=True, help="Output an endpoint descriptor with inferred parameters.")
@click.option("--save", "page_id", default=None, help="Store the inferred descriptor under this page id.")
@click.option("--title", default="", help="Title for the inferred descriptor.")
def parse(source, fmt: str, infer: bool, page_id: str | None, title: str):
    """Parse a curl command (file or stdin)."""
    try:
        parsed = parse_curl(source.read())
    except PlaygroundError as e:
        raise click.ClickException(str(e)) from e

    if not infer and page_id is None:
        data = parsed.model_dump(mode="json")
        if fmt == "json":
            click.echo(json.dumps(data, indent=2, ensure_ascii=False))
        else:
            click.echo(yaml.safe_dump(data, sort_keys=False, allow_unicode=True), nl=False)
        return

    descriptor, base_url = to_descriptor(parsed, title=title)
    if page_id is not None:
        store = FileEndpointStore(get_settings().store_dir, fmt=fmt)
        try:
            store.save(page_id, descriptor)
        except PlaygroundError as e:
            raise click.ClickException(str(e)) from e
        click.echo(f"Saved {page_id} to {store.directory}", err=True)

    click.echo(dump_descriptor(descriptor, fmt), nl=False)
    if base_url:
        click.echo(f"Base URL: {base_url}", err=True)


@main.command()
@session_options
def curl(descriptor: Path, base_url: str | None, token: str | None, params: tuple[str, ...], body: str | None):
    """Print the curl command for a descriptor and the current values."""
    try:
        controller = _session(descriptor, base_url, token, params, body)
    except PlaygroundError as e:
        raise click.ClickException(str(e)) from e

    command = controller.curl_command()
    if not command:
        raise click.ClickException("Please configure Base URL and API endpoint first")
    click.echo(command)


@main.command()
@session_options
def execute(descriptor: Path, base_url: str | None, token: str | None, params: tuple[str, ...], body: str | None):
    """Send the request through the proxy and print the response envelope."""
    try:
        controller = _session(descriptor, base_url, token, params, body)
    except PlaygroundError as e:
        raise click.ClickException(str(e)) from e

    missing = controller.missing_required
    if missing:
        click.echo(f"Warning: required parameters not set: {', '.join(missing)}", err=True)

    envelope = asyncio.run(controller.execute())
    if envelope is None:
        raise click.ClickException(controller.error or "Failed to execute request")

    click.echo(json.dumps(envelope.to_wire(), indent=2, ensure_ascii=False))
    if envelope.status == 0:
        click.get_current_context().exit(1)


@main.command()
@click.option("--base-url", default=None, help="Persist the base URL.")
@click.option("--token", default=None, help="Persist the bearer token (stored in plaintext).")
def config(base_url: str | None, token: str | None):
    """Show or update the saved base URL and token."""
    prefs = _preferences()
    if base_url is not None:
        prefs.set(BASE_URL_KEY, base_url)
    if token is not None:
        prefs.set(TOKEN_KEY, token)

    saved_token = prefs.get(TOKEN_KEY)
    click.echo(f"Scope: {prefs.scope}")
    click.echo(f"Base URL: {prefs.get(BASE_URL_KEY) or '(not set)'}")
    click.echo(f"Token: {'(set)' if saved_token else '(not set)'}")


@main.command()
@click.option("--host", default=None, help="Bind address.")
@click.option("--port", default=None, type=int, help="Bind port.")
def serve(host: str | None, port: int | None):
    """Run the HTTP proxy endpoint (POST /api/playground)."""
    import uvicorn

    from api_playground.server import create_app

    settings = get_settings()
    uvicorn.run(create_app(), host=host or settings.server_host, port=port or settings.server_port)
