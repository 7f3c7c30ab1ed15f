"""CLI entry point for api-dashboard."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

import click

from api_dashboard.catalog.base import EndpointDescriptor
from api_dashboard.catalog.loader import load_catalog
from api_dashboard.catalog.registry import EndpointCatalog
from api_dashboard.client import DashboardClient
from api_dashboard.config import Settings, get_settings
from api_dashboard.errors import DashboardError
from api_dashboard.generator.snippets import generate, supported_languages
from api_dashboard.request.builder import RequestBuilder, uses_bearer_auth
from api_dashboard.request.draft import FailureKind
from api_dashboard.session import FileSessionStore


@dataclass
class AppContext:
    settings: Settings
    base_url: str
    catalog_path: Path | None

    def catalog(self) -> EndpointCatalog:
        try:
            return load_catalog(self.catalog_path)
        except DashboardError as e:
            raise click.ClickException(str(e)) from e

    def session(self) -> FileSessionStore:
        return FileSessionStore(self.settings.session_file)

    def client(self) -> DashboardClient:
        return DashboardClient(self.base_url, self.session(), timeout=self.settings.request_timeout)


def _parse_params(ctx, param, values: tuple[str, ...]) -> list[tuple[str, str]]:
    pairs = []
    for item in values:
        name, sep, value = item.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"expected NAME=VALUE, got {item!r}")
        pairs.append((name, value))
    return pairs


def _find_endpoint(catalog: EndpointCatalog, method: str, path: str) -> EndpointDescriptor:
    endpoint = catalog.find(path, method)
    if endpoint is None:
        raise click.ClickException(f"Unknown endpoint: {method.upper()} {path}")
    return endpoint


def _builder(app: AppContext, method: str, path: str, params, body: str | None, token: str | None) -> RequestBuilder:
    catalog = app.catalog()
    endpoint = _find_endpoint(catalog, method, path)
    builder = RequestBuilder(
        catalog,
        session=app.session(),
        base_url=app.base_url,
        timeout=app.settings.request_timeout,
    )
    builder.select_endpoint(endpoint)
    for name, value in params:
        if name not in endpoint.parameters:
            raise click.BadParameter(f"{endpoint.label} has no parameter {name!r}", param_hint="-p/--param")
        builder.set_param(name, value)
    if body is not None:
        builder.set_body(body)
    if token is not None:
        builder.set_token(token)
    return builder


request_options = [
    click.argument("method"),
    click.argument("path"),
    click.option("-p", "--param", "params", multiple=True, callback=_parse_params, help="Path or query parameter as NAME=VALUE."),
    click.option("--body", default=None, help="Request body (JSON text); defaults to the endpoint's example body."),
    click.option("--token", default=None, help="API key or session token; defaults to the stored session token."),
]


def with_request_options(func):
    for option in reversed(request_options):
        func = option(func)
    return func


@click.group()
@click.option("--base-url", default=None, help="Backend base URL (overrides API_DASHBOARD_BASE_URL).")
@click.option("--catalog", "catalog_path", default=None, type=click.Path(exists=True, dir_okay=False, path_type=Path), help="Catalog or OpenAPI file to use instead of the bundled catalog.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx, base_url: str | None, catalog_path: Path | None, verbose: bool):
    """Explore backend endpoints, generate snippets and manage API keys."""
    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    ctx.obj = AppContext(
        settings=settings,
        base_url=(base_url or settings.base_url).rstrip("/"),
        catalog_path=catalog_path or settings.catalog_file,
    )


# -- explorer -----------------------------------------------------------------


@main.command()
@click.pass_obj
def endpoints(app: AppContext):
    """List the available endpoints by category."""
    for category, eps in app.catalog().by_category().items():
        click.echo(category)
        for ep in eps:
            click.echo(f"  {ep.method:<6} {ep.path}  {ep.description}")


@main.command()
@click.argument("method")
@click.argument("path")
@click.pass_obj
def show(app: AppContext, method: str, path: str):
    """Show the documentation of one endpoint."""
    ep = _find_endpoint(app.catalog(), method, path)
    click.echo(ep.label)
    click.echo(f"Category: {ep.category}")
    if ep.description:
        click.echo(ep.description)
    click.echo(f"Auth: {'Authorization: Bearer <token>' if uses_bearer_auth(ep.path) else 'x-api-key: <key>'}")

    if ep.parameters:
        click.echo("\nParameters:")
        for name in ep.parameters:
            location = "path" if name in ep.path_params else "query"
            line = f"  {name} ({location}, {ep.param_type(name)})"
            if name in ep.param_descriptions:
                line += f"  {ep.param_descriptions[name]}"
            click.echo(line)

    if ep.request_body is not None:
        click.echo("\nRequest body:")
        click.echo(ep.request_body)
    if ep.response_example is not None:
        click.echo("\nResponse example:")
        click.echo(ep.response_example)


@main.command()
@with_request_options
@click.option("-l", "--language", default="javascript", type=click.Choice(supported_languages()), help="Snippet language.")
@click.option("-o", "--output", default=None, type=click.Path(dir_okay=False, path_type=Path), help="Write the snippet to a file.")
@click.pass_obj
def snippet(app: AppContext, method, path, params, body, token, language: str, output: Path | None):
    """Generate code that reproduces a request."""
    builder = _builder(app, method, path, params, body, token)
    code = generate(builder.draft, language, base_url=app.base_url)
    if output is None:
        click.echo(code)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(code + "\n", encoding="utf-8")
    click.echo(f"Snippet saved to {output}")


@main.command()
@with_request_options
@click.pass_obj
def send(app: AppContext, method, path, params, body, token):
    """Send a request to the backend and print the JSON response."""
    builder = _builder(app, method, path, params, body, token)
    result = builder.send()
    if result.ok:
        click.echo(json.dumps(result.value, indent=2))
        return
    if result.kind is FailureKind.VALIDATION:
        for issue in builder.validate():
            click.echo(f"  {issue.message}", err=True)
        raise click.ClickException("Request not sent")
    raise click.ClickException(result.error)


# -- account --------------------------------------------------------------------


@main.command()
@click.argument("email")
@click.password_option(confirmation_prompt=False)
@click.pass_obj
def login(app: AppContext, email: str, password: str):
    """Sign in and store the session token."""
    try:
        app.client().login(email, password)
    except DashboardError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Signed in as {email}")


@main.command()
@click.argument("email")
@click.password_option()
@click.pass_obj
def register(app: AppContext, email: str, password: str):
    """Create an account and store the session token."""
    try:
        app.client().register(email, password)
    except DashboardError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Registered {email}")


@main.command()
@click.pass_obj
def logout(app: AppContext):
    """Forget the stored session token."""
    app.client().logout()
    click.echo("Signed out")


# -- API keys -------------------------------------------------------------------


@main.group()
def keys():
    """Manage API keys."""


@keys.command("list")
@click.pass_obj
def list_keys(app: AppContext):
    """List API keys."""
    try:
        api_keys = app.client().list_api_keys()
    except DashboardError as e:
        raise click.ClickException(str(e)) from e
    if not api_keys:
        click.echo("No API keys.")
        return
    for key in api_keys:
        click.echo(
            f"{key.key_id}  created {key.created_at}  last used {key.last_used or 'never'}"
            f"  {key.description or ''}".rstrip()
        )


@keys.command("stats")
@click.pass_obj
def key_stats(app: AppContext):
    """Show how many API keys exist and when one was last used."""
    try:
        stats = app.client().api_key_stats()
    except DashboardError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Total keys: {stats.total_keys}")
    click.echo(f"Last used: {stats.last_used.isoformat() if stats.last_used else 'never'}")


@keys.command("create")
@click.option("--description", default=None, help="Label for the new key.")
@click.pass_obj
def create_key(app: AppContext, description: str | None):
    """Create an API key and print its secret (shown only once)."""
    try:
        key = app.client().create_api_key(description)
    except DashboardError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Created {key.key_id}")
    click.echo(f"API key: {key.api_key}")


@keys.command("regenerate")
@click.argument("key_id")
@click.pass_obj
def regenerate_key(app: AppContext, key_id: str):
    """Replace the secret of an API key."""
    try:
        key = app.client().regenerate_api_key(key_id)
    except DashboardError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Regenerated {key.key_id}")
    click.echo(f"API key: {key.api_key}")


@keys.command("delete")
@click.argument("key_id")
@click.confirmation_option(prompt="Delete this API key?")
@click.pass_obj
def delete_key(app: AppContext, key_id: str):
    """Delete an API key."""
    try:
        app.client().delete_api_key(key_id)
    except DashboardError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Deleted {key_id}")
