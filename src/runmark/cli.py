"""Command-line interface for runmark."""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from runmark import __version__
from runmark.config import get_settings
from runmark.core.updates import UpdateChecker
from runmark.formatting.parser import parse_inline, plain_text
from runmark.formatting.render import RunTheme, to_rich_text
from runmark.providers.credentials import (
    CredentialError,
    CredentialKind,
    redact_secret,
)
from runmark.providers.registry import ProviderRegistry, RegistryError

app = typer.Typer(
    name="runmark",
    help="Render inline markdown (bold, italic, code, links) as styled text.",
    add_completion=False,
)
key_app = typer.Typer(help="Manage stored provider API keys and base URLs.")
providers_app = typer.Typer(help="List and configure chat providers and models.")
app.add_typer(key_app, name="key")
app.add_typer(providers_app, name="providers")

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"runmark v{__version__}")
        raise typer.Exit()


def fail(message: str) -> None:
    """Print an error and exit with status 1."""
    console.print(f"[red]Error:[/red] {escape(message)}")
    raise typer.Exit(1)


def read_input(text: Optional[str], file: Optional[Path]) -> str:
    """Resolve the text to parse from an argument, a file, or stdin."""
    if file is not None:
        return file.read_text(encoding="utf-8")
    if text is None or text == "-":
        return sys.stdin.read()
    return text


def get_registry() -> ProviderRegistry:
    return ProviderRegistry.from_settings(get_settings())


def credential_kind(base_url: bool) -> CredentialKind:
    return CredentialKind.BASE_URL if base_url else CredentialKind.API_KEY


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """
    Render inline markdown as styled terminal text.

    Examples:

        runmark render "This is **bold** and *italic*"

        runmark runs "a [link](https://example.com) b" --json

        runmark key set openai sk-...

        runmark providers list
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
        )


# Formatting


@app.command()
def render(
    text: Optional[str] = typer.Argument(
        None,
        help="Text to render ('-' or omitted reads stdin)",
    ),
    file: Optional[Path] = typer.Option(
        None,
        "--file",
        "-f",
        exists=True,
        dir_okay=False,
        help="Read text from a file",
    ),
) -> None:
    """Print text with its inline formatting applied."""
    source = read_input(text, file)
    theme = RunTheme.from_settings(get_settings())
    console.print(to_rich_text(parse_inline(source), theme))


@app.command()
def runs(
    text: Optional[str] = typer.Argument(
        None,
        help="Text to tokenize ('-' or omitted reads stdin)",
    ),
    file: Optional[Path] = typer.Option(
        None,
        "--file",
        "-f",
        exists=True,
        dir_okay=False,
        help="Read text from a file",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Print runs as JSON",
    ),
) -> None:
    """Show the styled runs a text is split into."""
    parsed = parse_inline(read_input(text, file))

    if as_json:
        payload = [
            {"kind": run.kind.value, "text": run.text, "url": run.url}
            for run in parsed
        ]
        typer.echo(json.dumps(payload, ensure_ascii=False))
        return

    table = Table("#", "Kind", "Text", "URL")
    for index, run in enumerate(parsed):
        table.add_row(
            str(index),
            run.kind.value,
            Text(run.text),
            Text(run.url or ""),
        )
    console.print(table)


@app.command()
def strip(
    text: Optional[str] = typer.Argument(
        None,
        help="Text to strip ('-' or omitted reads stdin)",
    ),
) -> None:
    """Print only the visible text, with markers removed."""
    typer.echo(plain_text(parse_inline(read_input(text, None))))


@app.command()
def update() -> None:
    """Check whether a newer release is available."""
    status = UpdateChecker(__version__).check()
    if status.available:
        console.print(f"[green]{escape(status.message)}[/green]")
        if status.url:
            console.print(f"Download: {escape(status.url)}")
    elif status.message.startswith("Failed"):
        console.print(f"[yellow]{escape(status.message)}[/yellow]")
    else:
        console.print(escape(status.message))


# Credentials


@key_app.command("set")
def key_set(
    provider: str = typer.Argument(..., help="Provider id (e.g. openai)"),
    value: str = typer.Argument(..., help="API key, or URL with --base-url"),
    base_url: bool = typer.Option(
        False,
        "--base-url",
        "-b",
        help="Store a base URL override instead of an API key",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        help="Store the key even if its format looks wrong",
    ),
) -> None:
    """Store an API key or base URL override for a provider."""
    registry = get_registry()
    try:
        record = registry.get_provider(provider)
        valid = base_url or force or registry.validate_api_key(provider, value)
        if not valid:
            fail(
                f"That does not look like a {record.display_name} API key "
                "(use --force to store it anyway)"
            )
        registry.credentials.set(provider, value, credential_kind(base_url))
    except (CredentialError, RegistryError) as e:
        fail(str(e))

    label = "Base URL" if base_url else "API key"
    console.print(f"[green]Saved:[/green] {label} for {escape(record.display_name)}")


@key_app.command("get")
def key_get(
    provider: str = typer.Argument(..., help="Provider id"),
    base_url: bool = typer.Option(
        False,
        "--base-url",
        "-b",
        help="Show the base URL override instead of the API key",
    ),
    show: bool = typer.Option(
        False,
        "--show",
        help="Print the key unmasked",
    ),
) -> None:
    """Show a stored API key (masked) or base URL override."""
    registry = get_registry()
    try:
        registry.get_provider(provider)
        value = registry.credentials.get(provider, credential_kind(base_url))
    except (CredentialError, RegistryError) as e:
        fail(str(e))

    if value is None:
        console.print(f"[yellow]Nothing stored for {escape(provider)}[/yellow]")
        raise typer.Exit(1)

    if not base_url and not show:
        value = redact_secret(value)
    typer.echo(value)


@key_app.command("delete")
def key_delete(
    provider: str = typer.Argument(..., help="Provider id"),
    base_url: bool = typer.Option(
        False,
        "--base-url",
        "-b",
        help="Delete the base URL override instead of the API key",
    ),
) -> None:
    """Delete a stored API key or base URL override."""
    registry = get_registry()
    try:
        registry.get_provider(provider)
        removed = registry.credentials.delete(provider, credential_kind(base_url))
    except (CredentialError, RegistryError) as e:
        fail(str(e))

    if removed:
        console.print(f"[green]Deleted:[/green] {escape(provider)}")
    else:
        console.print(f"[yellow]Nothing stored for {escape(provider)}[/yellow]")


# Providers


@providers_app.command("list")
def providers_list() -> None:
    """List providers, their key status and the current selection."""
    registry = get_registry()
    try:
        table = Table("", "ID", "Name", "Key", "Base URL")
        for record in registry.providers():
            selected = "*" if record.id == registry.selected_provider else ""
            if not record.requires_api_key:
                key_status = "not needed"
            elif registry.has_api_key(record.id):
                key_status = "stored"
            else:
                key_status = "missing"
            table.add_row(
                selected,
                record.id,
                record.display_name,
                key_status,
                Text(registry.base_url(record.id)),
            )
    except CredentialError as e:
        fail(str(e))
    console.print(table)
    if registry.selected_model:
        console.print(f"Selected model: {escape(registry.selected_model)}")


@providers_app.command("select")
def providers_select(
    provider: str = typer.Argument(..., help="Provider id"),
    model: Optional[str] = typer.Option(
        None,
        "--model",
        "-m",
        help="Model name to select (default: first enabled model)",
    ),
) -> None:
    """Select the active provider (and optionally a model)."""
    registry = get_registry()
    try:
        if not registry.has_api_key(provider):
            console.print(
                f"[yellow]Warning:[/yellow] no API key stored for {escape(provider)}"
            )
        registry.select_provider(provider)
        if model:
            registry.select_model(model)
    except (CredentialError, RegistryError) as e:
        fail(str(e))

    console.print(
        f"[green]Selected:[/green] {escape(registry.selected_provider)}"
        f" / {escape(registry.selected_model or '(no model)')}"
    )


@providers_app.command("models")
def providers_models(
    provider: Optional[str] = typer.Argument(None, help="Limit to one provider"),
) -> None:
    """List models and whether they are enabled."""
    registry = get_registry()
    try:
        models = registry.models(provider)
    except RegistryError as e:
        fail(str(e))

    table = Table("Model ID", "Enabled")
    for model in models:
        table.add_row(Text(model.id), "yes" if model.enabled else "no")
    console.print(table)


def _set_enabled(model_id: str, enabled: bool) -> None:
    registry = get_registry()
    try:
        model = registry.set_model_enabled(model_id, enabled)
    except RegistryError as e:
        fail(str(e))
    state = "Enabled" if enabled else "Disabled"
    console.print(f"[green]{state}:[/green] {escape(model.id)}")


@providers_app.command("enable")
def providers_enable(
    model_id: str = typer.Argument(..., help="Model id, e.g. openai:gpt-4o"),
) -> None:
    """Enable a model."""
    _set_enabled(model_id, True)


@providers_app.command("disable")
def providers_disable(
    model_id: str = typer.Argument(..., help="Model id, e.g. openai:gpt-4o"),
) -> None:
    """Disable a model."""
    _set_enabled(model_id, False)


def _set_all_enabled(provider: str, enabled: bool) -> None:
    registry = get_registry()
    try:
        models = registry.set_provider_models_enabled(provider, enabled)
    except RegistryError as e:
        fail(str(e))
    state = "Enabled" if enabled else "Disabled"
    console.print(
        f"[green]{state}:[/green] {len(models)} model(s) for {escape(provider)}"
    )


@providers_app.command("enable-all")
def providers_enable_all(
    provider: str = typer.Argument(..., help="Provider id"),
) -> None:
    """Enable every model of a provider."""
    _set_all_enabled(provider, True)


@providers_app.command("disable-all")
def providers_disable_all(
    provider: str = typer.Argument(..., help="Provider id"),
) -> None:
    """Disable every model of a provider."""
    _set_all_enabled(provider, False)


@providers_app.command("refresh")
def providers_refresh(
    provider: str = typer.Argument("ollama", help="Provider id"),
) -> None:
    """Refresh the model list for a provider."""
    registry = get_registry()
    try:
        names = registry.refresh_models(provider)
    except (CredentialError, RegistryError) as e:
        fail(str(e))

    console.print(f"[blue]Found {len(names)} model(s) for {escape(provider)}[/blue]")
    for name in names:
        console.print(f"  {escape(name)}")


if __name__ == "__main__":
    app()
