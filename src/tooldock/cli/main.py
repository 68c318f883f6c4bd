"""
ToolDock CLI — gateway and inspection commands.

Provides commands to start the gateway, inspect the tool catalogue and
provider chains, and preview acknowledgments for a planner batch.
"""

import json
import os
from typing import Optional

import typer
import uvicorn
from dotenv import load_dotenv

load_dotenv()

app = typer.Typer(
    name="tooldock",
    help="ToolDock — tool dispatch and provider fallback for chat assistants.",
    add_completion=False,
)


def _config(config_path: Optional[str]):
    from tooldock.config.loader import load_config

    return load_config(config_path)


# ─── Gateway ───────────────────────────────────────────────────────

@app.command()
def gateway(
    host: Optional[str] = typer.Option(None, help="Host to bind to (default from config)"),
    port: Optional[int] = typer.Option(None, help="Port to bind to (default from config)"),
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help="Path to tooldock.json/yaml"),
    reload: bool = typer.Option(False, help="Enable auto-reload for development"),
):
    """Start the ToolDock Gateway server."""
    from tooldock.utils import setup_logging

    if config_path:
        os.environ["TOOLDOCK_CONFIG_PATH"] = config_path
    config = _config(config_path)
    setup_logging(config.logging)

    host = host or config.gateway.host
    port = port or config.gateway.port
    typer.echo(f"🚀 Starting ToolDock Gateway at http://{host}:{port}")
    uvicorn.run(
        "tooldock.gateway.server:app_factory",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=config.logging.level.lower(),
    )


# ─── Tools Subcommand ──────────────────────────────────────────────

tools_app = typer.Typer(help="Inspect the tool catalogue.")
app.add_typer(tools_app, name="tools")


@tools_app.command("list")
def tools_list(
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help="Path to tooldock.json/yaml"),
):
    """List registered tools and their parameters."""
    from rich.console import Console
    from rich.table import Table
    from tooldock.gateway.startup import build_gateway

    console = Console()
    gw = build_gateway(_config(config_path))
    declarations = gw.registry.declarations()

    table = Table(title=f"Tools ({len(declarations)})")
    table.add_column("Tool Name", style="cyan")
    table.add_column("Default Provider", style="green")
    table.add_column("Parameters")
    table.add_column("Description", style="dim")

    for d in declarations:
        params = ", ".join(f"{n}*" if spec.required else n for n, spec in d.parameters.items())
        default = gw.normalizer.default_provider_for(d.name)
        table.add_row(d.name, gw.normalizer.display_name(default) if default else "—", params, d.description)

    console.print(table)


# ─── Providers ─────────────────────────────────────────────────────

@app.command()
def providers(
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help="Path to tooldock.json/yaml"),
):
    """Show fallback chains and provider aliases."""
    from rich.console import Console
    from rich.table import Table
    from tooldock.providers import FallbackOrchestrator, ProviderNormalizer

    config = _config(config_path)
    normalizer = ProviderNormalizer.from_config(config.providers)
    orchestrator = FallbackOrchestrator.from_config(config.providers, normalizer=normalizer)
    console = Console()

    chains = Table(title="Fallback Chains")
    chains.add_column("Capability", style="cyan")
    chains.add_column("Order")
    for capability in orchestrator.capabilities():
        order = orchestrator.order_for(capability)
        chains.add_row(capability, " → ".join(normalizer.display_name(p) for p in order))
    console.print(chains)

    aliases = Table(title="Providers")
    aliases.add_column("Key", style="cyan")
    aliases.add_column("Display Name", style="green")
    aliases.add_column("Aliases", style="dim")
    for key in normalizer.known_keys():
        aliases.add_row(key, normalizer.display_name(key), ", ".join(normalizer.aliases_for(key)))
    console.print(aliases)


# ─── ACK Preview ───────────────────────────────────────────────────

@app.command()
def ack(
    calls: str = typer.Argument(..., help='JSON list of calls, e.g. \'[{"name": "create_video", "arguments": {}}]\''),
    language: Optional[str] = typer.Option(None, "--lang", "-l", help="Template language (en, he)"),
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help="Path to tooldock.json/yaml"),
):
    """Preview the acknowledgments a planner batch would produce."""
    from tooldock.acks import AckDispatcher
    from tooldock.providers import FallbackOrchestrator, ProviderNormalizer

    try:
        parsed = json.loads(calls)
    except json.JSONDecodeError as e:
        typer.echo(f"❌ Invalid JSON: {e}")
        raise typer.Exit(1)
    if isinstance(parsed, dict):
        parsed = [parsed]
    if not isinstance(parsed, list):
        typer.echo("❌ Expected a JSON list of calls")
        raise typer.Exit(1)

    config = _config(config_path)
    normalizer = ProviderNormalizer.from_config(config.providers)
    orchestrator = FallbackOrchestrator.from_config(config.providers, normalizer=normalizer)
    dispatcher = AckDispatcher(normalizer, orchestrator, config.acks)

    per_call = dispatcher.build_acks(parsed, language)
    for raw, text in zip(parsed, per_call):
        name = raw.get("name") if isinstance(raw, dict) else raw
        typer.echo(f"  {name}: {text or '(suppressed)'}")

    typer.echo("\nSent:")
    for text in dispatcher.collapse(per_call, language):
        typer.echo(text)


# ─── Diagnostics ───────────────────────────────────────────────────

@app.command()
def doctor():
    """Check environment configuration."""
    typer.echo("🩺 ToolDock Doctor\n")

    checks = {
        "TOOLDOCK_CONFIG_PATH": os.getenv("TOOLDOCK_CONFIG_PATH"),
        "PUBLIC_BASE_URL": os.getenv("PUBLIC_BASE_URL"),
        "WHATSAPP_API_TOKEN": os.getenv("WHATSAPP_API_TOKEN"),
        "WHATSAPP_PHONE_NUMBER_ID": os.getenv("WHATSAPP_PHONE_NUMBER_ID"),
        "KIE_API_KEY": os.getenv("KIE_API_KEY"),
    }

    for key, value in checks.items():
        result = "✅ Set" if value else "❌ Not set"
        typer.echo(f"  {key}: {result}")

    typer.echo("\nDone.")


@app.command()
def version():
    """Show the ToolDock version."""
    from tooldock.version import get_version

    typer.echo(f"tooldock {get_version()}")


if __name__ == "__main__":
    app()
