"""
Command line interface for the teacher assistant relay.

Lets an administrator try the configured provider outside the course page:
ask one question, chat interactively, or check the settings.
"""

import asyncio
import logging
import sys
from typing import Any, Optional

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from teacher_assistant import __version__
from teacher_assistant.llm.config import LLMConfig, ProviderType
from teacher_assistant.llm.exceptions import LLMError
from teacher_assistant.llm.factory import RESERVED_PROVIDERS, list_providers
from teacher_assistant.relay.audit import AuditSink, JsonlAuditSink
from teacher_assistant.relay.context import ScopeContext, StaticScopeProvider
from teacher_assistant.relay.message_relay import MessageRelay
from teacher_assistant.relay.models import RelayResponse
from teacher_assistant.settings.resolver import ConfigResolver, validate_config
from teacher_assistant.settings.store import EnvSettingsStore, FileSettingsStore, SettingsStore

# Load environment variables
load_dotenv()

console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Setup rich logging."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )
    # Reduce noise from httpx
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def _load_store(config_path: Optional[str]) -> SettingsStore:
    if config_path:
        return FileSettingsStore(config_path)
    return EnvSettingsStore()


def _resolve_config(config_path: Optional[str], **overrides: Any) -> LLMConfig:
    """Resolve settings and apply command line overrides."""
    config = ConfigResolver(_load_store(config_path)).resolve()
    overrides = {key: value for key, value in overrides.items() if value is not None}
    if overrides:
        config = config.with_overrides(**overrides)
    return config


def _build_relay(
    config: LLMConfig,
    course_id: int,
    course_name: Optional[str],
    role: Optional[str],
    audit_log: Optional[str],
) -> MessageRelay:
    scope_provider = StaticScopeProvider(
        {course_id: ScopeContext(course_name=course_name, user_role=role)}
    )
    audit_sink: Optional[AuditSink] = JsonlAuditSink(audit_log) if audit_log else None
    return MessageRelay(config, scope_provider=scope_provider, audit_sink=audit_sink)


def _config_options(func):
    """Options shared by commands that talk to a provider."""
    options = [
        click.option(
            "--config",
            "-c",
            "config_path",
            type=click.Path(exists=True, dir_okay=False),
            default=None,
            help="Settings file (YAML/JSON). Defaults to TEACHERASSISTANT_* variables.",
        ),
        click.option(
            "--provider",
            "-p",
            type=click.Choice([p.value for p in ProviderType]),
            default=None,
            help="Override the configured provider",
        ),
        click.option("--model", "-m", default=None, help="Override the configured model"),
        click.option(
            "--temperature",
            "-t",
            type=float,
            default=None,
            help="Override the sampling temperature (0.0-2.0)",
        ),
        click.option(
            "--max-tokens",
            type=int,
            default=None,
            help="Override the token limit (1-32000)",
        ),
        click.option("--course-id", type=int, default=1, show_default=True, help="Course ID"),
        click.option("--course-name", default=None, help="Course name added as context"),
        click.option("--role", default=None, help="Your role in the course (e.g. teacher)"),
        click.option(
            "--audit-log",
            type=click.Path(dir_okay=False),
            default=None,
            help="Append audit records to this JSON-lines file",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """Teacher Assistant - course chat relay to LLM providers."""
    setup_logging(verbose)


@cli.command()
@click.argument("message")
@_config_options
def ask(
    message: str,
    config_path: Optional[str],
    provider: Optional[str],
    model: Optional[str],
    temperature: Optional[float],
    max_tokens: Optional[int],
    course_id: int,
    course_name: Optional[str],
    role: Optional[str],
    audit_log: Optional[str],
):
    """
    Ask a single question and print the reply.

    Examples:

        teacher-assistant ask "How should I structure week 3?"

        teacher-assistant ask "Explain fractions" -p ollama -m llama3.1 --role student
    """
    if not message.strip():
        raise click.BadParameter("Message must not be empty", param_hint="MESSAGE")

    try:
        config = _resolve_config(
            config_path,
            provider=provider,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
        )
    except LLMError as e:
        console.print(f"[bold red]Error:[/bold red] {e.message}")
        sys.exit(1)

    relay = _build_relay(config, course_id, course_name, role, audit_log)
    response = asyncio.run(_single_query(relay, course_id, message))

    if not response.success:
        console.print(f"[bold red]{response.message}[/bold red]")
        sys.exit(1)
    print(response.message)


async def _single_query(relay: MessageRelay, course_id: int, message: str) -> RelayResponse:
    """Execute a single query."""
    try:
        return await relay.send(course_id, message)
    finally:
        await relay.close()


@cli.command()
@_config_options
def chat(
    config_path: Optional[str],
    provider: Optional[str],
    model: Optional[str],
    temperature: Optional[float],
    max_tokens: Optional[int],
    course_id: int,
    course_name: Optional[str],
    role: Optional[str],
    audit_log: Optional[str],
):
    """
    Interactive chat through the relay.

    Type 'exit' or 'quit' to end the session.

    Examples:

        teacher-assistant chat --course-name "Algebra I" --role teacher

        teacher-assistant chat -c settings.yaml
    """
    try:
        config = _resolve_config(
            config_path,
            provider=provider,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
        )
    except LLMError as e:
        console.print(f"[bold red]Error:[/bold red] {e.message}")
        sys.exit(1)

    console.print(
        Panel(
            f"[bold cyan]Teacher Assistant Chat[/bold cyan]\n\n"
            f"Provider: [green]{config.provider.value}[/green]\n"
            f"Model: [green]{config.model}[/green]\n"
            f"Course: [green]{course_name or course_id}[/green]\n\n"
            f"Type [yellow]exit[/yellow] or [yellow]quit[/yellow] to end session.\n"
            f"Type [yellow]/help[/yellow] for commands.",
            title="Welcome",
        )
    )

    relay = _build_relay(config, course_id, course_name, role, audit_log)
    asyncio.run(_chat_loop(relay, course_id))


async def _chat_loop(relay: MessageRelay, course_id: int):
    """Main chat loop."""
    try:
        while True:
            try:
                user_input = Prompt.ask("\n[bold blue]You[/bold blue]")

                if not user_input.strip():
                    continue

                if user_input.lower() in ("exit", "quit", "/exit", "/quit"):
                    console.print("[yellow]Goodbye![/yellow]")
                    break

                if user_input.lower() in ("/help", "help"):
                    _show_help()
                    continue

                if user_input.lower() == "/history":
                    _show_history(relay)
                    continue

                if user_input.lower() == "/clear":
                    relay.clear_history()
                    console.print("[green]History cleared.[/green]")
                    continue

                with console.status("[bold green]Thinking..."):
                    response = await relay.send(course_id, user_input)

                if not response.success:
                    console.print(f"[bold red]{response.message}[/bold red]")
                    continue

                console.print("\n[bold green]Assistant[/bold green]")
                console.print(Markdown(response.message))

            except KeyboardInterrupt:
                console.print("\n[yellow]Interrupted. Type 'exit' to quit.[/yellow]")
                continue

    finally:
        await relay.close()


def _show_history(relay: MessageRelay):
    history = relay.history()
    if not history:
        console.print("[dim]No messages yet.[/dim]")
        return
    for turn in history:
        console.print(f"[bold]{turn.role.value}[/bold] [dim]{turn.timestamp:%X}[/dim]: {turn.content}")


def _show_help():
    """Show help message."""
    help_text = """
[bold]Commands:[/bold]
  /help      - Show this help message
  /history   - Show this session's messages
  /clear     - Clear this session's messages
  /exit      - Exit the chat
"""
    console.print(Panel(help_text, title="Help"))


@cli.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Settings file (YAML/JSON). Defaults to TEACHERASSISTANT_* variables.",
)
def validate(config_path: Optional[str]):
    """
    Check the settings and list every problem found.

    Exits with status 1 if the configuration is invalid.
    """
    try:
        config = _resolve_config(config_path)
    except LLMError as e:
        console.print(f"[bold red]Error:[/bold red] {e.message}")
        sys.exit(1)

    table = Table(title="Teacher Assistant settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for key, value in config.to_dict().items():
        table.add_row(key, str(value))
    console.print(table)

    issues = validate_config(config)
    if not issues:
        console.print("[green]Configuration is valid.[/green]")
        return

    for issue in issues:
        console.print(f"  [red]•[/red] {issue.message} [dim]({issue.field})[/dim]")
    sys.exit(1)


@cli.command()
def providers():
    """List available LLM providers."""
    console.print("[bold]Available Providers:[/bold]")
    for name in list_providers():
        credential = "base URL" if ProviderType(name).uses_base_url else "API key"
        console.print(f"  • [green]{name}[/green] - {credential}")
    for reserved in sorted(p.value for p in RESERVED_PROVIDERS):
        console.print(f"  • [dim]{reserved}[/dim] - not yet supported")


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
