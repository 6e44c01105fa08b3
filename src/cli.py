"""Click CLI: loads config and corpus, picks a provider, runs the debate, saves the transcript."""

import asyncio
import logging
import sys
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from config.config_loader import AppConfig, DebateSettings, load_config
from src.corpus import load_corpus
from src.gateway import LLMAgentGateway
from src.healthcheck import HealthResult, check_provider
from src.models import AgentRole, DebateResult, Document, Turn
from src.orchestrator import DebateOrchestrator
from src.output import print_insight, print_turn, save_to_file
from src.providers.anthropic import AnthropicProvider
from src.providers.base import AIProvider, ProviderError
from src.providers.gemini import GeminiProvider
from src.providers.openai_provider import OpenAIProvider

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)

PROVIDER_CLASSES: dict[str, type[AIProvider]] = {
    "gemini": GeminiProvider,
    "anthropic": AnthropicProvider,
    "openai": OpenAIProvider,
}


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def _pick_provider_name(config: AppConfig, requested: str | None) -> str:
    """Requested provider wins; otherwise the configured default, else any available one.

    Raises:
        click.UsageError: If the requested provider is unknown or has no API key.
    """
    if requested:
        if requested not in config.models:
            raise click.UsageError(f"Unknown provider '{requested}'. Known: {', '.join(sorted(config.models))}")
        if requested not in config.available_providers:
            raise click.UsageError(
                f"Provider '{requested}' has no API key; set {config.models[requested].api_key_env} in .env"
            )
        return requested
    if config.defaults.provider in config.available_providers:
        return config.defaults.provider
    if config.available_providers:
        fallback = sorted(config.available_providers)[0]
        logger.warning("Default provider '%s' unavailable, using '%s'", config.defaults.provider, fallback)
        return fallback
    raise click.UsageError("No providers available. Check API keys in .env.")


def _build_provider(config: AppConfig, name: str) -> AIProvider:
    model_cfg = config.models[name]
    if model_cfg.sdk not in PROVIDER_CLASSES:
        raise click.UsageError(f"Provider '{name}' uses unsupported sdk '{model_cfg.sdk}'")
    return PROVIDER_CLASSES[model_cfg.sdk](model_cfg)


def _effective_settings(config: AppConfig, max_rounds: int | None) -> DebateSettings:
    if max_rounds is None:
        return config.debate
    if max_rounds < 1:
        raise click.BadParameter("must be >= 1", param_hint="--max-rounds")
    return DebateSettings(
        max_rounds=max_rounds,
        directive_label=config.debate.directive_label,
        satisfied_token=config.debate.satisfied_token,
        continue_token=config.debate.continue_token,
        min_section_length=config.debate.min_section_length,
        turn_timeout_sec=config.debate.turn_timeout_sec,
    )


def _check_provider(provider: AIProvider, system_prompt: str) -> HealthResult:
    console.print("\n[bold]Checking provider...[/bold]")
    result = asyncio.run(check_provider(provider, system_prompt))
    if result.ok:
        console.print(f"  [green]OK  [/green] {result.summary()}")
        return result
    console.print(f"  [red]FAIL[/red] {result.summary()}")
    sys.exit(1)


async def _run_debate(
    corpus: list[Document],
    config: AppConfig,
    provider: AIProvider,
    settings: DebateSettings,
) -> DebateResult:
    gateway = LLMAgentGateway(provider, config.prompts)
    orchestrator = DebateOrchestrator(gateway, settings)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Researcher analyzing papers...", total=None)

        def on_update(snapshot: tuple[Turn, ...]) -> None:
            latest = snapshot[-1]
            progress.print(f"[green]OK[/green] Turn {latest.turn_index}: {latest.role.value}")
            progress.update(task, description=f"Waiting for the next persona (turn {len(snapshot) + 1})...")

        return await orchestrator.run(corpus, on_update=on_update)


@click.command()
@click.argument("corpus_path", type=click.Path(exists=True, path_type=Path))
@click.option("--max-rounds", default=None, type=int, help="Critique round ceiling (default: from config)")
@click.option("--provider", "provider_name", default=None, help="Which configured model runs the personas")
@click.option("--output", "output_path", default=None, help="Output directory (default: from config)")
@click.option("--no-save", is_flag=True, default=False, help="Do not write the markdown transcript")
@click.option("--verbose", is_flag=True, help="Enable DEBUG-level logging")
@click.option("--skip-health-check", is_flag=True, default=False,
              help="Skip the API connectivity check at startup")
def main(
    corpus_path: Path,
    max_rounds: int | None,
    provider_name: str | None,
    output_path: str | None,
    no_save: bool,
    verbose: bool,
    skip_health_check: bool,
) -> None:
    """Research Council -- four personas debate a corpus of papers.

    \b
    Examples:
      python -m src.cli papers.yaml
      python -m src.cli papers/ --max-rounds 5
      python -m src.cli papers.yaml --provider claude --output ./reports
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8", errors="replace")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8", errors="replace")

    load_dotenv()
    _setup_logging(verbose)

    try:
        config = load_config()
        corpus = load_corpus(corpus_path)
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        sys.exit(1)

    settings = _effective_settings(config, max_rounds)
    name = _pick_provider_name(config, provider_name)

    try:
        provider = _build_provider(config, name)
    except ProviderError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        sys.exit(1)

    if not skip_health_check:
        _check_provider(provider, config.prompts.system[AgentRole.RESEARCHER])

    console.print(
        f"\n[bold cyan]Research Council[/bold cyan]: {len(corpus)} documents, "
        f"up to {settings.max_rounds} critique rounds via {name} ({provider.model_string()})\n"
    )

    result = asyncio.run(_run_debate(corpus, config, provider, settings))

    for turn in result.conversation:
        print_turn(turn, config.roles)
    print_insight(result)

    if not no_save:
        output_dir = Path(output_path) if output_path else config.defaults.output_dir
        saved_path = save_to_file(result, corpus, output_dir, config.roles)
        console.print(f"\n[dim]Saved to: {saved_path}[/dim]")

    if not result.success:
        sys.exit(1)


if __name__ == "__main__":
    main()
