"""Rich console output and markdown file save for debate results."""

import logging
import re
from collections.abc import Mapping, Sequence
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.rule import Rule
from rich.text import Text

from src.models import AgentRole, DebateResult, Document, RoleProfile, Turn

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)

_CONFIDENCE_SECTION = "Confidence Assessment"


def _slug(text: str, max_len: int = 40) -> str:
    """Convert text to a filename-safe slug."""
    slug = re.sub(r"[^\w\s-]", "", text.lower())
    slug = re.sub(r"[\s_-]+", "-", slug).strip("-")
    return slug[:max_len]


def _preview(text: str, words: int = 60) -> str:
    """Return first N words of a reply."""
    all_words = text.split()
    preview = " ".join(all_words[:words])
    if len(all_words) > words:
        preview += "..."
    return preview


def _speaker(turn: Turn, profiles: Mapping[AgentRole, RoleProfile]) -> str:
    profile = profiles.get(turn.role)
    return f"{profile.display_name} ({turn.role.value})" if profile else turn.role.value


def print_turn(turn: Turn, profiles: Mapping[AgentRole, RoleProfile]) -> None:
    """Print a short panel for one appended turn."""
    profile = profiles.get(turn.role)
    subtitle = ", ".join(turn.sections) if turn.sections else "unstructured"
    console.print(
        Panel(
            _preview(turn.raw_text),
            title=f"[bold]#{turn.turn_index} {_speaker(turn, profiles)}[/bold]",
            subtitle=subtitle,
            border_style=profile.color if profile else "dim",
        )
    )


def print_insight(result: DebateResult) -> None:
    """Print the synthesis and the validator's confidence to the console."""
    status = "complete" if result.success else f"failed ({result.error_kind.value if result.error_kind else 'error'})"
    console.print(Rule("[bold green]Collective Insight[/bold green]"))
    console.print(
        Text(
            f"Status: {status} | "
            f"Turns: {len(result.conversation)} | "
            f"Rounds: {result.rounds} | "
            f"Duration: {result.duration_sec:.1f}s",
            style="dim",
        )
    )

    synthesis = result.last_turn(AgentRole.SYNTHESIZER)
    if synthesis is None:
        console.print("[yellow]No synthesis was produced.[/yellow]")
    else:
        console.print(Markdown(synthesis.raw_text))

    validation = result.last_turn(AgentRole.VALIDATOR)
    if validation and validation.sections and _CONFIDENCE_SECTION in validation.sections:
        console.print(Rule("[bold]Validator confidence[/bold]"))
        console.print(Markdown(validation.sections[_CONFIDENCE_SECTION]))

    if result.error:
        console.print(f"[bold red]Error:[/bold red] {result.error}")


def render_markdown(
    result: DebateResult,
    corpus: Sequence[Document],
    profiles: Mapping[AgentRole, RoleProfile],
    title: str = "Research Council Debate",
) -> str:
    """Render the full transcript as markdown."""
    status = "complete" if result.success else "failed"
    lines: list[str] = [
        f"# {title}",
        "",
        f"**Date:** {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        f"**Documents:** {len(corpus)}",
        f"**Turns:** {len(result.conversation)}",
        f"**Rounds:** {result.rounds}",
        f"**Duration:** {result.duration_sec:.1f}s",
        f"**Status:** {status}",
        "",
        "## Corpus",
        "",
    ]
    for idx, doc in enumerate(corpus, start=1):
        year = f" ({doc.year})" if doc.year else ""
        lines.append(f"{idx}. {doc.title}{year}")
    lines += ["", "---", ""]

    for turn in result.conversation:
        lines.append(f"## Turn {turn.turn_index}: {_speaker(turn, profiles)}")
        lines.append("")
        if turn.sections:
            for label, body in turn.sections.items():
                lines.append(f"### {label}")
                lines.append("")
                lines.append(body)
                lines.append("")
        else:
            lines.append(turn.raw_text)
            lines.append("")
        lines.append(f"*{turn.timestamp.strftime('%H:%M:%S')} UTC*")
        lines.append("")

    if not result.success:
        kind = result.error_kind.value if result.error_kind else "error"
        lines += [
            "## Debate stopped",
            "",
            f"**Failure:** {kind}",
            "",
            result.error or "",
            "",
        ]

    return "\n".join(lines)


def save_to_file(
    result: DebateResult,
    corpus: Sequence[Document],
    output_dir: Path,
    profiles: Mapping[AgentRole, RoleProfile],
    slug_override: str | None = None,
) -> Path:
    """Save the debate transcript as a markdown file.

    Args:
        result: The finished (or failed) DebateResult.
        corpus: Documents the debate was about.
        output_dir: Directory to save the file in.
        profiles: Role display names for headings.
        slug_override: If provided, use this as the filename stem instead of
            deriving one from the first document title.

    Returns:
        Path to the saved file.
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    slug = slug_override if slug_override is not None else _slug(corpus[0].title if corpus else "debate")
    suffix = "" if result.success else "_FAILED"
    filepath = output_dir / f"{timestamp}_{slug}{suffix}.md"

    filepath.write_text(render_markdown(result, corpus, profiles), encoding="utf-8")
    logger.info("Debate saved to: %s", filepath)
    return filepath
