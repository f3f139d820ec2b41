"""CLI entry point for the briefing curator."""

import random
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import typer

from briefing_curator.adapters.digest import MarkdownDigestGenerator
from briefing_curator.adapters.storage import YamlStateStore, load_candidates
from briefing_curator.config import Settings, get_settings
from briefing_curator.core import (
    BriefingMode,
    ContentScorer,
    ReactionEvent,
    ReactionType,
    ScoreUpdater,
    TriggerType,
)
from briefing_curator.core.fatigue import mute_until_for
from briefing_curator.logging_config import configure_logging
from briefing_curator.use_cases import AlertService, BriefingService, LearningService

cli = typer.Typer(help="Curate a personal briefing from scored candidates.")

CONFIG_OPTION = typer.Option(Path("config.yaml"), "--config", help="Path to config.yaml")


def _setup(config: Path) -> tuple[Settings, YamlStateStore]:
    settings = get_settings(config)
    configure_logging(settings.logging.level, settings.logging.json)
    return settings, YamlStateStore(settings.state_dir)


@cli.command()
def brief(
    candidates: Path = typer.Argument(..., exists=True, help="YAML file with candidate items"),
    mode: Optional[BriefingMode] = typer.Option(None, help="Force weekday or weekend mode"),
    seed: Optional[int] = typer.Option(None, help="Seed for the exploration draw"),
    output: Optional[Path] = typer.Option(None, help="Write the markdown digest here"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Do not persist history or fatigue state"),
    config: Path = CONFIG_OPTION,
) -> None:
    """Build today's briefing."""
    settings, store = _setup(config)
    now = datetime.now(timezone.utc)

    service = BriefingService(
        profile_store=store,
        reaction_log=store,
        history=store,
        settings_store=store,
        scorer=ContentScorer(
            settings.scoring.category_weights,
            settings.scoring.recency_half_life_hours,
        ),
        tz=settings.tz,
    )
    rng = random.Random(seed).random if seed is not None else random.random
    result = service.run(load_candidates(candidates), now, mode=mode, rng=rng)

    if result.muted:
        print("🔇 Briefing is muted")
        return

    digest_date = now.astimezone(settings.tz).date()
    markdown = MarkdownDigestGenerator().generate(result.digest, digest_date)

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(markdown, encoding="utf-8")
        print(f"Digest saved to {output}")
    else:
        print(markdown)

    if not dry_run:
        service.commit(result, now)


@cli.command()
def react(
    content_id: str,
    reaction: ReactionType,
    tag: list[str] = typer.Option([], "--tag", help="Tag of the reacted item (repeatable)"),
    config: Path = CONFIG_OPTION,
) -> None:
    """Record a reaction and update the interest profile."""
    settings, store = _setup(config)
    now = datetime.now(timezone.utc)

    service = LearningService(store, store, ScoreUpdater(alpha=settings.scoring.ema_alpha))
    event = ReactionEvent(content_id=content_id, reaction_type=reaction, topics=tuple(tag), occurred_at=now)
    for delta in service.record(event, now):
        marker = " (new)" if delta.is_new else ""
        print(f"  • {delta.topic}: {delta.score:.3f} after {delta.interaction_count} interactions{marker}")


@cli.command()
def alert(
    trigger: TriggerType,
    content_id: Optional[str] = typer.Option(None, "--content-id"),
    send: bool = typer.Option(False, "--send", help="Record the alert as sent when allowed"),
    config: Path = CONFIG_OPTION,
) -> None:
    """Check whether a real-time alert may fire now."""
    settings, store = _setup(config)
    now = datetime.now(timezone.utc)

    service = AlertService(
        store,
        store,
        tz=settings.tz,
        default_quiet_hours=(settings.alerts.quiet_hours_start, settings.alerts.quiet_hours_end),
    )
    result = service.check(trigger, content_id, now)
    status = "✓ allowed" if result.decision.allowed else "✗ denied"
    print(f"{status}: {result.decision.reason.value}")

    if send and result.decision.allowed:
        service.mark_sent(trigger, content_id, now)

    if not result.decision.allowed:
        raise typer.Exit(code=1)


@cli.command()
def mute(days: int, config: Path = CONFIG_OPTION) -> None:
    """Mute briefings and alerts for N days (0 to unmute)."""
    _, store = _setup(config)
    now = datetime.now(timezone.utc)

    until = mute_until_for(days, now)
    store.save_fatigue_state(replace(store.load_fatigue_state(), mute_until=until))
    print(f"🔇 Muted until {until.isoformat()}" if until else "🔔 Unmuted")


def app() -> None:
    """CLI entry point."""
    cli()


if __name__ == "__main__":
    app()
