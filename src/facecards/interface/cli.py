"""facecards CLI: serve the game, play it in the terminal and inspect progress."""

import asyncio
import json
import logging
import sys
import time
from collections import Counter
from pathlib import Path
from typing import Annotated

import typer

from facecards.application.config import AppConfig, resolve_config
from facecards.application.factory import build_session, get_directory_cache, get_state_store
from facecards.application.roster import ensure_playable, parse_roster
from facecards.application.session import ChallengeSession, ChallengeView
from facecards.domain.constants import (
    ACTIVE_CHALLENGE_RECORD,
    CARDS_RECORD,
    CONFUSION_RECORD,
    STREAK_RECORD,
)
from facecards.domain.errors import (
    DirectoryAuthError,
    FacecardsError,
    UnknownChoiceError,
)
from facecards.domain.models import CardState, Direction, Person

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="facecards: learn the names and faces of your community.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage facecards configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
):
    """Global settings for facecards."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    if verbose >= 2:
        logging.getLogger().setLevel(logging.DEBUG)
    elif verbose == 1:
        logging.getLogger().setLevel(logging.INFO)


def _resolve(**overrides) -> AppConfig:
    return resolve_config({k: v for k, v in overrides.items() if v is not None})


def _fail(message: str, code: int = 1) -> typer.Exit:
    typer.secho(message, fg=typer.colors.RED, err=True)
    return typer.Exit(code=code)


async def _load_roster(config: AppConfig) -> list[Person]:
    cache = get_directory_cache(config)
    try:
        profiles = await cache.get(config.read_token())
    finally:
        await cache.client.close()
    return parse_roster(profiles)


def load_roster_or_exit(config: AppConfig) -> list[Person]:
    try:
        roster = asyncio.run(_load_roster(config))
        ensure_playable(roster)
    except DirectoryAuthError as e:
        raise _fail(f"Please log in: {e} (set FACECARDS_DIRECTORY_TOKEN or token_file)") from e
    except FacecardsError as e:
        raise _fail(f"Error loading data: {e}") from e
    return roster


# ---------------------------------------------------------------------------
# Root commands
# ---------------------------------------------------------------------------


@app.command()
def serve(
    host: Annotated[str | None, typer.Option(help="Interface to bind.")] = None,
    port: Annotated[int | None, typer.Option(help="Port to listen on.")] = None,
    reload: Annotated[bool, typer.Option("--reload", help="Auto-reload on code changes.")] = False,
):
    """[bold green]Serve[/bold green] the directory proxy and game API."""
    import uvicorn

    config = _resolve(host=host, port=port)
    uvicorn.run("facecards.server:app", host=config.host, port=config.port, reload=reload)


def render_text(view: ChallengeView) -> str:
    lines = []
    if view.mode == Direction.FACE_TO_NAME:
        lines.append(f"Who is this? {view.prompt}")
        for choice in view.choices:
            lines.append(f"  [{choice.key}] {choice.label}")
    else:
        lines.append(f"Which one is {view.prompt}?")
        for choice in view.choices:
            lines.append(f"  [{choice.key}] {choice.image}")
    if view.streak and view.streak.visible:
        lines.append(f"Streak: {view.streak.count}")
    return "\n".join(lines)


def play_rounds(
    session: ChallengeSession,
    rounds: int | None = None,
    delay: float = 0.0,
) -> int:
    """
    Terminal game loop. Returns the number of rounds finished.

    Keys 1-8 pick an option, 'q' quits. A reload resumes the same round.
    """
    finished = 0
    while rounds is None or finished < rounds:
        view = session.start_challenge()
        typer.echo("")
        typer.echo(render_text(view))

        while True:
            answer = typer.prompt("Your pick").strip().lower()
            if answer in ("q", "quit", "exit"):
                return finished
            try:
                choice_id = session.choice_for_key(int(answer))
            except (ValueError, UnknownChoiceError):
                typer.echo(f"Pick a number between 1 and {len(view.choices)}, or q to quit.")
                continue

            outcome = session.on_choice(choice_id)
            if outcome.correct:
                typer.secho("Correct!", fg=typer.colors.GREEN)
                if outcome.announcement:
                    typer.secho(outcome.announcement, fg=typer.colors.YELLOW, bold=True)
                finished += 1
                if delay:
                    time.sleep(delay)
                break
            if outcome.graded:
                typer.secho("Not quite, try again.", fg=typer.colors.RED)
    return finished


@app.command()
def play(
    rounds: Annotated[
        int | None, typer.Option(help="Stop after this many rounds. Default: until 'q'.")
    ] = None,
    state_dir: Annotated[Path | None, typer.Option(help="Where progress is saved.")] = None,
    delay: Annotated[
        float | None, typer.Option(help="Pause in seconds after a correct answer.")
    ] = None,
):
    """[bold green]Play[/bold green] the memory game in the terminal."""
    config = _resolve(state_dir=state_dir, advance_delay=delay)
    roster = load_roster_or_exit(config)
    session = build_session(config, roster)
    played = play_rounds(session, rounds=rounds, delay=config.advance_delay)
    typer.echo(f"Rounds completed: {played}. Streak: {session.streak.count}.")


@app.command()
def roster():
    """Fetch the directory and summarize who can be played."""
    config = resolve_config()
    people = load_roster_or_exit(config)
    pronouns = Counter(p.pronouns or "unspecified" for p in people)
    typer.echo(f"{len(people)} people with a name and photo.")
    for label, n in pronouns.most_common():
        typer.echo(f"  {label}: {n}")


@app.command()
def stats(
    state_dir: Annotated[Path | None, typer.Option(help="Where progress is saved.")] = None,
    top: Annotated[int, typer.Option(help="How many confusions to list.")] = 5,
):
    """Show saved progress: cards per state and the most common mix-ups."""
    from facecards.application.card_store import CardStore
    from facecards.application.confusion import ConfusionTracker
    from facecards.application.streak import Streak

    config = _resolve(state_dir=state_dir)
    store = get_state_store(config)
    cards = CardStore(store)
    confusion = ConfusionTracker(store)

    counts = Counter(card.state for _, card in cards.items())
    typer.echo(f"Cards: {len(cards)}")
    for state in CardState:
        typer.echo(f"  {state.name.lower()}: {counts.get(state, 0)}")
    typer.echo(f"Streak: {Streak(store).count}")

    pairs = confusion.top_pairs(top)
    if pairs:
        typer.echo("Most confused:")
        for target, other, n in pairs:
            typer.echo(f"  {target} mistaken for {other}: {n}")


@app.command()
def reset(
    state_dir: Annotated[Path | None, typer.Option(help="Where progress is saved.")] = None,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation.")] = False,
):
    """Forget all saved progress."""
    config = _resolve(state_dir=state_dir)
    if not yes and not typer.confirm(f"Delete all progress in {config.state_dir}?"):
        raise typer.Exit(code=1)
    store = get_state_store(config)
    for name in (CARDS_RECORD, CONFUSION_RECORD, ACTIVE_CHALLENGE_RECORD, STREAK_RECORD):
        store.clear(name)
    typer.echo("Progress cleared.")


@config_app.command("show")
def config_show():
    """Print the resolved configuration as JSON (token redacted)."""
    config = resolve_config()
    data = config.model_dump(mode="json")
    if data.get("directory_token"):
        data["directory_token"] = "***"
    typer.echo(json.dumps(data, indent=2))
