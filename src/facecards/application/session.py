"""
Challenge session: the game loop's state, owned in one place.

A session holds the roster, the stores and the round in progress. Rendering
layers (the HTTP API, the terminal) only ever call ``start_challenge`` and
``on_choice`` and draw the views they get back.
"""

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from pydantic import TypeAdapter, ValidationError

from facecards.application.card_store import CardStore
from facecards.application.confusion import ConfusionTracker
from facecards.application.distractors import select_distractors
from facecards.application.grading import GradingLoop
from facecards.application.roster import ensure_playable
from facecards.application.scheduler import select_next_card
from facecards.application.streak import Streak, StreakDisplay
from facecards.application.utils.text import short_name
from facecards.domain.constants import ACTIVE_CHALLENGE_RECORD, MIN_CANDIDATES
from facecards.domain.errors import NoActiveChallengeError, UnknownChoiceError
from facecards.domain.models import ActiveChallenge, Direction, Person
from facecards.domain.ports import StateStore

logger = logging.getLogger(__name__)

_ACTIVE = TypeAdapter(ActiveChallenge)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Choice:
    id: str
    key: int  # 1-based keyboard shortcut
    label: str | None = None
    image: str | None = None


@dataclass(frozen=True)
class ChallengeView:
    """Everything needed to draw one round."""

    mode: Direction
    prompt: str  # image reference for face-to-name, short name for name-to-face
    choices: list[Choice]
    has_errored: bool = False
    eliminated: list[str] = field(default_factory=list)
    streak: StreakDisplay | None = None


@dataclass(frozen=True)
class ChoiceOutcome:
    choice_id: str
    correct: bool
    graded: bool
    finished: bool  # the round is over and the next start_challenge picks a new card
    streak: int
    announcement: str | None = None


def render_challenge(
    target: Person,
    direction: Direction,
    options: list[Person],
    short_name_fn: Callable[[str], str] = short_name,
) -> ChallengeView:
    """
    Describe a round for a renderer. Pure: same inputs, same view.

    Labels use short names unless two options would read the same, in which
    case every label falls back to the full name, and then to the full name
    with the person's id. The name prompt follows the same fallback.
    """
    labels = [short_name_fn(p.display_name) for p in options]
    if len(set(labels)) < len(labels):
        labels = [p.display_name for p in options]
    if len(set(labels)) < len(labels):
        labels = [f"{p.display_name} ({p.id})" for p in options]

    if direction == Direction.FACE_TO_NAME:
        prompt = target.image_ref
        choices = [
            Choice(id=p.id, key=i, label=label)
            for i, (p, label) in enumerate(zip(options, labels), start=1)
        ]
    else:
        prompt = next(
            (label for p, label in zip(options, labels) if p.id == target.id),
            short_name_fn(target.display_name),
        )
        choices = [
            Choice(id=p.id, key=i, image=p.image_ref) for i, p in enumerate(options, start=1)
        ]
    return ChallengeView(mode=direction, prompt=prompt, choices=choices)


class ChallengeSession:
    """
    Session context for one player.

    Args:
        roster: Usable people for this session, loaded before the first round.
        cards: Card Store.
        confusion: Confusion Tracker.
        streak: Streak counter.
        grading: Grading loop writing to the same stores.
        store: Where the round in progress is persisted.
        short_name_fn: Name projection for labels and the uniqueness rule.
        rng: Randomness for scheduling and shuffling; seed it in tests.
        clock: Source of "now".
    """

    def __init__(
        self,
        roster: list[Person],
        cards: CardStore,
        confusion: ConfusionTracker,
        streak: Streak,
        grading: GradingLoop,
        store: StateStore,
        short_name_fn: Callable[[str], str] = short_name,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.roster = roster
        self.cards = cards
        self.confusion = confusion
        self.streak = streak
        self.grading = grading
        self.short_name_fn = short_name_fn
        self.rng = rng or random.Random()
        self.clock = clock
        self._store = store
        self._people = {p.id: p for p in roster}
        self.active: ActiveChallenge | None = None
        self._eliminated: list[str] = []

    @property
    def has_errored(self) -> bool:
        return bool(self.active and self.active.has_errored)

    # ---------- Starting rounds ----------

    def start_challenge(self, now: datetime | None = None) -> ChallengeView:
        """
        Return the round to show: the one in progress if any, otherwise a new one.

        A persisted round is resumed only if every id in it is still on the
        roster; anything else stored is ignored and a fresh card is scheduled.
        """
        if self.active is None:
            self.active = self._restore()
            self._eliminated = []
        if self.active is None:
            self.active = self._new_challenge(now or self.clock())
            self._eliminated = []
            self._persist()
        return self.view()

    def _restore(self) -> ActiveChallenge | None:
        raw = self._store.load(ACTIVE_CHALLENGE_RECORD)
        if raw is None:
            return None
        try:
            active = _ACTIVE.validate_python(raw)
        except ValidationError as e:
            logger.warning(f"Ignoring unreadable saved challenge: {e.error_count()} errors")
            return None

        ids = active.option_ids
        if (
            len(ids) < MIN_CANDIDATES
            or len(set(ids)) != len(ids)
            or ids.count(active.target_id) != 1
            or any(i not in self._people for i in ids)
        ):
            logger.warning("Ignoring saved challenge that no longer matches the roster")
            return None
        logger.info(f"Resuming challenge for {active.target_id} ({active.direction.value})")
        return active

    def _new_challenge(self, now: datetime) -> ActiveChallenge:
        ensure_playable(self.roster)
        ref = select_next_card(self.roster, self.cards, now, rng=self.rng)
        target_card = self.cards.get(ref.person.id, ref.direction, now)

        distractors = select_distractors(
            ref.person,
            target_card,
            self.roster,
            self.confusion,
            short_name_fn=self.short_name_fn,
            rng=self.rng,
        )
        if not distractors:
            # Everyone shares the target's short name; tell them apart by full name.
            distractors = select_distractors(
                ref.person,
                target_card,
                self.roster,
                self.confusion,
                short_name_fn=str.strip,
                rng=self.rng,
            )
        if not distractors:
            # Identical full names: any other person, told apart when rendered.
            logger.warning(f"No distinct name to pair with {ref.person.id}, allowing namesakes")
            distractors = select_distractors(
                ref.person,
                target_card,
                self.roster,
                self.confusion,
                short_name_fn=self.short_name_fn,
                rng=self.rng,
                unique_names=False,
            )

        options = [ref.person, *distractors]
        self.rng.shuffle(options)
        return ActiveChallenge(
            target_id=ref.person.id,
            direction=ref.direction,
            option_ids=[p.id for p in options],
        )

    def _persist(self) -> None:
        if self.active is not None:
            self._store.save(ACTIVE_CHALLENGE_RECORD, _ACTIVE.dump_python(self.active, mode="json"))

    def view(self) -> ChallengeView:
        if self.active is None:
            raise NoActiveChallengeError("No challenge in progress.")
        target = self._people[self.active.target_id]
        options = [self._people[i] for i in self.active.option_ids]
        base = render_challenge(target, self.active.direction, options, self.short_name_fn)
        return ChallengeView(
            mode=base.mode,
            prompt=base.prompt,
            choices=base.choices,
            has_errored=self.active.has_errored,
            eliminated=list(self._eliminated),
            streak=self.streak.display,
        )

    # ---------- Answering ----------

    def choice_for_key(self, key: int) -> str:
        """Map a 1-based keyboard shortcut to the option id it selects."""
        if self.active is None:
            raise NoActiveChallengeError("No challenge in progress.")
        if not 1 <= key <= len(self.active.option_ids):
            raise UnknownChoiceError(str(key))
        return self.active.option_ids[key - 1]

    def on_choice(self, choice_id: str, now: datetime | None = None) -> ChoiceOutcome:
        """
        The single input event: the player picked ``choice_id``.

        Raises:
            NoActiveChallengeError: no round is open (already answered, or never started).
            UnknownChoiceError: the id is not one of this round's options.
        """
        active = self.active
        if active is None:
            raise NoActiveChallengeError("No challenge in progress.")
        choice_id = str(choice_id)
        if choice_id not in active.option_ids:
            raise UnknownChoiceError(choice_id)

        if choice_id in self._eliminated:
            # Already marked wrong this round
            return ChoiceOutcome(
                choice_id=choice_id,
                correct=False,
                graded=False,
                finished=False,
                streak=self.streak.count,
            )

        now = now or self.clock()
        correct = choice_id == active.target_id
        result = self.grading.record_answer(
            active.target_id,
            active.direction,
            correct,
            now,
            distractor_id=None if correct else choice_id,
            has_errored=active.has_errored,
        )

        if correct:
            self.active = None
            self._eliminated = []
            self._store.clear(ACTIVE_CHALLENGE_RECORD)
        else:
            active.has_errored = True
            self._eliminated.append(choice_id)
            self._persist()

        return ChoiceOutcome(
            choice_id=choice_id,
            correct=correct,
            graded=result.graded,
            finished=correct,
            streak=result.streak,
            announcement=result.announcement,
        )
