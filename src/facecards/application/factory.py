"""
Session Factory
Centralizes the wiring of stores, engine and session from an AppConfig.
"""

import random

from facecards.application.card_store import CardStore
from facecards.application.config import AppConfig
from facecards.application.confusion import ConfusionTracker
from facecards.application.grading import GradingLoop
from facecards.application.session import ChallengeSession
from facecards.application.srs import SrsEngine
from facecards.application.streak import Streak
from facecards.application.utils.text import short_name_function
from facecards.domain.models import Person
from facecards.domain.ports import StateStore
from facecards.infrastructure.adapters.directory_client import DirectoryCache, DirectoryClient
from facecards.infrastructure.persistence.json_store import JsonFileStore


def get_state_store(config: AppConfig) -> StateStore:
    """Returns the durable store for this configuration."""
    return JsonFileStore(config.state_dir)


def get_srs_engine(config: AppConfig) -> SrsEngine:
    return SrsEngine(
        desired_retention=config.desired_retention,
        relearn_minutes=config.relearn_minutes,
        learning_floor_minutes=config.learning_floor_minutes,
        max_interval_days=config.max_interval_days,
    )


def get_directory_cache(config: AppConfig) -> DirectoryCache:
    client = DirectoryClient(
        url=config.directory_url,
        scope=config.directory_scope,
        page_size=config.page_size,
        timeout=config.request_timeout,
    )
    return DirectoryCache(client, ttl=config.cache_ttl_seconds)


def build_session(
    config: AppConfig,
    roster: list[Person],
    store: StateStore | None = None,
    engine: SrsEngine | None = None,
    rng: random.Random | None = None,
) -> ChallengeSession:
    """
    Assemble a ChallengeSession over ``roster``.

    Stores are read once here; the roster must already be loaded.
    """
    store = store or get_state_store(config)
    cards = CardStore(store)
    confusion = ConfusionTracker(store, symmetric=config.symmetric_confusion)
    streak = Streak(store)
    grading = GradingLoop(cards, confusion, streak, engine or get_srs_engine(config))
    return ChallengeSession(
        roster=roster,
        cards=cards,
        confusion=confusion,
        streak=streak,
        grading=grading,
        store=store,
        short_name_fn=short_name_function(config.short_name_style),
        rng=rng,
    )
