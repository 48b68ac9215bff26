import pytest

from facecards.application.streak import Streak, announcement_for, display_for
from facecards.domain.constants import STREAK_RECORD


def test_hidden_at_zero():
    display = display_for(0)
    assert display.visible is False
    assert display.color is None


@pytest.mark.parametrize(
    "count,progress,color,shake",
    [
        (1, 10, "#28a745", 0),
        (5, 50, "#28a745", 1),
        (10, 100, "#ffc107", 2),
        (13, 30, "#ffc107", 2),
        (20, 100, "#dc3545", 4),
        (42, 20, "#dc3545", 5),
    ],
)
def test_display_hints(count, progress, color, shake):
    display = display_for(count)
    assert display.visible
    assert display.progress_percent == progress
    assert display.color == color
    assert display.shake_intensity == shake


def test_announcements_only_at_milestones():
    assert announcement_for(10) == "MATCHING SPREE"
    assert announcement_for(100) == "GODLIKE"
    assert announcement_for(11) is None
    assert announcement_for(35) is None


def test_streak_persists(store):
    streak = Streak(store)
    streak.hit()
    streak.hit()
    assert Streak(store).count == 2

    streak.reset()
    assert Streak(store).count == 0


@pytest.mark.parametrize("raw", ["7", -3, True, {"count": 2}])
def test_bad_saved_streak_starts_at_zero(store, raw):
    store.save(STREAK_RECORD, raw)
    assert Streak(store).count == 0
