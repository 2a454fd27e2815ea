"""Tests for the synthetic class generator."""

from grade_spy.events import DayEvent
from grade_spy.generator import build_source, generate_grades, ground_truth_scenario


def test_generate_grades_shape():
    """Test generated grades respect members, periods and grade range."""
    grades = generate_grades(4, 5, 3, seed=7, max_categories_per_period=2)
    assert list(grades.columns) == ["member", "category_id", "period", "value"]
    assert set(grades["member"]) <= set(range(4))
    assert grades["period"].between(0, 5).all()
    assert grades["value"].between(1, 10).all()
    # one grade per member, category and period
    assert not grades.duplicated(["member", "category_id", "period"]).any()
    per_period = grades.groupby("period")["category_id"].nunique()
    assert (per_period <= 2).all()


def test_generate_grades_reproducible():
    """Test the same seed gives the same table."""
    first = generate_grades(3, 4, 3, seed=9)
    second = generate_grades(3, 4, 3, seed=9)
    assert first.equals(second)


def test_full_participation():
    """Test everyone is graded in every active category by default."""
    grades = generate_grades(3, 4, 2, seed=2)
    counts = grades.groupby(["period", "category_id"])["member"].nunique()
    assert (counts == 3).all()


def test_ground_truth_has_empty_days(small_grades):
    """Test members get an empty event on active periods they sat out."""
    truth = ground_truth_scenario(small_grades, ["ann", "bob", "cid"])
    assert len(truth) == 3
    assert (DayEvent(0), DayEvent(2)) in truth
    for history in truth:
        assert [e.period for e in history] == [0, 2]


def test_build_source():
    """Test the built source exposes every category and member."""
    grades = generate_grades(2, 1, 3, seed=4)
    source = build_source(grades, 2, 3, 1)
    assert source.group_size() == 2
    assert [c.id for c in source.categories] == [0, 1, 2]
    assert source.timeline_end() == 1
