"""Tests for system category seeding."""

from app.models.category import Category
from app.seed import SYSTEM_CATEGORIES, seed_categories
from app.services.exclusion_filter import EXCLUDED_CATEGORY_LABELS
from app.services.pattern_analyzer import HARD_EXCLUDED_LABELS, UTILITY_LABELS, VARIABLE_LABELS


def test_seeds_all_labels(db_session):
    created = seed_categories(db_session)

    expected = len(SYSTEM_CATEGORIES) + sum(len(children) for children in SYSTEM_CATEGORIES.values())
    assert created == expected
    assert db_session.query(Category).count() == expected


def test_covers_detector_labels(db_session):
    """Every label the detector keys on exists after seeding."""
    seed_categories(db_session)
    labels = {c.label for c in db_session.query(Category).all()}

    for label_set in (EXCLUDED_CATEGORY_LABELS, HARD_EXCLUDED_LABELS, UTILITY_LABELS, VARIABLE_LABELS):
        assert set(label_set) <= labels


def test_children_linked_to_parent(db_session):
    seed_categories(db_session)
    coffee = db_session.query(Category).filter(Category.label == "Coffee").one()
    assert coffee.parent.label == "Food and Drink"


def test_second_run_is_noop(db_session):
    seed_categories(db_session)
    assert seed_categories(db_session) == 0
