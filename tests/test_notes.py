import pytest
from sqlalchemy import func, select

from models import NotesNode, User
from notes import child_path, children, class_sort_key, load_tree, notes_for, slugify
from seed import SAMPLE_CATALOGUE, seed_all, seed_default_users, seed_notes_if_empty

CROP_TOPIC = "classes/class-8/subjects/science/chapters/crop-production-and-management/topics/agricultural-practices"


def test_slugify_and_paths() -> None:
    assert slugify("  Light - Reflection and Refraction ") == "light-reflection-and-refraction"
    assert child_path(None, "classes", "class-8") == "classes/class-8"
    assert child_path("classes/class-8", "subjects", "science") == "classes/class-8/subjects/science"
    with pytest.raises(ValueError):
        child_path(None, "units", "x")


def test_class_sort_key_orders_numbered_classes_first() -> None:
    names = ["Foundation", "Class 12th", "Class 8", "Class 10"]
    assert sorted(names, key=class_sort_key) == ["Class 8", "Class 10", "Class 12th", "Foundation"]


def test_sample_catalogue_loads_every_level(db) -> None:
    assert load_tree(db, SAMPLE_CATALOGUE) == 35
    classes = children(db, None, "classes")
    assert [c.name for c in classes] == ["Class 8", "Class 10", "Class 11th", "Class 12th"]

    streams = children(db, "classes/class-11th", "streams")
    assert [s.name for s in streams] == ["Commerce", "Science"]
    assert children(db, "classes/class-8", "streams") == []

    subjects = children(db, "classes/class-8", "subjects")
    assert [s.name for s in subjects] == ["Mathematics", "Science"]


def test_notes_for_topic(db) -> None:
    load_tree(db, SAMPLE_CATALOGUE)
    assert notes_for(db, CROP_TOPIC) == [
        {"url": "https://ncert.nic.in/textbook/pdf/hesc101.pdf", "title": "Agricultural Practices - Note 1"}
    ]
    assert notes_for(db, CROP_TOPIC.replace("agricultural-practices", "storage-of-harvest")) == []
    assert notes_for(db, "classes/missing") == []


def test_reloading_updates_existing_nodes(db) -> None:
    load_tree(db, {"Class 9": {"Science": {"Motion": {"Speed": ["a.pdf"]}}}})
    load_tree(db, {"Class 9": {"Science": {"Motion": {"Speed": ["a.pdf", "b.pdf"]}}}})
    topic = "classes/class-9/subjects/science/chapters/motion/topics/speed"
    assert [n["title"] for n in notes_for(db, topic)] == ["Speed - Note 1", "Speed - Note 2"]
    assert db.scalar(select(func.count()).select_from(NotesNode)) == 4


def test_seeding_is_idempotent(db) -> None:
    assert seed_notes_if_empty(db) == 35
    assert seed_notes_if_empty(db) == 0

    seed_default_users(db)
    seed_default_users(db)
    users = db.scalars(select(User)).all()
    assert sorted(u.role for u in users) == ["admin", "parent", "student", "teacher"]
    assert {u.subscription_model for u in users if u.role == "teacher"} == {"teacher"}


def test_seed_all_only_adds_missing_rows(db) -> None:
    seed_all(db)
    seed_all(db)
    assert db.scalar(select(func.count()).select_from(User)) == 4
    assert db.scalar(select(func.count()).select_from(NotesNode)) > 0
