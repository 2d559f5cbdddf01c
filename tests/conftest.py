"""Shared test fixtures for sqla-ability tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from sqla_ability import Ability
from tests.models import Base, Child, Color, Ledger, Parent, Record, Shape


@pytest.fixture()
def engine():
    """Create an in-memory SQLite engine with all tables."""
    eng = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(eng)
    return eng


@pytest.fixture()
def session(engine):
    """Provide a transactional session that rolls back after each test."""
    factory = sessionmaker(bind=engine)
    sess = factory()
    try:
        yield sess
    finally:
        sess.rollback()
        sess.close()


@pytest.fixture()
def ability() -> Ability:
    return Ability()


@pytest.fixture()
def shapes(session: Session) -> dict[str, Shape]:
    """One shape per color."""
    red = Shape(color=Color.RED, sides=3)
    green = Shape(color=Color.GREEN, sides=4)
    blue = Shape(color=Color.BLUE, sides=None)
    session.add_all([red, green, blue])
    session.flush()
    return {"red": red, "green": green, "blue": blue}


@pytest.fixture()
def ledgers(session: Session) -> dict[str, Ledger]:
    """Three ledgers: both record names, only the crappy one, only the better one."""
    double_records = Ledger(title="unreadable")
    double_records.records.append(Record(name="crappy_record"))
    double_records.records.append(Record(name="better_record"))

    only_unreadable = Ledger(title="unreadable")
    only_unreadable.records.append(Record(name="crappy_record"))

    only_readable = Ledger(title="readable")
    only_readable.records.append(Record(name="better_record"))

    session.add_all([double_records, only_unreadable, only_readable])
    session.flush()
    return {
        "double_records": double_records,
        "only_unreadable": only_unreadable,
        "only_readable": only_readable,
    }


@pytest.fixture()
def family(session: Session) -> dict[str, object]:
    """A parent with two children created an hour apart."""
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    parent = Parent(created_at=now)
    session.add(parent)
    session.flush()
    child1 = Child(parent=parent, created_at=now - timedelta(hours=1))
    session.add(child1)
    session.flush()
    child2 = Child(parent=parent, created_at=now - timedelta(hours=2))
    session.add(child2)
    session.flush()
    return {"parent": parent, "child1": child1, "child2": child2}
