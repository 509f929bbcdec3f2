from __future__ import annotations

import pytest

from everytrack.database import create_db_engine, init_db, make_sessionmaker


@pytest.fixture
def engine():
    eng = create_db_engine("sqlite://", schema="", echo=False)
    init_db(create_tables=True, bind_engine=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine):
    db = make_sessionmaker(engine)()
    try:
        yield db
    finally:
        db.close()
