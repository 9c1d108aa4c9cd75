"""
Shared fixtures: an isolated in-memory database per test and a few
ready-made rows.
"""
import os

os.environ.setdefault("HABITQUEST_DATABASE_URL", "sqlite://")
os.environ.setdefault("HABITQUEST_LOG_DIR", "./logs")
os.environ.setdefault("HABITQUEST_SCHEDULER_ENABLED", "false")

import random
import pytest
from datetime import date, datetime, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from habitquest.database import Base, enable_sqlite_savepoints
from habitquest.models import User, Habit, ChallengeDay, DailyChallenge
from habitquest.services.achievement_service import seed_catalog
from habitquest.constants import (
    CHALLENGE_COMPLETE_HABITS,
    CHALLENGE_EARN_POINTS,
    CHALLENGE_CLICK_COUNT,
)


class FixedRandom(random.Random):
    """random() always returns `value`; sample/choice/randint stay seeded"""

    def __init__(self, value: float, seed: int = 42):
        self.value = value
        super().__init__(seed)

    def random(self):
        return self.value

    def getrandbits(self, k):
        return super().getrandbits(k)


class RecordingNotifier:
    def __init__(self, fail: bool = False):
        self.sent = []
        self.fail = fail

    def notify(self, user_id, title, message, data):
        if self.fail:
            raise RuntimeError("push gateway down")
        self.sent.append((user_id, title, data))


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def catalog(db_session):
    """Seed the achievement catalogue"""
    seed_catalog(db_session)
    return db_session


@pytest.fixture
def today():
    return date(2026, 3, 10)


@pytest.fixture
def yesterday(today):
    return today - timedelta(days=1)


@pytest.fixture
def user(db_session):
    user = User(username="alice", referral_code="ALICE001", created_at=datetime.now())
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def other_user(db_session):
    user = User(username="bob", referral_code="BOB00002", created_at=datetime.now())
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def habit(db_session, user):
    habit = Habit(owner_id=user.id, name="Read 20 pages", difficulty="medium", category="learning")
    db_session.add(habit)
    db_session.commit()
    return habit


@pytest.fixture
def todays_challenges(db_session, today):
    """A fixed challenge set for today, keyed by type"""
    db_session.add(ChallengeDay(day=today))
    challenges = {
        CHALLENGE_COMPLETE_HABITS: DailyChallenge(
            type=CHALLENGE_COMPLETE_HABITS, title="Habit Hero", description="Complete 2 habits today",
            target=2, reward=60, difficulty="hard", day=today
        ),
        CHALLENGE_EARN_POINTS: DailyChallenge(
            type=CHALLENGE_EARN_POINTS, title="Point Hunter", description="Earn 100 points today",
            target=100, reward=20, difficulty="easy", day=today
        ),
        CHALLENGE_CLICK_COUNT: DailyChallenge(
            type=CHALLENGE_CLICK_COUNT, title="Click Champion", description="Make 3 clicks today",
            target=3, reward=10, difficulty="easy", day=today
        ),
    }
    db_session.add_all(challenges.values())
    db_session.commit()
    return challenges
