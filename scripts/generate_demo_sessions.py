"""
Generate Demo Sessions
Populates the API database with demo accounts and a month of posture
sessions recorded by the mock detector.

    python scripts/generate_demo_sessions.py --users 5 --days 30
"""
import sys
import os
import argparse
import random
from datetime import datetime, timedelta, timezone

# Add the parent directory to the path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from faker import Faker
from sqlalchemy.orm import Session

from posturepal.core.database import SessionLocal, Base, engine
from posturepal.models import User, UserProfile, UserSettings, PostureSession, PostureIssue, ScoreSample
from posturepal.schemas.profile import FitnessGoal, Gender
from posturepal.services.posture_analyzer import MockPostureAnalyzer
from posturepal.services.session_tracker import SessionTracker
from posturepal.utils import get_password_hash

faker = Faker()

DEMO_PASSWORD = "demo1234"
PLATFORMS = ["Windows", "macOS", "Linux"]


class SimulatedClock:
    """Clock the tracker reads; advanced by hand instead of sleeping."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float):
        self.now += timedelta(seconds=seconds)


def create_demo_user(db: Session) -> User:
    name = faker.name()
    user = User(
        name=name,
        email=faker.unique.email(domain="example.com"),
        hashed_password=get_password_hash(DEMO_PASSWORD),
    )
    user.profile = UserProfile(
        name=name,
        age=random.randint(20, 65),
        gender=random.choice(list(Gender)).value,
        height=round(random.uniform(150, 195), 1),
        weight=round(random.uniform(50, 110), 1),
        fitness_goal=random.choice(list(FitnessGoal)).value,
    )
    user.settings = UserSettings(
        reminder_interval=random.choice([10, 15, 20, 30]),
        sensitivity=round(random.uniform(0.5, 0.9), 1),
    )
    db.add(user)
    db.flush()
    return user


def simulate_session(user_id: int, start: datetime, minutes: int) -> PostureSession:
    """
    Run the mock detector through the tracker for one work block.
    """
    clock = SimulatedClock(start)
    tracker = SessionTracker(clock=clock)
    detector = MockPostureAnalyzer()

    tracker.start()
    for _ in range(minutes * 60 // tracker.tick_interval):
        clock.advance(tracker.tick_interval)
        sample = detector.analyze_frame()
        sample.timestamp = clock.now
        for issue in sample.issues:
            issue.timestamp = clock.now
        tracker.tick(sample)
    session = tracker.stop()

    platform = random.choice(PLATFORMS)
    return PostureSession(
        user_id=user_id,
        start_time=session.start_time,
        end_time=session.end_time,
        total_time=session.total_time,
        good_posture_time=session.good_posture_time,
        average_score=session.average_score,
        user_agent=faker.user_agent(),
        platform=platform,
        issues=[
            PostureIssue(type=i.type.value, severity=i.severity.value, message=i.message, timestamp=i.timestamp)
            for i in session.issues
        ],
        scores=[ScoreSample(score=s.score, timestamp=s.timestamp) for s in session.scores],
    )


def generate_sessions(db: Session, user: User, days: int = 30) -> int:
    """
    One to three sessions per weekday, during work hours.
    """
    created = 0
    today = datetime.now(timezone.utc).replace(minute=0, second=0, microsecond=0)

    for day in range(days, 0, -1):
        date = today - timedelta(days=day)
        if date.weekday() >= 5:
            continue

        for _ in range(random.randint(1, 3)):
            start = date.replace(hour=random.randint(9, 17), minute=random.randint(0, 59))
            db.add(simulate_session(user.id, start, minutes=random.randint(5, 45)))
            created += 1

    return created


def generate_demo_data(users: int, days: int):
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    try:
        for _ in range(users):
            user = create_demo_user(db)
            count = generate_sessions(db, user, days=days)
            print(f"✓ {user.email}: {count} sessions")
        db.commit()
        print(f"\n✅ Demo data generated (password for every account: {DEMO_PASSWORD})")
    except Exception as e:
        print(f"\n❌ Error generating demo data: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the PosturePal database with demo data")
    parser.add_argument("--users", type=int, default=5)
    parser.add_argument("--days", type=int, default=30)
    args = parser.parse_args()

    generate_demo_data(args.users, args.days)
