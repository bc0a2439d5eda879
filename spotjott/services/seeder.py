"""
Demo data generator.

Everything is created through the domain services, so counters, tag links
and notifications end up exactly as real traffic would leave them.
"""

from __future__ import annotations
import random
from datetime import timedelta
from typing import Sequence

from faker import Faker
from sqlalchemy.orm import Session

from spotjott.errors import AppError
from spotjott.models import Jot, User, utcnow
from spotjott.services.auth import AuthService, RegisterData
from spotjott.services.diaries import DiaryService
from spotjott.services.emotions import EmotionService, seed_default_emotions
from spotjott.services.entries import DiaryEntryService, EntryCreate
from spotjott.services.jots import JotService
from spotjott.services.notifications import Notifier
from spotjott.services.users import UserService

SEED = 1337
DEMO_PASSWORD = "password123"
TAG_POOL = [
    "travel", "work", "family", "health", "gratitude", "music", "books", "food", "goals", "weekend",
]

fake = Faker()


def seed_random_generators(seed: int = SEED) -> None:
    """Make random and the module Faker instance reproducible."""
    random.seed(seed)
    Faker.seed(seed)
    fake.seed_instance(seed)
    fake.unique.clear()


def make_users(db: Session, n_users: int) -> list[User]:
    auth = AuthService(db)
    users = []
    for _ in range(n_users):
        user, _token = auth.register(RegisterData(
            first_name=fake.first_name(),
            last_name=fake.last_name(),
            email=fake.unique.email(),
            password=DEMO_PASSWORD,
            bio=fake.sentence(nb_words=10),
            tags=",".join(random.sample(TAG_POOL, k=random.randint(0, 3))),
        ))
        users.append(user)
    return users


def make_follows(db: Session, users: Sequence[User], n_follows: int) -> int:
    """Create up to ``n_follows`` distinct follow edges. Returns how many were made."""
    if len(users) < 2:
        return 0
    service = UserService(db, notifier=Notifier(db))
    made = 0
    attempts = 0
    while made < n_follows and attempts < n_follows * 5:
        attempts += 1
        follower, target = random.sample(list(users), 2)
        try:
            service.follow(follower.id, target.id)
        except AppError:
            continue  # already following
        made += 1
    return made


def make_jots(db: Session, users: Sequence[User], n_jots: int) -> list[Jot]:
    service = JotService(db, notifier=Notifier(db))
    jots = []
    for _ in range(n_jots):
        author = random.choice(users)
        jots.append(service.create(author.id, fake.paragraph(nb_sentences=random.randint(1, 4))[:1000]))
    return jots


def make_engagement(db: Session, jots: Sequence[Jot], users: Sequence[User]) -> None:
    """Scatter reactions and comments, roughly three reactions per comment."""
    service = JotService(db, notifier=Notifier(db))
    for jot in jots:
        reactors = random.sample(list(users), k=random.randint(0, min(len(users), 6)))
        for user in reactors:
            service.toggle_reaction(user.id, jot.id, random.choice(["like", "like", "love", "insightful", "celebrate"]))
        for _ in range(random.randint(0, 2)):
            service.add_comment(random.choice(users).id, jot.id, fake.sentence(nb_words=random.randint(4, 14)))


def make_diaries(db: Session, users: Sequence[User], entries_per_diary: int = 3) -> None:
    diaries = DiaryService(db)
    entries = DiaryEntryService(db)
    for user in users:
        diary = diaries.create(
            user.id,
            fake.catch_phrase()[:200],
            fake.sentence(),
            is_public=random.random() < 0.5,
        )
        for _ in range(random.randint(0, entries_per_diary)):
            entries.create(user.id, EntryCreate(
                title=fake.sentence(nb_words=5)[:300],
                content=fake.text(max_nb_chars=600),
                diary_id=str(diary.id),
                tags=",".join(random.sample(TAG_POOL, k=random.randint(0, 3))),
            ))


def make_emotion_history(db: Session, users: Sequence[User], days: int = 7) -> None:
    seed_default_emotions(db)
    service = EmotionService(db)
    catalog = service.catalog()
    for user in users:
        for offset in range(days):
            if random.random() < 0.7:
                day = (utcnow() - timedelta(days=offset)).date()
                service.track(user.id, random.choice(catalog).id, day.isoformat())
