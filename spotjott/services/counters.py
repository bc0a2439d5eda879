"""
Audit of the denormalized counters against the rows they summarize.

Used by the ``check-counters`` CLI command to spot drift and, with ``fix``,
rewrite each counter from its detail rows.
"""

from collections import namedtuple
from typing import Any, Dict, List

from sqlalchemy import func, update
from sqlalchemy.orm import Session
from tenacity import retry, stop_after_attempt, wait_exponential

from spotjott.config import DB_RETRY_ATTEMPTS, DB_RETRY_MAX_WAIT, DB_RETRY_MIN_WAIT
from spotjott.models import Follow, Jot, JotComment, JotReaction, Story, StoryView, User

CounterCheck = namedtuple("CounterCheck", ["name", "model", "counter", "detail_key"])

COUNTER_CHECKS = [
    CounterCheck("users.followers_count", User, User.followers_count, Follow.following_id),
    CounterCheck("users.following_count", User, User.following_count, Follow.follower_id),
    CounterCheck("jots.reactions_count", Jot, Jot.reactions_count, JotReaction.jot_id),
    CounterCheck("jots.comments_count", Jot, Jot.comments_count, JotComment.jot_id),
    CounterCheck("stories.views_count", Story, Story.views_count, StoryView.story_id),
]


def _mismatches(session: Session, check: CounterCheck) -> List[Dict[str, Any]]:
    actual = (
        session.query(check.detail_key.label("target_id"), func.count().label("n"))
        .group_by(check.detail_key)
        .subquery()
    )
    expected = func.coalesce(actual.c.n, 0)
    rows = (
        session.query(check.model.id, check.counter, expected)
        .outerjoin(actual, actual.c.target_id == check.model.id)
        .filter(check.counter != expected)
        .order_by(check.model.id)
        .all()
    )
    return [
        {"counter": check.name, "id": row_id, "stored": stored, "actual": real}
        for row_id, stored, real in rows
    ]


@retry(
    stop=stop_after_attempt(DB_RETRY_ATTEMPTS),
    wait=wait_exponential(multiplier=1, min=DB_RETRY_MIN_WAIT, max=DB_RETRY_MAX_WAIT),
    reraise=True,
)
def audit_counters(session: Session) -> List[Dict[str, Any]]:
    """
    Recompute every counter from its detail rows.

    Returns:
        One dict per drifted row: counter name, row id, stored and actual values
    """
    mismatches = []
    for check in COUNTER_CHECKS:
        mismatches.extend(_mismatches(session, check))
    return mismatches


def fix_counters(session: Session) -> List[Dict[str, Any]]:
    """Overwrite drifted counters with their recomputed values, in one commit."""
    mismatches = audit_counters(session)
    by_name = {check.name: check for check in COUNTER_CHECKS}
    for m in mismatches:
        check = by_name[m["counter"]]
        session.execute(
            update(check.model)
            .where(check.model.id == m["id"])
            .values({check.counter.key: m["actual"]})
            .execution_options(synchronize_session=False)
        )
    session.commit()
    return mismatches
