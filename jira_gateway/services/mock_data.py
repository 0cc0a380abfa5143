from __future__ import annotations

import random
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

SUMMARIES = [
    "Checkout fails for saved cards",
    "Improve search relevance for product catalog",
    "Export reports to CSV",
    "Slow dashboard load for large tenants",
    "Add SSO login for enterprise accounts",
    "Mobile push notifications are delayed",
    "Audit log missing permission changes",
    "Bulk edit for backlog items",
]
PRIORITIES = ["Highest", "High", "Medium", "Low", "Lowest"]
STATUSES = ["To Do", "In Progress", "In Review", "Blocked", "Done"]
ISSUE_TYPES = ["Bug", "Improvement", "New Feature", "Story", "Task"]
TEAMS = ["Platform", "Payments", "Growth", "Mobile", "Data"]
CUSTOMERS = ["Acme Corp", "Globex", "Initech", "Umbrella", "Stark Industries", "Internal"]
LABELS = ["customer-request", "tech-debt", "security", "performance", "ux", "compliance"]
TIME_CRITICALITY = ["No timing impact", "Slowly degrading", "Drops steeply"]
ALIGNMENT = ["Low", "Medium", "High"]
POINT_SCALE = [1, 2, 3, 5, 8, 13]

MAX_SUMMARY_LENGTH = 100


def _future_date(rng: random.Random, max_days: int) -> str:
    return (date.today() + timedelta(days=rng.randint(0, max_days))).isoformat()


# Extension field id -> generator. Every synthesized ticket carries all of them.
EXTENSION_FIELDS: Dict[str, Callable[[random.Random], Any]] = {
    "customfield_10001": lambda rng: rng.randint(10000, 59999),
    "customfield_10002": lambda rng: rng.randint(0, 9),
    "customfield_10003": lambda rng: rng.randint(0, 4),
    "customfield_10004": lambda rng: rng.choice(TIME_CRITICALITY),
    "customfield_10005": lambda rng: rng.randint(1, 10),
    "customfield_10006": lambda rng: rng.randint(1, 8),
    "customfield_10007": lambda rng: rng.choice(POINT_SCALE),
    "customfield_10008": lambda rng: {"value": rng.choice(TEAMS)},
    "customfield_10009": lambda rng: rng.choice(CUSTOMERS),
    "customfield_10010": lambda rng: rng.choice(POINT_SCALE),
    "customfield_10011": lambda rng: _future_date(rng, 90),
    "customfield_10012": lambda rng: {"value": rng.choice(ALIGNMENT)},
}


class MockTicketSynthesizer:
    """
    PUBLIC_INTERFACE
    Produce fake tickets with the same structure as real JIRA search results.

    Values are random per call. Pass a seeded ``random.Random`` to make a run
    reproducible.
    """

    def __init__(self, rng: Optional[random.Random] = None, min_count: int = 2, max_count: int = 8) -> None:
        if min_count < 1 or max_count < min_count:
            raise ValueError("mock ticket bounds must satisfy 1 <= min_count <= max_count")
        self.rng = rng or random.Random()
        self.min_count = min_count
        self.max_count = max_count

    def _count(self, size_hint: Optional[int]) -> int:
        if size_hint is None:
            return self.rng.randint(self.min_count, self.max_count)
        return max(self.min_count, min(self.max_count, size_hint))

    # PUBLIC_INTERFACE
    def synthesize(self, context: str = "", size_hint: Optional[int] = None) -> List[Dict[str, Any]]:
        rng = self.rng
        count = self._count(size_hint)
        first = rng.randint(1000, 9000)
        created = datetime.now(timezone.utc).isoformat(timespec="milliseconds")

        tickets = []
        for i in range(count):
            summary = rng.choice(SUMMARIES)
            if context:
                summary = f"{summary} ({context})"
            fields: Dict[str, Any] = {
                "summary": summary[:MAX_SUMMARY_LENGTH],
                "priority": {"name": rng.choice(PRIORITIES)},
                "status": {"name": rng.choice(STATUSES)},
                "issuetype": {"name": rng.choice(ISSUE_TYPES)},
                "created": created,
                "duedate": _future_date(rng, 30),
                "labels": rng.sample(LABELS, rng.randint(0, 2)),
            }
            for field_id, generate in EXTENSION_FIELDS.items():
                fields[field_id] = generate(rng)
            tickets.append({"key": f"DEMO-{first + i}", "fields": fields})
        return tickets
