import random
import re

import pytest

from jira_gateway.services.mock_data import EXTENSION_FIELDS, MockTicketSynthesizer

CORE = ("summary", "priority", "status", "issuetype", "created", "duedate")


def test_ticket_shape():
    tickets = MockTicketSynthesizer(rng=random.Random(3)).synthesize("project = ABC")
    assert 2 <= len(tickets) <= 8
    for ticket in tickets:
        assert re.fullmatch(r"DEMO-\d+", ticket["key"])
        fields = ticket["fields"]
        for name in CORE:
            assert name in fields
        for name in ("priority", "status", "issuetype"):
            assert fields[name]["name"]
        assert set(EXTENSION_FIELDS) <= set(fields)
    assert len({t["key"] for t in tickets}) == len(tickets)


def test_extension_values_in_range():
    for ticket in MockTicketSynthesizer(rng=random.Random(11), min_count=8).synthesize():
        fields = ticket["fields"]
        assert 10000 <= fields["customfield_10001"] < 60000
        assert 0 <= fields["customfield_10002"] <= 9
        assert fields["customfield_10007"] in (1, 2, 3, 5, 8, 13)
        assert fields["customfield_10010"] in (1, 2, 3, 5, 8, 13)
        assert "value" in fields["customfield_10008"]
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}", fields["customfield_10011"])


def test_size_hint_is_clamped():
    synth = MockTicketSynthesizer(rng=random.Random(0), min_count=2, max_count=4)
    assert len(synth.synthesize(size_hint=3)) == 3
    assert len(synth.synthesize(size_hint=1)) == 2
    assert len(synth.synthesize(size_hint=50)) == 4


def test_context_is_embedded_and_truncated():
    tickets = MockTicketSynthesizer(rng=random.Random(5)).synthesize("x" * 300)
    for ticket in tickets:
        assert "xxx" in ticket["fields"]["summary"]
        assert len(ticket["fields"]["summary"]) <= 100


def test_seeded_runs_share_shape():
    first = MockTicketSynthesizer(rng=random.Random(42)).synthesize("ctx")
    second = MockTicketSynthesizer(rng=random.Random(42)).synthesize("ctx")
    assert [t["key"] for t in first] == [t["key"] for t in second]
    assert [sorted(t["fields"]) for t in first] == [sorted(t["fields"]) for t in second]


def test_invalid_bounds():
    with pytest.raises(ValueError):
        MockTicketSynthesizer(min_count=5, max_count=2)
