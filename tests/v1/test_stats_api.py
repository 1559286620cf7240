# tests/v1/test_stats_api.py
"""Tests for the stats endpoint."""

import pytest
from fastapi import status

from conftest import MEMBER_WALLET, OTHER_WALLET


@pytest.mark.usefixtures("free_threshold")
def test_stats_reports_phase(client, make_member, make_post) -> None:
    """Totals and the early-access countdown reflect the database."""
    make_member(MEMBER_WALLET)
    make_member(OTHER_WALLET)
    make_post(upvotes=2)
    make_post(upvotes=3)

    response = client.get("/api/v1/stats")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["total_posts"] == 2
    assert data["total_members"] == 2
    assert data["total_upvotes"] == 5
    assert data["free_threshold"] == 3
    assert data["posts_until_paid"] == 1
    assert data["early_access"] is True
    assert data["pricing"] == {"signup": "2.00", "post": "0.10", "comment": "0.10"}


@pytest.mark.usefixtures("free_threshold")
def test_stats_after_threshold(client, make_post) -> None:
    """The countdown stops at zero."""
    for _ in range(4):
        make_post()

    data = client.get("/api/v1/stats").json()

    assert data["posts_until_paid"] == 0
    assert data["early_access"] is False


def test_stats_empty(client) -> None:
    """An empty site starts in early access."""
    data = client.get("/api/v1/stats").json()
    assert data["total_posts"] == 0
    assert data["total_upvotes"] == 0
    assert data["early_access"] is True
