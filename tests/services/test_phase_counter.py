# tests/services/test_phase_counter.py
from sqlalchemy.orm import Session

from agentfails.models import Post, SiteCounter
from agentfails.services.phase import Phase, current_phase, get_site_counter, record_post


def test_phase_properties() -> None:
    assert Phase(total_posts=99, threshold=100).is_early_access
    assert not Phase(total_posts=100, threshold=100).is_early_access
    assert Phase(total_posts=97, threshold=100).posts_until_paid == 3
    assert Phase(total_posts=150, threshold=100).posts_until_paid == 0


def test_counter_seeded_from_existing_posts(db_session: Session) -> None:
    for index in range(2):
        db_session.add(
            Post(
                title=f"t{index}",
                image_url="https://img.test/x.png",
                source_link="https://x.test",
                agent="claude",
                fail_type="loop",
            )
        )
    db_session.flush()

    counter = get_site_counter(db_session)

    assert counter.total_posts == 2


def test_record_post_increments(db_session: Session) -> None:
    assert current_phase(db_session, threshold=5).total_posts == 0
    record_post(db_session)
    record_post(db_session)
    assert db_session.get(SiteCounter, 1).total_posts == 2
    phase = current_phase(db_session, threshold=2)
    assert phase.total_posts == 2
    assert not phase.is_early_access


def test_default_threshold_comes_from_settings(db_session: Session, free_threshold: int) -> None:
    assert current_phase(db_session).threshold == free_threshold
