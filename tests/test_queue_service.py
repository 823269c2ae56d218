"""Tests for the booking admission queue."""

import random
import threading
from datetime import datetime, timedelta, timezone

import pytest

from conftest import seed_business
from app.core.exceptions import NotFoundError, QueueFullError, TransientError
from app.models import BookingQueue, QueueClient, QueueClientStatus
from app.services.queue.queue_service import QueueService


def queue_state(session_factory, business_id):
    session = session_factory()
    try:
        queue = session.get(BookingQueue, business_id)
        clients = session.query(QueueClient).filter(
            QueueClient.business_id == business_id
        ).order_by(QueueClient.position).all()
        return queue, clients
    finally:
        session.close()


def assert_contiguous(session_factory, business_id):
    queue, clients = queue_state(session_factory, business_id)
    positions = [client.position for client in clients]
    assert positions == list(range(1, len(clients) + 1))
    assert (queue.current_count if queue else 0) == len(clients)
    if clients:
        assert clients[0].status == QueueClientStatus.ACTIVE
        assert all(client.status == QueueClientStatus.WAITING for client in clients[1:])


@pytest.fixture
def business_id(session_factory):
    return seed_business(session_factory)


class TestJoin:
    def test_positions_follow_arrival(self, services, business_id):
        assert services.queue.join_queue(business_id, "a").position == 1
        assert services.queue.join_queue(business_id, "b").position == 2
        assert services.queue.join_queue(business_id, "c").position == 3

    def test_first_client_is_active(self, services, session_factory, business_id):
        services.queue.join_queue(business_id, "a", client_ip="10.0.0.1")
        services.queue.join_queue(business_id, "b")
        _, clients = queue_state(session_factory, business_id)
        assert [c.status for c in clients] == [QueueClientStatus.ACTIVE, QueueClientStatus.WAITING]
        assert clients[0].client_ip == "10.0.0.1"

    def test_join_is_idempotent(self, services, session_factory, business_id):
        services.queue.join_queue(business_id, "a")
        services.queue.join_queue(business_id, "b")
        again = services.queue.join_queue(business_id, "a")

        assert again.position == 1
        queue, clients = queue_state(session_factory, business_id)
        assert queue.current_count == 2
        assert len(clients) == 2

    def test_expired_record_rejoins_at_the_back(self, services, session_factory, business_id):
        for session_id in "abc":
            services.queue.join_queue(business_id, session_id)

        session = session_factory()
        with session.begin():
            session.get(QueueClient, (business_id, "a")).status = QueueClientStatus.EXPIRED
        session.close()

        assert services.queue.join_queue(business_id, "a").position == 3
        _, clients = queue_state(session_factory, business_id)
        assert [(c.session_id, c.position) for c in clients] == [("b", 1), ("c", 2), ("a", 3)]
        assert_contiguous(session_factory, business_id)

    def test_full_queue(self, session_factory, services, business_id):
        small = QueueService(services.runner, max_size=2)
        small.join_queue(business_id, "a")
        small.join_queue(business_id, "b")
        with pytest.raises(QueueFullError):
            small.join_queue(business_id, "c")
        # a returning member is still answered when full
        assert small.join_queue(business_id, "b").position == 2

    def test_unknown_business(self, services):
        with pytest.raises(NotFoundError):
            services.queue.join_queue("no-such-business", "a")

    def test_concurrent_duplicate_join(self, services, session_factory, business_id):
        results, errors = [], []

        def join():
            try:
                results.append(services.queue.join_queue(business_id, "same-session").position)
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=join) for _ in range(6)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert results == [1] * 6
        queue, clients = queue_state(session_factory, business_id)
        assert len(clients) == 1
        assert queue.current_count == 1

    def test_concurrent_distinct_joins(self, services, session_factory, business_id):
        threads = [
            threading.Thread(target=services.queue.join_queue, args=(business_id, f"s{i}"))
            for i in range(8)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert_contiguous(session_factory, business_id)
        _, clients = queue_state(session_factory, business_id)
        assert len(clients) == 8


class TestRemove:
    def test_remove_shifts_later_clients(self, services, session_factory, business_id):
        for session_id in "abcd":
            services.queue.join_queue(business_id, session_id)

        assert services.queue.remove_from_queue(business_id, "b") is True

        _, clients = queue_state(session_factory, business_id)
        assert [(c.session_id, c.position) for c in clients] == [("a", 1), ("c", 2), ("d", 3)]
        assert_contiguous(session_factory, business_id)

    def test_removing_front_activates_next(self, services, session_factory, business_id):
        services.queue.join_queue(business_id, "a")
        services.queue.join_queue(business_id, "b")
        services.queue.remove_from_queue(business_id, "a")

        client = services.queue.get_position(business_id, "b")
        assert client.position == 1
        assert client.status == QueueClientStatus.ACTIVE

    def test_remove_absent_session(self, services, business_id):
        assert services.queue.remove_from_queue(business_id, "ghost") is False
        services.queue.join_queue(business_id, "a")
        assert services.queue.remove_from_queue(business_id, "ghost") is False

    def test_tickets_are_never_reused(self, services, session_factory, business_id):
        services.queue.join_queue(business_id, "a")
        services.queue.join_queue(business_id, "b")
        services.queue.remove_from_queue(business_id, "b")
        services.queue.join_queue(business_id, "c")

        queue, clients = queue_state(session_factory, business_id)
        assert {c.session_id: c.ticket for c in clients} == {"a": 1, "c": 3}
        assert queue.last_position == 3
        assert queue.current_count == 2

    def test_random_join_remove_keeps_positions_contiguous(self, services, session_factory, business_id):
        rng = random.Random(7)
        present = []
        counter = 0

        for _ in range(60):
            if present and rng.random() < 0.45:
                session_id = rng.choice(present)
                present.remove(session_id)
                services.queue.remove_from_queue(business_id, session_id)
            else:
                counter += 1
                session_id = f"s{counter}"
                present.append(session_id)
                services.queue.join_queue(business_id, session_id)

            assert_contiguous(session_factory, business_id)
            _, clients = queue_state(session_factory, business_id)
            assert [c.session_id for c in clients] == present


class TestActivity:
    def test_heartbeat_refreshes_activity_only(self, services, session_factory, business_id):
        services.queue.join_queue(business_id, "a")
        services.queue.join_queue(business_id, "b")
        before = services.queue.get_position(business_id, "b")

        services.queue.update_activity(business_id, "b")

        after = services.queue.get_position(business_id, "b")
        assert after.position == before.position
        assert after.last_activity >= before.last_activity

    def test_heartbeat_for_unknown_session(self, services, business_id):
        with pytest.raises(NotFoundError):
            services.queue.update_activity(business_id, "ghost")

    def test_position_of_unknown_session(self, services, business_id):
        with pytest.raises(NotFoundError):
            services.queue.get_position(business_id, "ghost")

    def test_cleanup_removes_stale_clients(self, services, session_factory, business_id):
        for session_id in "abc":
            services.queue.join_queue(business_id, session_id)

        session = session_factory()
        with session.begin():
            stale = session.get(QueueClient, (business_id, "a"))
            stale.last_activity = datetime.now(timezone.utc) - timedelta(minutes=30)
        session.close()

        assert services.queue.cleanup_expired_clients() == 1

        _, clients = queue_state(session_factory, business_id)
        assert [(c.session_id, c.position) for c in clients] == [("b", 1), ("c", 2)]
        assert_contiguous(session_factory, business_id)

    def test_cleanup_with_future_clock_removes_everyone(self, services, session_factory, business_id):
        services.queue.join_queue(business_id, "a")
        services.queue.join_queue(business_id, "b")

        later = datetime.now(timezone.utc) + timedelta(hours=1)
        assert services.queue.cleanup_expired_clients(now=later) == 2
        assert services.queue.list_clients(business_id) == []
        assert_contiguous(session_factory, business_id)

    def test_cleanup_recovers_after_failed_run(self, services, session_factory, business_id, monkeypatch):
        services.queue.join_queue(business_id, "a")
        services.queue.join_queue(business_id, "b")
        later = datetime.now(timezone.utc) + timedelta(hours=1)

        def busy(*args):
            raise TransientError()

        monkeypatch.setattr(services.queue, "_expire_client", busy)
        assert services.queue.cleanup_expired_clients(now=later) == 0
        assert len(services.queue.list_clients(business_id)) == 2

        monkeypatch.undo()
        assert services.queue.cleanup_expired_clients(now=later) == 2
        assert services.queue.list_clients(business_id) == []
        assert_contiguous(session_factory, business_id)

    def test_cleanup_removes_stale_clients_in_any_status(self, services, session_factory, business_id):
        for session_id in "ab":
            services.queue.join_queue(business_id, session_id)

        session = session_factory()
        with session.begin():
            stale = session.get(QueueClient, (business_id, "a"))
            stale.status = QueueClientStatus.EXPIRED
            stale.last_activity = datetime.now(timezone.utc) - timedelta(minutes=30)
        session.close()

        assert services.queue.cleanup_expired_clients() == 1
        _, clients = queue_state(session_factory, business_id)
        assert [(c.session_id, c.position, c.status) for c in clients] == [("b", 1, QueueClientStatus.ACTIVE)]

    def test_cleanup_skips_client_with_fresh_heartbeat(self, services, session_factory, business_id):
        services.queue.join_queue(business_id, "a")
        threshold = datetime.now(timezone.utc) - timedelta(minutes=10)

        assert services.queue._expire_client(business_id, "a", threshold) is False
        assert [c.session_id for c in services.queue.list_clients(business_id)] == ["a"]
