# ============================================================================
# app/services/queue/queue_service.py
# ============================================================================
"""
FIFO admission queue in front of the booking form.

Each business has one queue. A client joins with its browser session id and
gets a position; only position 1 may book. Positions of present clients are
always exactly 1..current_count: removal deletes the record and shifts every
later client down by one inside the same transaction.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config.settings import get_settings
from app.core.exceptions import NotFoundError, QueueFullError, TransientError
from app.models.business import Business
from app.models.queue import BookingQueue, QueueClient, QueueClientStatus
from app.utils.transactions import TransactionRunner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JoinResult:
    position: int
    session_id: str


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QueueService:
    """Per-business booking admission queue"""

    def __init__(self, runner: TransactionRunner, max_size: Optional[int] = None):
        self.runner = runner
        self.max_size = max_size or get_settings().QUEUE_MAX_SIZE

    def join_queue(self, business_id: str, session_id: str, client_ip: Optional[str] = None) -> JoinResult:
        """
        Put a session at the back of the queue.

        A session already in the queue keeps its record and position, so a
        retried or duplicated join never creates a second entry. An expired
        record is dropped and the session joins again at the back.
        """

        def work(session: Session) -> JoinResult:
            queue = self._lock_queue(session, business_id)

            existing = session.get(QueueClient, (business_id, session_id))
            if existing is not None and existing.status != QueueClientStatus.EXPIRED:
                existing.last_activity = _utcnow()
                return JoinResult(position=existing.position, session_id=session_id)
            if existing is not None:
                self._delete_and_shift(session, queue, existing)

            if queue.current_count >= self.max_size:
                raise QueueFullError()

            now = _utcnow()
            position = queue.current_count + 1
            ticket = queue.last_position + 1

            session.add(QueueClient(
                business_id=business_id,
                session_id=session_id,
                position=position,
                ticket=ticket,
                status=QueueClientStatus.ACTIVE if position == 1 else QueueClientStatus.WAITING,
                client_ip=client_ip,
                joined_at=now,
                last_activity=now,
            ))
            queue.current_count = position
            queue.last_position = ticket
            queue.updated_at = now
            session.flush()

            return JoinResult(position=position, session_id=session_id)

        result = self.runner.run(work, retry_on=(IntegrityError,))
        logger.info(f"Session {session_id} at position {result.position} in queue {business_id}")
        return result

    def update_activity(self, business_id: str, session_id: str) -> None:
        """Heartbeat: refresh last_activity, never touches the position."""

        def work(session: Session) -> None:
            client = session.get(QueueClient, (business_id, session_id))
            if client is None:
                raise NotFoundError("You are no longer in the queue, please join again")
            client.last_activity = _utcnow()

        self.runner.run(work)

    def remove_from_queue(self, business_id: str, session_id: str) -> bool:
        """
        Remove a session and close the gap it leaves.

        Returns False when the session was not in the queue.
        """

        def work(session: Session) -> bool:
            queue = self._lock_queue(session, business_id, create=False)
            client = session.get(QueueClient, (business_id, session_id))
            if client is None:
                return False
            self._delete_and_shift(session, queue, client)
            return True

        removed = self.runner.run(work)
        if removed:
            logger.info(f"Session {session_id} left queue {business_id}")
        return removed

    def get_position(self, business_id: str, session_id: str) -> QueueClient:
        """Current record of a session, for clients polling their turn."""
        session = self.runner.session_factory()
        try:
            client = session.get(QueueClient, (business_id, session_id))
            if client is None:
                raise NotFoundError("You are not in the queue")
            return client
        finally:
            session.close()

    def list_clients(self, business_id: str) -> List[QueueClient]:
        session = self.runner.session_factory()
        try:
            return session.query(QueueClient).filter(
                QueueClient.business_id == business_id
            ).order_by(QueueClient.position.asc()).all()
        finally:
            session.close()

    def cleanup_expired_clients(self, now: Optional[datetime] = None) -> int:
        """
        Remove sessions whose heartbeat stopped.

        Selection goes by last_activity alone, whatever the status, and each
        client is removed in its own transaction. A client left behind by a
        failed run is picked up by the next one.
        """
        now = now or _utcnow()
        threshold = now - timedelta(minutes=get_settings().QUEUE_TIMEOUT_MINUTES)

        session = self.runner.session_factory()
        try:
            stale = session.query(QueueClient.business_id, QueueClient.session_id).filter(
                QueueClient.last_activity < threshold
            ).all()
        finally:
            session.close()

        removed = 0
        for business_id, session_id in stale:
            try:
                if self._expire_client(business_id, session_id, threshold):
                    removed += 1
            except TransientError as e:
                logger.warning(f"Could not expire session {session_id} in queue {business_id}: {e.message}")

        if removed:
            logger.info(f"Removed {removed} expired queue clients")
        return removed

    def _expire_client(self, business_id: str, session_id: str, threshold: datetime) -> bool:
        def work(session: Session) -> bool:
            queue = self._lock_queue(session, business_id, create=False)
            # re-read under the lock; a heartbeat may have arrived since selection
            client = session.query(QueueClient).filter(
                QueueClient.business_id == business_id,
                QueueClient.session_id == session_id,
                QueueClient.last_activity < threshold
            ).first()
            if client is None:
                return False
            self._delete_and_shift(session, queue, client)
            return True

        return self.runner.run(work)

    @staticmethod
    def _delete_and_shift(session: Session, queue: Optional[BookingQueue], client: QueueClient) -> None:
        """Delete a client, move everyone behind it up one place and activate the new front."""
        business_id = client.business_id
        removed_position = client.position
        session.delete(client)
        session.flush()

        session.query(QueueClient).filter(
            QueueClient.business_id == business_id,
            QueueClient.position > removed_position
        ).update(
            {QueueClient.position: QueueClient.position - 1},
            synchronize_session=False
        )
        session.query(QueueClient).filter(
            QueueClient.business_id == business_id,
            QueueClient.position == 1,
            QueueClient.status == QueueClientStatus.WAITING
        ).update(
            {QueueClient.status: QueueClientStatus.ACTIVE},
            synchronize_session=False
        )

        if queue is not None:
            queue.current_count = max((queue.current_count or 0) - 1, 0)
            queue.updated_at = _utcnow()
        session.flush()

    @staticmethod
    def _lock_queue(session: Session, business_id: str, create: bool = True) -> Optional[BookingQueue]:
        """Queue row locked for the rest of the transaction; created on first join."""
        queue = session.query(BookingQueue).filter(
            BookingQueue.business_id == business_id
        ).with_for_update().first()

        if queue is None and create:
            if session.get(Business, business_id) is None:
                raise NotFoundError("Business not found")
            queue = BookingQueue(business_id=business_id, current_count=0, last_position=0)
            session.add(queue)
            session.flush()

        return queue
