import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, Hashable, List, Optional, Tuple

from cricket_relay import messages
from .grace import GracePeriod, GracePeriodManager
from .pool import WaitingPool
from .registry import IdentityRegistry
from .table import PairingTable

logger = logging.getLogger(__name__)


@dataclass
class Delivery:
    """One message to send to one connection once the state lock is released."""

    connection: Hashable
    message: Optional[Dict[str, Any]] = None
    raw: Any = None

    @property
    def relayed(self) -> bool:
        return self.message is None

    def wire(self) -> Any:
        if self.relayed:
            return self.raw
        return messages.encode(self.message)


class PairingService:
    """Owns all pairing state behind a single lock.

    Public methods are atomic with respect to each other, including the grace
    timer callback ``expire``. None of them perform I/O; they return the
    deliveries the caller has to send afterwards.
    """

    def __init__(self, grace_period_sec: float = 10.0, clock=None):
        self.registry = IdentityRegistry()
        self.pool = WaitingPool()
        self.table = PairingTable()
        self.grace = GracePeriodManager(grace_period_sec, clock=clock or time.time)
        self._lock = threading.Lock()

    # ---- connection lifecycle ----

    def connect(self, connection: Hashable) -> Tuple[str, List[Delivery]]:
        with self._lock:
            identifier = self.registry.issue()
            self.registry.bind(connection, identifier)
        logger.info(f"[connect] conn={connection} id={identifier}")
        return identifier, [Delivery(connection, messages.client_id_message(identifier))]

    def join(self, connection: Hashable, previous_id: Optional[str] = None) -> List[Delivery]:
        if previous_id:
            return self.reconnect(connection, previous_id)
        with self._lock:
            return self._admit(connection, leave_current=True)

    def reconnect(self, connection: Hashable, client_id: str) -> List[Delivery]:
        with self._lock:
            return self._reconnect(connection, client_id)

    def disconnect(self, connection: Hashable) -> Tuple[Optional[GracePeriod], List[Delivery]]:
        """Handle a closed socket.

        Returns the grace period the caller must schedule, if the connection
        was paired.
        """
        with self._lock:
            self.pool.remove(connection)
            identifier = self.registry.identifier_of(connection)
            partner = self.table.partner_of(connection)
            if partner is None or identifier is None:
                self.registry.release(connection)
                logger.info(f"[disconnect] conn={connection} id={identifier} unpaired")
                return None, []
            grace = self.grace.start(identifier, connection, partner)
        logger.info(
            f"[grace-start] id={identifier} conn={connection} partner={partner} deadline={grace.deadline:.3f}"
        )
        return grace, [Delivery(partner, messages.partner_disconnected(True, identifier))]

    def expire(self, grace: GracePeriod) -> List[Delivery]:
        """Grace timer callback. Has an effect at most once per grace period."""
        with self._lock:
            if not self.grace.claim(grace):
                logger.info(f"[grace-skip] id={grace.identifier} superseded")
                return []
            if self.registry.lookup(grace.identifier) != grace.connection:
                logger.info(f"[grace-skip] id={grace.identifier} reconnected")
                return []
            self.registry.release(grace.connection)
            partner = self.table.partner_of(grace.connection)
            if partner is None:
                logger.info(f"[grace-expire] id={grace.identifier} pairing already gone")
                return []
            self.table.unpair(grace.connection)
            logger.info(f"[grace-expire] id={grace.identifier} partner={partner} unpaired")
            deliveries = [Delivery(partner, messages.partner_disconnected(False, grace.identifier))]
            partner_id = self.registry.identifier_of(partner)
            if self.grace.is_pending(partner_id) and self.grace.get(partner_id).connection == partner:
                # Partner's socket is closed too; its own timer releases it.
                return deliveries
            deliveries.extend(self._admit(partner))
            return deliveries

    # ---- relay ----

    def partner_of(self, connection: Hashable) -> Optional[Hashable]:
        with self._lock:
            return self.table.partner_of(connection)

    def relay(self, sender: Hashable, raw: Any) -> List[Delivery]:
        partner = self.partner_of(sender)
        if partner is None:
            logger.debug(f"[drop] conn={sender} reason=unpaired")
            return []
        return [Delivery(partner, raw=raw)]

    def snapshot(self) -> Dict[str, int]:
        with self._lock:
            return {
                'connections': len(self.registry),
                'waiting': len(self.pool),
                'pairs': self.table.pair_count(),
                'grace_periods': len(self.grace),
            }

    # ---- internals, called with the lock held ----

    def _admit(self, connection: Hashable, leave_current: bool = False) -> List[Delivery]:
        deliveries: List[Delivery] = []
        if connection in self.pool:
            logger.info(f"[join-skip] conn={connection} already waiting")
            return deliveries
        if connection in self.table:
            if not leave_current:
                logger.warning(f"[join-skip] conn={connection} already paired")
                return deliveries
            deliveries.extend(self._leave(connection))

        waiter = self.pool.dequeue()
        if waiter is None:
            self.pool.enqueue(connection)
            logger.info(f"[waiting] conn={connection} pool={len(self.pool)}")
            return deliveries
        if not self.table.pair(connection, waiter):
            self.pool.enqueue(connection)
            return deliveries

        conn_id = self.registry.identifier_of(connection)
        waiter_id = self.registry.identifier_of(waiter)
        logger.info(f"[pair] initiator={conn_id} responder={waiter_id}")
        deliveries.append(Delivery(connection, messages.peer_assignment(True, waiter_id)))
        deliveries.append(Delivery(waiter, messages.peer_assignment(False, conn_id)))
        return deliveries

    def _leave(self, connection: Hashable) -> List[Delivery]:
        """End a live pairing at the request of ``connection`` and re-admit the partner."""
        partner = self.table.unpair(connection)
        if partner is None:
            return []
        identifier = self.registry.identifier_of(connection)
        logger.info(f"[leave] id={identifier} partner={partner}")
        deliveries = [Delivery(partner, messages.partner_disconnected(False, identifier))]
        partner_id = self.registry.identifier_of(partner)
        if not self.grace.is_pending(partner_id):
            deliveries.extend(self._admit(partner))
        return deliveries

    def _reconnect(self, connection: Hashable, client_id: str) -> List[Delivery]:
        logger.info(f"[reconnect] conn={connection} id={client_id}")
        holder = self.registry.lookup(client_id)

        if holder == connection:
            # Same socket asking again: the client wants a fresh partner.
            return self._admit(connection, leave_current=True)
        if connection in self.table:
            logger.warning(f"[reconnect-reject] conn={connection} already paired")
            return []

        pending = self.grace.get(client_id)
        holder_closed = pending is not None and pending.connection == holder
        partner = self.table.partner_of(holder) if holder is not None else None

        if partner is not None:
            self.pool.remove(connection)
            self.table.replace(holder, connection)
            self.grace.resolve(client_id)
            partner_id = self.registry.identifier_of(partner)
            deliveries = [
                Delivery(partner, messages.partner_reconnected(client_id)),
                Delivery(connection, messages.reconnect_success(True, partner_id)),
            ]
            if holder_closed:
                self.registry.release(holder)
            else:
                # Holder is still open (another tab, or its close not seen yet):
                # it loses the pairing and gets an identifier of its own.
                evicted_id = self.registry.issue()
                self.registry.bind(holder, evicted_id)
                logger.warning(f"[reconnect-evict] id={client_id} conn={holder} new_id={evicted_id}")
                deliveries.append(Delivery(holder, messages.client_id_message(evicted_id)))
                deliveries.append(Delivery(holder, messages.partner_disconnected(False, partner_id)))
            self.registry.bind(connection, client_id)
            logger.info(f"[reconnect-success] id={client_id} partner={partner_id}")
            return deliveries

        deliveries: List[Delivery] = []
        if holder is None or holder_closed:
            if holder_closed:
                self.grace.resolve(client_id)
                self.registry.release(holder)
                # The pairing ended while this client was away
                deliveries.append(Delivery(connection, messages.partner_disconnected(False)))
            self.registry.bind(connection, client_id)
        else:
            logger.warning(f"[reconnect-reject] id={client_id} held by live conn={holder}")
        logger.info(f"[reconnect-miss] id={client_id} treated as fresh join")
        deliveries.extend(self._admit(connection))
        return deliveries
