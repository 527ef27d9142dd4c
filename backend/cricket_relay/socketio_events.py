from typing import Iterable

from flask import current_app, request

from cricket_relay import socketio
from cricket_relay.messages import MalformedEnvelope, parse_envelope
from cricket_relay.services.pairing import Delivery, GracePeriod, PairingService


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _service() -> PairingService:
    return current_app.extensions['pairing']


def _deliver(deliveries: Iterable[Delivery], namespace: str) -> None:
    """Send outside the pairing lock; sends to closed sockets are no-ops."""
    for delivery in deliveries:
        socketio.send(delivery.wire(), to=delivery.connection, namespace=namespace)


def handle_connect(auth=None):
    _, deliveries = _service().connect(_get_sid())
    _deliver(deliveries, request.namespace)


def handle_disconnect(reason=None):
    sid = _get_sid()
    service = _service()
    grace, deliveries = service.disconnect(sid)
    _deliver(deliveries, request.namespace)
    if grace is not None:
        _schedule_grace_expiry(service, grace, request.namespace)


def handle_message(data):
    sid = _get_sid()
    try:
        envelope = parse_envelope(data)
    except MalformedEnvelope as exc:
        current_app.logger.warning(f"[malformed] conn={sid} error={exc}")
        return
    router = current_app.extensions['pairing_router']
    _deliver(router.dispatch(sid, envelope), request.namespace)


# ---- Grace period timers ----

def _schedule_grace_expiry(service: PairingService, grace: GracePeriod, namespace: str) -> None:
    """Run ``service.expire`` once the grace deadline has passed.

    There is no cancellation; ``expire`` ignores grace periods that were
    resolved by a reconnect in the meantime.
    """

    def _runner(g: GracePeriod):
        sleep_for = g.remaining(service.grace.now())
        if sleep_for:
            socketio.sleep(sleep_for)
        _deliver(service.expire(g), namespace)

    socketio.start_background_task(_runner, grace)


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Register Socket.IO event handlers on the relay namespace.

    Clients talk over plain ``message`` events; ``json`` events are accepted
    too so either form of ``send`` works.
    """
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('message', handle_message, namespace=namespace)
    socketio.on_event('json', handle_message, namespace=namespace)
