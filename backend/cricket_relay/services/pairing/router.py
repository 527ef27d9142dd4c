import logging
from typing import Hashable, List

from cricket_relay.messages import JOIN, RECONNECT, Envelope
from .service import Delivery, PairingService

logger = logging.getLogger(__name__)


class MessageRouter:
    """Dispatches parsed envelopes by kind.

    ``join`` and ``reconnect`` drive the pairing service; server-only notice
    types coming from a client are dropped; everything else is passed to the
    sender's partner untouched.
    """

    def __init__(self, service: PairingService):
        self.service = service

    def dispatch(self, sender: Hashable, envelope: Envelope) -> List[Delivery]:
        if envelope.type == JOIN:
            return self.service.join(sender, envelope.previous_id)
        if envelope.type == RECONNECT:
            return self.service.reconnect(sender, envelope.client_id)
        if envelope.is_server_only:
            logger.warning(f"[drop] conn={sender} type={envelope.type} reason=server-only")
            return []
        logger.debug(f"[relay] conn={sender} type={envelope.type} kind={envelope.kind}")
        return self.route(sender, envelope.raw)

    def route(self, sender: Hashable, payload) -> List[Delivery]:
        return self.service.relay(sender, payload)
