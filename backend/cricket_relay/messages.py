"""Wire envelopes exchanged with game clients.

Every message is a JSON object with a ``type`` discriminator. Only the two
client requests the server acts on (``join`` and ``reconnect``) are decoded
beyond their type; every other type is carried as an opaque passthrough and
forwarded in exactly the form it was received.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

# Client -> server requests
JOIN = 'join'
RECONNECT = 'reconnect'

# Server -> client notices
CLIENT_ID = 'client-id'
PEER_ASSIGNMENT = 'peer-assignment'
RECONNECT_SUCCESS = 'reconnect-success'
PARTNER_DISCONNECTED = 'partner-disconnected'
PARTNER_RECONNECTED = 'partner-reconnected'

# Relayed verbatim between partners
NEGOTIATION_TYPES = frozenset({'offer', 'answer', 'ice-candidate'})
GAME_TYPES = frozenset({'toss', 'role', 'number'})

CONTROL_TYPES = frozenset({JOIN, RECONNECT})
SERVER_TYPES = frozenset({
    CLIENT_ID,
    PEER_ASSIGNMENT,
    RECONNECT_SUCCESS,
    PARTNER_DISCONNECTED,
    PARTNER_RECONNECTED,
})


class MalformedEnvelope(ValueError):
    """Raised when an incoming payload is not a usable envelope."""


@dataclass(frozen=True)
class Envelope:
    type: str
    raw: Any = field(repr=False, compare=False)
    previous_id: Optional[str] = None
    client_id: Optional[str] = None

    @property
    def is_control(self) -> bool:
        return self.type in CONTROL_TYPES

    @property
    def is_server_only(self) -> bool:
        return self.type in SERVER_TYPES

    @property
    def is_passthrough(self) -> bool:
        return not self.is_control and not self.is_server_only

    @property
    def kind(self) -> str:
        if self.is_control:
            return 'control'
        if self.is_server_only:
            return 'server'
        if self.type in NEGOTIATION_TYPES:
            return 'negotiation'
        if self.type in GAME_TYPES:
            return 'game'
        return 'opaque'


def parse_envelope(raw: Any) -> Envelope:
    """Decode just enough of ``raw`` to dispatch it.

    ``raw`` may be JSON text, UTF-8 bytes or an already decoded object. The
    original value is kept on the envelope so passthrough messages can be
    forwarded unchanged.
    """
    body = raw
    if isinstance(body, (bytes, bytearray)):
        try:
            body = body.decode('utf-8')
        except UnicodeDecodeError as exc:
            raise MalformedEnvelope('payload is not utf-8') from exc
    if isinstance(body, str):
        try:
            body = json.loads(body)
        except ValueError as exc:
            raise MalformedEnvelope('payload is not valid JSON') from exc
    if not isinstance(body, dict):
        raise MalformedEnvelope('payload is not a JSON object')

    kind = body.get('type')
    if not isinstance(kind, str) or not kind:
        raise MalformedEnvelope('missing message type')

    if kind == JOIN:
        previous_id = body.get('previousId')
        if previous_id is not None and not isinstance(previous_id, str):
            raise MalformedEnvelope('previousId must be a string')
        # Clients send null or "" when they have no stored id
        return Envelope(type=kind, raw=raw, previous_id=previous_id or None)

    if kind == RECONNECT:
        client_id = body.get('clientId')
        if not isinstance(client_id, str) or not client_id:
            raise MalformedEnvelope('reconnect requires clientId')
        return Envelope(type=kind, raw=raw, client_id=client_id)

    return Envelope(type=kind, raw=raw)


def encode(message: Dict[str, Any]) -> str:
    return json.dumps(message, separators=(',', ':'))


def client_id_message(client_id: str) -> Dict[str, Any]:
    return {'type': CLIENT_ID, 'clientId': client_id}


def peer_assignment(is_initiator: bool, partner_id: Optional[str]) -> Dict[str, Any]:
    return {'type': PEER_ASSIGNMENT, 'isInitiator': is_initiator, 'partnerId': partner_id}


def reconnect_success(is_initiator: bool, partner_id: Optional[str]) -> Dict[str, Any]:
    return {'type': RECONNECT_SUCCESS, 'isInitiator': is_initiator, 'partnerId': partner_id}


def partner_disconnected(temporary: bool, partner_id: Optional[str] = None) -> Dict[str, Any]:
    message: Dict[str, Any] = {'type': PARTNER_DISCONNECTED, 'temporary': temporary}
    if partner_id is not None:
        message['partnerId'] = partner_id
    return message


def partner_reconnected(partner_id: str) -> Dict[str, Any]:
    return {'type': PARTNER_RECONNECTED, 'partnerId': partner_id}
