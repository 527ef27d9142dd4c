"""Pairing services: identity, waiting pool, pairing table and grace periods.

Everything in this package is transport-agnostic. Connections are opaque
hashable handles (the Socket.IO session id in production) and every
state-changing call on ``PairingService`` returns the deliveries the
transport layer must send once the state lock has been released.
"""

from .grace import GracePeriod, GracePeriodManager
from .pool import WaitingPool
from .registry import IdentityRegistry
from .router import MessageRouter
from .service import Delivery, PairingService
from .table import PairingTable

__all__ = [
    'Delivery',
    'GracePeriod',
    'GracePeriodManager',
    'IdentityRegistry',
    'MessageRouter',
    'PairingService',
    'PairingTable',
    'WaitingPool',
]
