"""
Service interfaces for dependency inversion.
Allows swapping implementations without changing business logic.
"""

from .payment_gateway import GatewayOrder, PaymentGateway
from .offline_gateway import OfflineGateway
from .notifier import TicketNotice, TicketNotifier

__all__ = ['GatewayOrder', 'PaymentGateway', 'OfflineGateway', 'TicketNotice', 'TicketNotifier']
