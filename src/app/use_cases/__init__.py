"""Use cases: pipeline inbound e gateway de envio outbound."""

from .delivery_tasks import DeliveryTaskSet
from .forward_inbound import ForwardInboundUseCase, ForwardResult
from .send_message import SendMessageUseCase, resolve_destination

__all__ = [
    "DeliveryTaskSet",
    "ForwardInboundUseCase",
    "ForwardResult",
    "SendMessageUseCase",
    "resolve_destination",
]
