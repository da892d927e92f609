"""Notification gateway status."""
from fastapi import APIRouter, Depends

from slotbook.deps import get_gateway
from slotbook.services.notifications import ChannelGateway

router = APIRouter()


@router.get("/notifications/health")
def notification_health(gateway: ChannelGateway = Depends(get_gateway)) -> dict[str, str]:
    return gateway.health()
