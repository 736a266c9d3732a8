# chat_gateway/api/routes/metrics.py
from fastapi import APIRouter, Depends

from chat_gateway.core.state import get_gateway
from chat_gateway.services.gateway import ChatGateway

router = APIRouter()

@router.get("/metrics")
async def get_metrics(gateway: ChatGateway = Depends(get_gateway)):
    """
    Gateway counters since process start.

    Example Response:
        {
            "uptime_seconds": 3600.5,
            "events_handled": 1200,
            "messages_sent": 950,
            "errors_reported": 3,
            "handler_faults": 0,
            "frames_dropped": 0,
            "concurrent_connections": 12,
            "registered_users": 11,
            "stored_messages": 100,
            "active_rooms": {"general": 11, "design": 3}
        }

    ``frames_dropped`` above zero means some clients read slower than the
    chat produces; their oldest pending frames were discarded.
    """
    return gateway.get_metrics()
