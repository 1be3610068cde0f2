"""Push gateway implementations."""

from src.infrastructure.push.expo_gateway import ExpoPushGateway, get_push_gateway

__all__ = ["ExpoPushGateway", "get_push_gateway"]
