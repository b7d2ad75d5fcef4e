from ocppj.transport.base import ClientTransport, ServerTransport, Transport
from ocppj.transport.websocket import ClientTimeoutConfig, WebSocketClient, WebSocketServer

__all__ = [
    "ClientTimeoutConfig",
    "ClientTransport",
    "ServerTransport",
    "Transport",
    "WebSocketClient",
    "WebSocketServer",
]
