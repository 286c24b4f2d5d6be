from reqline.transport.httpx_transport import AsyncHttpxTransport, HttpxTransport
from reqline.transport.protocol import AsyncTransport, Transport

__all__ = [
    "AsyncHttpxTransport",
    "AsyncTransport",
    "HttpxTransport",
    "Transport",
]
