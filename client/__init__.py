from client.session import ChatSession, Message
from client.transport import RelayClient

__all__ = ["ChatSession", "Message", "RelayClient"]
