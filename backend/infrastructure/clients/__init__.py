from infrastructure.clients.rewatch_http_client import RewatchHttpClient

__all__ = ["RewatchHttpClient"]
