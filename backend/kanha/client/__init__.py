from kanha.client.api import ApiClientError, KanhaClient, ServerUnavailable, build_cart, make_cart_line
from kanha.client.cache import LocalStore, TimedCache
from kanha.client.fallback import FallbackInvoiceNumberGenerator

__all__ = [
    "ApiClientError",
    "KanhaClient",
    "ServerUnavailable",
    "build_cart",
    "make_cart_line",
    "LocalStore",
    "TimedCache",
    "FallbackInvoiceNumberGenerator",
]
