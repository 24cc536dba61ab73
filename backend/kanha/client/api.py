"""HTTP client for the billing API with local caching and offline invoice numbering."""
import logging
import time
from typing import Any, Callable, Dict, List, Optional

import requests

from kanha.client.cache import LocalStore, TimedCache
from kanha.client.fallback import FallbackInvoiceNumberGenerator
from kanha.core.config import settings
from kanha.services.pricing import apply_addon, line_total, summarize_cart

logger = logging.getLogger(__name__)


class ApiClientError(Exception):
    """A failed call, carrying the server's message when there was one."""

    def __init__(self, message: str, status: int = 0, validation_errors: Optional[List[str]] = None, data: Any = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.validation_errors = validation_errors or []
        self.data = data


class ServerUnavailable(ApiClientError):
    pass


def make_cart_line(
    item: Dict[str, Any],
    quantity: int,
    addon_percent=None,
    selling_price=None,
    hsn_code: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Price one invoice line from an item record.

    The base price is the given selling price, else the item's selling
    price, else its MRP; the add-on percentage is applied on top.
    """
    if quantity <= 0:
        raise ApiClientError("Quantity must be a positive number", status=400)
    if quantity > item.get("quantity", 0):
        raise ApiClientError(f"Only {item.get('quantity', 0)} units available in stock", status=400)

    base = selling_price
    if base is None:
        base = item.get("selling_price")
    if base is None:
        base = item["mrp"]
    price = apply_addon(base, addon_percent)
    line = {
        "item_id": item["id"],
        "selected_quantity": quantity,
        "selling_price": float(price),
        "total": float(line_total(price, quantity)),
    }
    if addon_percent:
        line["addon_percent"] = float(addon_percent)
    if hsn_code or item.get("hsn_no"):
        line["hsn_code"] = hsn_code or item.get("hsn_no")
    return line


def build_cart(lines: List[Dict[str, Any]], invoice: Dict[str, Any]) -> Dict[str, Any]:
    """Cart payload with totals derived from the lines and the invoice percentages."""
    summary = summarize_cart(
        (line["total"] for line in lines),
        adjustment_percent=invoice.get("adjustment_percent"),
        cgst=invoice.get("cgst"),
        sgst=invoice.get("sgst"),
        igst=invoice.get("igst"),
    )
    return {
        "items": lines,
        "cart_total": float(summary.cart_total),
        "net_amount": float(summary.net_amount),
        "net_payable_amount": float(summary.net_payable_amount),
    }


class KanhaClient:
    """
    Thin wrapper over the REST API.

    Item and invoice listings are cached for ``cache_ttl`` seconds; pass
    ``refresh=True`` to bypass the cache. Writes invalidate the listings
    they affect.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        session=None,
        store: Optional[LocalStore] = None,
        cache_ttl: Optional[float] = None,
        clock: Callable[[], float] = time.time,
        timeout: float = 30,
    ):
        self.base_url = (base_url if base_url is not None else settings.API_URL).rstrip("/")
        self.session = session or requests.Session()
        self.store = store or LocalStore(settings.CACHE_PATH)
        self.cache = TimedCache(
            self.store,
            ttl=cache_ttl if cache_ttl is not None else settings.CACHE_TTL_SECONDS,
            clock=clock,
        )
        self.invoice_numbers = FallbackInvoiceNumberGenerator(
            self.store,
            prefix=settings.INVOICE_PREFIX,
            fiscal_year=settings.INVOICE_FISCAL_YEAR,
        )
        self.timeout = timeout
        self.token: Optional[str] = None
        self.user: Optional[Dict[str, Any]] = None

    # ------------------------------------------------------------------
    # plumbing
    # ------------------------------------------------------------------

    @property
    def user_id(self) -> int:
        if not self.user:
            raise ApiClientError("Not logged in", status=401)
        return self.user["id"]

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(self, method: str, path: str, raw: bool = False, **kwargs):
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(
                method, url, headers=self._headers(), timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            logger.error(f"{method} {url} failed: {e}")
            raise ServerUnavailable("No response received from server. Please check your connection") from e

        if response.status_code >= 400:
            try:
                payload = response.json()
            except ValueError:
                payload = {}
            message = payload.get("error") or payload.get("message") or "An error occurred while processing your request"
            raise ApiClientError(
                message,
                status=response.status_code,
                validation_errors=payload.get("validationErrors"),
                data=payload,
            )
        if raw:
            return response.content
        return response.json()

    def _invalidate_items(self) -> None:
        self.cache.invalidate_prefix("items:")

    def _invalidate_invoices(self) -> None:
        self.cache.invalidate_prefix("invoices:")

    # ------------------------------------------------------------------
    # users
    # ------------------------------------------------------------------

    def login(self, email: str, password: str) -> Dict[str, Any]:
        data = self._request("POST", "/users/login", json={"email": email, "password": password})
        self.token = data["access_token"]
        self.user = data["user"]
        self.store.set("user", self.user)
        return self.user

    def logout(self) -> None:
        self.token = None
        self.user = None
        self.store.remove("user")

    # ------------------------------------------------------------------
    # items
    # ------------------------------------------------------------------

    def get_user_items(self, page: int = 1, page_size: Optional[int] = None, refresh: bool = False) -> Dict[str, Any]:
        key = f"items:{self.user_id}:{page}:{page_size or ''}"
        if not refresh:
            cached = self.cache.get(key)
            if cached is not None:
                return cached
        params = {"page": page}
        if page_size:
            params["page_size"] = page_size
        data = self._request("GET", f"/items/user/{self.user_id}", params=params)
        self.cache.set(key, data)
        return data

    def get_item_by_cat_no(self, cat_no: str) -> Optional[Dict[str, Any]]:
        """Item record, or None when the catalog number is unknown (a new item)."""
        try:
            return self._request("GET", f"/items/cat-no/{cat_no}")
        except ApiClientError as e:
            if e.status == 404:
                return None
            raise

    def search_items(self, search_type: str, search_term: str) -> Dict[str, Any]:
        if search_type not in ("cat_no", "product_name"):
            raise ApiClientError("Search type must be cat_no or product_name", status=400)
        if not search_term or not search_term.strip():
            raise ApiClientError("Search term cannot be empty", status=400)
        return self._request(
            "GET",
            "/items/search",
            params={"userId": self.user_id, "searchType": search_type, "searchTerm": search_term.strip()},
        )

    def add_item(self, item: Dict[str, Any]) -> Dict[str, Any]:
        created = self._request("POST", "/items", json=item)
        self._invalidate_items()
        return created

    def update_item(self, item_id: int, changes: Dict[str, Any]) -> Dict[str, Any]:
        try:
            updated = self._request("PUT", f"/items/{item_id}", json=changes)
        except ApiClientError as e:
            if "catalog number" in e.message or any("cat_no" in v for v in e.validation_errors):
                e.message = "A product with this catalog number already exists."
            raise
        self._invalidate_items()
        return updated

    def delete_item(self, item_id: int) -> Dict[str, Any]:
        result = self._request("DELETE", f"/items/{item_id}")
        self._invalidate_items()
        return result

    def add_stock(self, item: Dict[str, Any], confirm_update: Callable[[Dict[str, Any]], bool]) -> Dict[str, Any]:
        """
        Stock entry. When the catalog number already exists, ask
        ``confirm_update`` whether to overwrite the existing item instead.
        """
        try:
            return self.add_item(item)
        except ApiClientError as e:
            if e.status != 409:
                raise
            existing = self.get_item_by_cat_no(item["cat_no"])
            if existing is None or not confirm_update(existing):
                raise
        changes = {k: v for k, v in item.items() if k != "user_id"}
        return self.update_item(existing["id"], changes)

    # ------------------------------------------------------------------
    # invoices
    # ------------------------------------------------------------------

    def next_invoice_number(self) -> str:
        """Server's next number, or a locally generated one when it is unreachable."""
        try:
            data = self._request("GET", "/invoices/next-invoice-number")
        except ServerUnavailable:
            return self.invoice_numbers.next()
        self.invoice_numbers.remember(data["invoice_no"])
        return data["invoice_no"]

    def create_invoice(self, invoice: Dict[str, Any], cart: Dict[str, Any]) -> Dict[str, Any]:
        payload = {"invoice": dict(invoice, user_id=self.user_id), "cart": cart}
        result = self._request("POST", "/invoices", json=payload)
        self.invoice_numbers.remember(result["invoice_no"])
        # Stock quantities changed along with the invoice list
        self._invalidate_items()
        self._invalidate_invoices()
        return result

    def get_invoice(self, invoice_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/invoices/{invoice_id}")

    def get_invoice_pdf(self, invoice_id: int) -> bytes:
        return self._request("GET", f"/invoices/{invoice_id}/pdf", raw=True)

    def list_invoices(self, refresh: bool = False) -> List[Dict[str, Any]]:
        key = f"invoices:{self.user_id}"
        if not refresh:
            cached = self.cache.get(key)
            if cached is not None:
                return cached
        data = self._request("GET", f"/invoices/user/{self.user_id}")
        self.cache.set(key, data)
        return data

    def delete_invoice(self, invoice_id: int) -> Dict[str, Any]:
        result = self._request("DELETE", f"/invoices/{invoice_id}")
        self._invalidate_invoices()
        return result
