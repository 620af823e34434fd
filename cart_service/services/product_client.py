# cart_service/services/product_client.py
import asyncio
from decimal import Decimal

import requests

from cart_service.domain.entities import Product
from cart_service.domain.errors import InsufficientStockError, ProductNotFoundError
from cart_service.utils.retry import http_retry
from cart_service.utils.settings import PRODUCT_SERVICE_URL
from cart_service.utils.logging import get_logger

logger = get_logger(__name__)


class ProductClient:
    """
    Odczyt produktow i zmiana stanu magazynu w product-service po HTTP.

    requests jest blokujace, wiec wywolania ida przez asyncio.to_thread.
    """

    def __init__(self, base_url: str | None = None, timeout: int = 2, session: requests.Session | None = None):
        self.base_url = (base_url or PRODUCT_SERVICE_URL).rstrip("/")
        self.timeout = timeout
        self.http = session or requests.Session()

    async def find_by_id(self, product_id: str) -> Product | None:
        data = await asyncio.to_thread(self.fetch_product, product_id)
        if data is None:
            return None
        return Product(
            id=str(data["id"]),
            name=data["name"],
            price=Decimal(str(data["price"])),
            stock=int(data.get("stock", 0)),
            category=data.get("category", ""),
        )

    async def update_stock(self, product_id: str, delta: int) -> None:
        await asyncio.to_thread(self.patch_stock, product_id, delta)

    @http_retry()
    def fetch_product(self, product_id: str) -> dict | None:
        url = f"{self.base_url}/products/{product_id}"
        logger.info(f"ProductClient GET {url}")

        resp = self.http.get(url, timeout=self.timeout)
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        return resp.json()

    # bez retry: POST z delta nie jest idempotentny, powtorka po timeoucie
    # moglaby zdjac stan drugi raz
    def patch_stock(self, product_id: str, delta: int) -> dict:
        url = f"{self.base_url}/products/{product_id}/stock"
        logger.info(f"ProductClient POST {url} delta={delta}")

        resp = self.http.post(url, json={"delta": delta}, timeout=self.timeout)
        if resp.status_code == 404:
            raise ProductNotFoundError(product_id)
        if resp.status_code == 409:
            detail = resp.json().get("detail", {})
            available = detail.get("available", 0) if isinstance(detail, dict) else 0
            raise InsufficientStockError(product_id, available, -delta)
        resp.raise_for_status()
        return resp.json()
