"""
Client HTTP des écrans Streamlit vers l'API /v1.

Toute réponse non 2xx devient une ApiError portant le "detail" renvoyé
par l'API, pour affichage direct dans st.error.
"""

from __future__ import annotations

import logging

import requests

from backend.app.core.config import API_TIMEOUT, SUPPLY_API_URL, SUPPLY_MODULE

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class SupplyClient:
    def __init__(self, base_url: str = SUPPLY_API_URL, timeout: float = API_TIMEOUT, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    # ---------- transport ----------
    def _request(self, method: str, path: str, **kwargs):
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error("%s %s unreachable: %s", method, url, e)
            raise ApiError("Service indisponible - veuillez réessayer") from e

        if not resp.ok:
            try:
                detail = resp.json().get("detail")
            except ValueError:
                detail = None
            if isinstance(detail, list):
                # erreurs de validation FastAPI
                detail = "; ".join(str(d.get("msg", d)) for d in detail)
            message = detail or f"Erreur {resp.status_code}"
            logger.warning("%s %s -> %s: %s", method, url, resp.status_code, message)
            raise ApiError(message, resp.status_code)

        if resp.headers.get("content-type", "").startswith("application/json"):
            return resp.json()
        return resp.content

    def _get(self, path: str, params: dict | None = None):
        clean = {k: v for k, v in (params or {}).items() if v not in (None, "")}
        return self._request("GET", path, params=clean or None)

    def _post(self, path: str, payload: dict | None = None):
        return self._request("POST", path, json=payload)

    # ---------- référentiels ----------
    def health(self) -> dict:
        return self._get("/health")

    def list_products(self, search: str | None = None) -> list[dict]:
        return self._get("/products", {"search": search})

    def next_sku(self, name: str) -> str:
        return self._get("/products/next-sku", {"name": name})["sku"]

    def create_product(self, payload: dict) -> dict:
        return self._post("/products", payload)

    def list_suppliers(self, module: str | None = SUPPLY_MODULE) -> list[dict]:
        return self._get("/suppliers", {"module": module})

    def create_supplier(self, payload: dict) -> dict:
        return self._post("/suppliers", payload)

    def list_categories(self, module: str | None = SUPPLY_MODULE) -> list[dict]:
        return self._get("/categories", {"module": module})

    def create_category(self, payload: dict) -> dict:
        return self._post("/categories", payload)

    # ---------- commandes ----------
    def list_orders(self, search: str | None = None, status: str | None = None) -> list[dict]:
        return self._get("/purchase-orders", {"search": search, "status": status})

    def get_order(self, po_id: int) -> dict:
        return self._get(f"/purchase-orders/{po_id}")

    def create_order(self, payload: dict) -> dict:
        return self._post("/purchase-orders", payload)

    def update_order(self, po_id: int, payload: dict) -> dict:
        return self._request("PUT", f"/purchase-orders/{po_id}", json=payload)

    def change_status(self, po_id: int, status: str) -> dict:
        return self._request("PATCH", f"/purchase-orders/{po_id}/status", json={"status": status})

    def add_order_item(self, po_id: int, payload: dict) -> dict:
        return self._post(f"/purchase-orders/{po_id}/items", payload)

    def receipt_draft(self, po_id: int, exchange_rate: float | None = None) -> dict:
        return self._get(f"/purchase-orders/{po_id}/receipt-draft", {"exchange_rate": exchange_rate})

    def order_pdf(self, po_id: int) -> bytes:
        return self._get(f"/purchase-orders/{po_id}/pdf")

    # ---------- réceptions ----------
    def list_receipts(self, purchase_order_id: int | None = None) -> list[dict]:
        return self._get("/receipts", {"purchase_order_id": purchase_order_id})

    def create_receipt(self, payload: dict) -> dict:
        return self._post("/receipts", payload)

    # ---------- suivi ----------
    def sync_tracking_numbers(self) -> dict:
        return self._post("/tracking-numbers/sync")

    def list_tracking_numbers(self, search: str | None = None, status: str | None = None) -> list[dict]:
        return self._get("/tracking-numbers", {"search": search, "status": status})

    def update_tracking_number(self, tracking_id: int, payload: dict) -> dict:
        return self._request("PUT", f"/tracking-numbers/{tracking_id}", json=payload)

    def delete_tracking_number(self, tracking_id: int) -> dict:
        return self._request("DELETE", f"/tracking-numbers/{tracking_id}")
