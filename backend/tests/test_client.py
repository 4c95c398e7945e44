import pytest
import requests

from frontend.client import ApiError, SupplyClient


class FakeResponse:
    def __init__(self, status_code=200, payload=None, content_type="application/json", content=b""):
        self.status_code = status_code
        self._payload = payload
        self.headers = {"content-type": content_type}
        self.content = content

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def request(self, method, url, timeout=None, **kwargs):
        self.calls.append((method, url, timeout, kwargs))
        if self.error:
            raise self.error
        return self.response


def test_get_drops_empty_params():
    session = FakeSession(FakeResponse(payload=[]))
    client = SupplyClient("http://api/v1/", timeout=3, session=session)

    assert client.list_orders(search="", status="ordered") == []
    method, url, timeout, kwargs = session.calls[0]
    assert (method, url, timeout) == ("GET", "http://api/v1/purchase-orders", 3)
    assert kwargs["params"] == {"status": "ordered"}


def test_error_detail_becomes_api_error():
    session = FakeSession(FakeResponse(409, {"detail": "Ce produit est déjà dans la commande"}))
    client = SupplyClient("http://api/v1", session=session)

    with pytest.raises(ApiError) as info:
        client.add_order_item(1, {"product_id": 2})

    assert info.value.status_code == 409
    assert info.value.message == "Ce produit est déjà dans la commande"


def test_validation_errors_are_joined():
    detail = [{"msg": "field required"}, {"msg": "value is not a valid integer"}]
    client = SupplyClient("http://api/v1", session=FakeSession(FakeResponse(422, {"detail": detail})))

    with pytest.raises(ApiError) as info:
        client.create_order({})

    assert info.value.message == "field required; value is not a valid integer"


def test_error_without_body():
    client = SupplyClient("http://api/v1", session=FakeSession(FakeResponse(502)))

    with pytest.raises(ApiError) as info:
        client.health()

    assert info.value.message == "Erreur 502"


def test_network_failure():
    client = SupplyClient("http://api/v1", session=FakeSession(error=requests.ConnectionError("boom")))

    with pytest.raises(ApiError) as info:
        client.list_products()

    assert info.value.status_code is None


def test_pdf_returns_raw_bytes():
    session = FakeSession(FakeResponse(content_type="application/pdf", content=b"%PDF-1.3"))
    client = SupplyClient("http://api/v1", session=session)

    assert client.order_pdf(7) == b"%PDF-1.3"
    assert session.calls[0][1] == "http://api/v1/purchase-orders/7/pdf"
