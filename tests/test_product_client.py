from unittest.mock import MagicMock, patch

import pytest
import requests

from app.domain.errors import ProductNotFound, RemoteError
from app.services.product_client import ProductClient


def _response(status_code=200, payload=None):
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status_code} error")
    return resp


@pytest.fixture
def tcp_client(tcp_server):
    return ProductClient(base_url="http://products.test", host="127.0.0.1", port=tcp_server.port)


def test_add_and_get_products_over_tcp(tcp_client):
    created = tcp_client.add_product({"name": "Widget", "price": 10})

    assert created["id"] == 1
    assert tcp_client.get_products() == [created]


def test_remote_error_carries_code(tcp_client):
    with pytest.raises(RemoteError) as exc:
        tcp_client.add_product({"price": 10})

    assert exc.value.code == "validation_error"


def test_send_unknown_command(tcp_client):
    with pytest.raises(RemoteError) as exc:
        tcp_client.send("nope")

    assert exc.value.code == "unknown_pattern"


def test_connection_refused_is_retried():
    client = ProductClient(host="127.0.0.1", port=1)

    with patch("app.services.product_client.socket.create_connection") as connect:
        connect.side_effect = ConnectionRefusedError()
        with patch("tenacity.nap.time.sleep"):
            with pytest.raises(ConnectionRefusedError):
                client.get_products()

    assert connect.call_count == 3


def test_get_product_over_http():
    client = ProductClient(base_url="http://products.test/")
    product = {"id": 1, "name": "Widget", "price": 10.0, "description": None}

    with patch("app.services.product_client.requests.request", return_value=_response(200, product)) as req:
        assert client.get_product(1) == product

    req.assert_called_once_with("GET", "http://products.test/1", timeout=2)


def test_update_product_sends_patch():
    client = ProductClient(base_url="http://products.test")

    with patch("app.services.product_client.requests.request", return_value=_response(200, {"id": 1})) as req:
        client.update_product(1, {"price": 12})

    req.assert_called_once_with("PATCH", "http://products.test/1", timeout=2, json={"price": 12})


def test_http_404_raises_not_found_without_retry():
    client = ProductClient(base_url="http://products.test")

    with patch("app.services.product_client.requests.request", return_value=_response(404)) as req:
        with pytest.raises(ProductNotFound):
            client.remove_product(9)

    assert req.call_count == 1


def test_http_connection_error_is_retried():
    client = ProductClient(base_url="http://products.test")

    with patch("app.services.product_client.requests.request") as req:
        req.side_effect = [requests.ConnectionError("down"), _response(200, {"id": 1})]
        with patch("tenacity.nap.time.sleep"):
            assert client.get_product(1) == {"id": 1}

    assert req.call_count == 2
