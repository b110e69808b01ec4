# app/services/product_client.py
import json
import socket
import uuid
from typing import Any, Dict, List

import requests

from app.domain.errors import ProductNotFound, RemoteError
from app.transport.json_socket import JsonSocketDecoder, encode_message
from app.utils.retry import http_retry, tcp_retry
from app.utils.settings import PRODUCT_SERVICE_URL, TCP_HOST, TCP_PORT
from app.utils.logging import get_logger

logger = get_logger(__name__)


class ProductClient:
    """
    Klient serwisu produktow.
    add_product/get_products ida kanalem komend TCP, reszta przez HTTP.
    """

    def __init__(
        self,
        base_url: str | None = None,
        host: str | None = None,
        port: int | None = None,
        timeout: int = 2,
    ):
        self.base_url = (base_url or PRODUCT_SERVICE_URL).rstrip("/")
        self.host = host or TCP_HOST
        self.port = port or TCP_PORT
        self.timeout = timeout

    #kanal komend
    def send(self, cmd: str, data: Any = None) -> Any:
        message = {
            "pattern": json.dumps({"cmd": cmd}, separators=(",", ":")),
            "data": data,
            "id": str(uuid.uuid4()),
        }
        logger.info(f"ProductClient SEND {cmd} -> {self.host}:{self.port}")

        with self._connect() as sock:
            sock.sendall(encode_message(message))
            return self._await_reply(sock, message["id"])

    @tcp_retry()
    def _connect(self) -> socket.socket:
        return socket.create_connection((self.host, self.port), timeout=self.timeout)

    @staticmethod
    def _await_reply(sock: socket.socket, msg_id: str) -> Any:
        decoder = JsonSocketDecoder()
        while True:
            chunk = sock.recv(64 * 1024)
            if not chunk:
                raise ConnectionError("Connection closed before reply")
            for reply in decoder.feed(chunk):
                if not isinstance(reply, dict) or reply.get("id") != msg_id:
                    continue
                if reply.get("err") is not None:
                    raise RemoteError(reply["err"])
                return reply.get("response")

    def add_product(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self.send("add_product", payload)

    def get_products(self) -> List[Dict[str, Any]]:
        return self.send("get_products")

    #HTTP
    @http_retry()
    def _request(self, method: str, product_id: int, **kwargs) -> Dict[str, Any]:
        url = f"{self.base_url}/{product_id}"
        logger.info(f"ProductClient {method} {url}")

        resp = requests.request(method, url, timeout=self.timeout, **kwargs)
        if resp.status_code == 404:
            raise ProductNotFound(product_id)
        resp.raise_for_status()
        return resp.json()

    def get_product(self, product_id: int) -> Dict[str, Any]:
        return self._request("GET", product_id)

    def update_product(self, product_id: int, changes: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PATCH", product_id, json=changes)

    def remove_product(self, product_id: int) -> Dict[str, Any]:
        return self._request("DELETE", product_id)
