# app/transport/tcp_server.py
import asyncio
import json
from typing import Any, Callable, Dict

from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.api.message_router import MessageRouter
from app.domain.errors import ProductNotFound, UnknownPattern
from app.transport.json_socket import JsonSocketDecoder, CorruptedPacketError, encode_message
from app.utils.logging import get_logger

logger = get_logger(__name__)

READ_CHUNK = 64 * 1024


def parse_pattern(pattern: Any):
    """
    Wzorzec moze przyjsc jako {"cmd": ...}, jako jego forma JSON-string
    (tak wysyla go klient nest) albo jako goly string.
    """
    if isinstance(pattern, str):
        try:
            decoded = json.loads(pattern)
        except json.JSONDecodeError:
            return pattern
        pattern = decoded
    if isinstance(pattern, dict):
        return pattern.get("cmd")
    return pattern


def error_payload(exc: Exception) -> dict:
    if isinstance(exc, ProductNotFound):
        return {"status": "error", "code": "not_found", "message": str(exc)}
    if isinstance(exc, ValidationError):
        return {
            "status": "error",
            "code": "validation_error",
            "message": f"{exc.error_count()} validation error(s) for {exc.title}",
            "errors": exc.errors(include_url=False, include_context=False, include_input=False),
        }
    if isinstance(exc, UnknownPattern):
        return {"status": "error", "code": "unknown_pattern", "message": str(exc)}
    return {"status": "error", "code": "internal_error", "message": "Internal server error"}


class TcpServer:
    """
    Listener kanalu komend.
    Na jednym polaczeniu wiadomosci obslugiwane sa po kolei; kazda w osobnym
    watku z wlasna sesja DB, zeby nie blokowac petli asyncio.
    """

    def __init__(
        self,
        router: MessageRouter,
        session_factory: Callable[[], Session],
        host: str,
        port: int,
    ):
        self.router = router
        self.session_factory = session_factory
        self.host = host
        self.port = port
        self._server: asyncio.AbstractServer | None = None
        #otwarte polaczenia: task handlera -> writer
        self._connections: Dict[asyncio.Task, asyncio.StreamWriter] = {}

    async def start(self):
        #OSError przy bind leci wyzej - to blad krytyczny przy starcie
        self._server = await asyncio.start_server(self._handle_connection, self.host, self.port)
        sock = self._server.sockets[0]
        self.port = sock.getsockname()[1]
        logger.info(f"TCP listener on {self.host}:{self.port}, commands: {self.router.commands}")

    async def close(self):
        if self._server is None:
            return
        self._server.close()
        #od 3.12 wait_closed czeka na otwarte polaczenia, wiec zamykamy je sami
        for writer in list(self._connections.values()):
            writer.close()
        await asyncio.gather(*self._connections, return_exceptions=True)
        await self._server.wait_closed()
        self._server = None
        logger.info("TCP listener closed")

    async def _handle_connection(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        peer = writer.get_extra_info("peername")
        task = asyncio.current_task()
        self._connections[task] = writer
        decoder = JsonSocketDecoder()
        logger.debug(f"Connection from {peer}")
        try:
            while True:
                chunk = await reader.read(READ_CHUNK)
                if not chunk:
                    break
                try:
                    messages = decoder.feed(chunk)
                    corrupted = None
                except CorruptedPacketError as e:
                    #ramki przed uszkodzona sa poprawne - obsluz je, potem zamknij
                    messages = e.messages
                    corrupted = e
                for message in messages:
                    reply = await self.handle_message(message)
                    if reply is not None:
                        writer.write(encode_message(reply))
                        await writer.drain()
                if corrupted is not None:
                    logger.warning(f"Closing connection from {peer}: {corrupted}")
                    break
        except ConnectionError as e:
            logger.info(f"Connection from {peer} dropped: {e}")
        finally:
            self._connections.pop(task, None)
            writer.close()
            try:
                await writer.wait_closed()
            except ConnectionError:
                pass

    async def handle_message(self, message: Any) -> dict | None:
        if not isinstance(message, dict):
            logger.warning(f"Ignoring non-object packet: {message!r}")
            return None

        msg_id = message.get("id")
        cmd = parse_pattern(message.get("pattern"))

        try:
            result = await asyncio.to_thread(self._dispatch, cmd, message.get("data"))
        except (ProductNotFound, ValidationError, UnknownPattern) as e:
            logger.info(f"Command {cmd!r} failed: {e}")
            reply = {"err": error_payload(e)}
        except Exception as e:
            logger.exception(f"Command {cmd!r} crashed")
            reply = {"err": error_payload(e)}
        else:
            reply = {"response": result}

        #bez id to event - nikt nie czeka na odpowiedz
        if msg_id is None:
            return None
        return {"id": msg_id, **reply, "isDisposed": True}

    def _dispatch(self, cmd, data):
        db = self.session_factory()
        try:
            return self.router.dispatch(cmd, data, db)
        finally:
            db.close()
