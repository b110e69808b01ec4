# app/transport/json_socket.py
"""
Ramkowanie wiadomosci na kanale TCP: `<dlugosc>#<json>`.

Dlugosc to liczba znakow tekstu JSON. JSON wysylamy jako ASCII (ensure_ascii),
wiec liczba znakow == liczba bajtow i obie strony licza tak samo.
"""
import codecs
import json
from typing import Any, List

DELIMITER = "#"


class CorruptedPacketError(ValueError):
    """Uszkodzona ramka; `messages` to poprawne ramki zdekodowane przed nia."""

    def __init__(self, message: str, messages: List[Any] | None = None):
        super().__init__(message)
        self.messages = messages or []


def encode_message(message: Any) -> bytes:
    payload = json.dumps(message, separators=(",", ":"), ensure_ascii=True)
    return f"{len(payload)}{DELIMITER}{payload}".encode("utf-8")


class JsonSocketDecoder:
    """Strumieniowy dekoder ramek; `feed` moze dostac dowolny kawalek bajtow."""

    def __init__(self):
        self._utf8 = codecs.getincrementaldecoder("utf-8")()
        self._buffer = ""
        self._content_length: int | None = None

    def feed(self, chunk: bytes) -> List[Any]:
        messages = []
        try:
            self._buffer += self._utf8.decode(chunk)
            self._drain(messages)
        except CorruptedPacketError as e:
            raise CorruptedPacketError(str(e), messages) from e
        except UnicodeDecodeError as e:
            raise CorruptedPacketError(f"Packet is not valid UTF-8: {e}", messages) from e
        return messages

    def _drain(self, messages: List[Any]):
        while True:
            if self._content_length is None:
                idx = self._buffer.find(DELIMITER)
                if idx == -1:
                    self._check_length_prefix(self._buffer)
                    return
                raw_length = self._buffer[:idx]
                self._check_length_prefix(raw_length, complete=True)
                self._content_length = int(raw_length)
                self._buffer = self._buffer[idx + 1:]

            if len(self._buffer) < self._content_length:
                return

            body = self._buffer[:self._content_length]
            self._buffer = self._buffer[self._content_length:]
            self._content_length = None

            try:
                messages.append(json.loads(body))
            except json.JSONDecodeError as e:
                raise CorruptedPacketError(f"Could not parse JSON packet: {e}") from e

    @staticmethod
    def _check_length_prefix(raw: str, complete: bool = False):
        if complete and not raw:
            raise CorruptedPacketError("Empty length value supplied in a packet")
        if raw and not (raw.isascii() and raw.isdigit()):
            raise CorruptedPacketError(f"Corrupted length value {raw[:20]!r} supplied in a packet")
