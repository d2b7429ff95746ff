import logging
import socket
import threading
from typing import Callable, Iterator, List

import dns.message
import pytest


class DnsResponder:
    """UDP DNS server on 127.0.0.1 for tests.

    Modes: "answer" replies with a valid response, "garbage" replies with
    bytes that do not decode, "silent" never replies.
    """

    def __init__(self, mode: str = 'answer'):
        self.mode = mode
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.sock.bind(('127.0.0.1', 0))
        self.sock.settimeout(0.05)
        self.port = self.sock.getsockname()[1]
        self._lock = threading.Lock()
        self._received = 0
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._serve, name='test-dns-responder', daemon=True)
        self._thread.start()

    @property
    def address(self) -> str:
        return f'127.0.0.1:{self.port}'

    @property
    def received(self) -> int:
        with self._lock:
            return self._received

    def _serve(self) -> None:
        while not self._stop.is_set():
            try:
                data, addr = self.sock.recvfrom(4096)
            except socket.timeout:
                continue
            except OSError:
                return
            with self._lock:
                self._received += 1
            if self.mode == 'silent':
                continue
            if self.mode == 'garbage':
                self.sock.sendto(b'\x00\x01', addr)
                continue
            query = dns.message.from_wire(data)
            response = dns.message.make_response(query)
            self.sock.sendto(response.to_wire(), addr)

    def close(self) -> None:
        self._stop.set()
        self._thread.join()
        self.sock.close()


@pytest.fixture
def dns_responder() -> Iterator[Callable[..., DnsResponder]]:
    responders: List[DnsResponder] = []

    def _start(mode: str = 'answer') -> DnsResponder:
        responder = DnsResponder(mode)
        responders.append(responder)
        return responder

    yield _start
    for responder in responders:
        responder.close()


@pytest.fixture(autouse=True)
def reset_dnsprobe_logger() -> Iterator[None]:
    yield
    logger = logging.getLogger('dnsprobe')
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
