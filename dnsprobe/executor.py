"""Single DNS round-trip attempt over UDP."""

import logging
import socket
import time
from typing import Optional

import dns.exception

from .codec import DnsCodec
from .models import QueryResult, RunConfig
from .utils import split_server

logger = logging.getLogger(__name__)

# Classic DNS-over-UDP message size limit
RESPONSE_BUFFER_SIZE = 512


class QueryExecutor:
    """Performs one query attempt per call and classifies the outcome.

    Calling the executor never raises: connect, encode, send, receive and
    decode failures are logged and returned as a failed QueryResult whose
    duration covers the time spent until the failure (the full read timeout
    when no answer arrives).
    """

    def __init__(self, config: RunConfig, codec: Optional[DnsCodec] = None):
        self.config = config
        self.codec = codec or DnsCodec()
        host, port = split_server(config.server)
        self.host = host
        self.port = int(port)

    def __call__(self) -> QueryResult:
        return self.execute()

    def _connect(self) -> socket.socket:
        family, socktype, proto, _, sockaddr = socket.getaddrinfo(
            self.host, self.port, type=socket.SOCK_DGRAM)[0]
        sock = socket.socket(family, socktype, proto)
        try:
            sock.connect(sockaddr)
        except OSError:
            sock.close()
            raise
        return sock

    def execute(self) -> QueryResult:
        start = time.monotonic()

        def failed() -> QueryResult:
            return QueryResult(time.monotonic() - start, False)

        try:
            sock = self._connect()
        except OSError as e:
            logger.warning("Error connecting to DNS server: %s", e)
            return failed()

        with sock:
            try:
                packed = self.codec.encode(self.config.domain, self.config.record_type_code)
            except dns.exception.DNSException as e:
                logger.warning("Error packing DNS message: %s", e)
                return failed()

            try:
                sock.send(packed)
            except OSError as e:
                logger.warning("Error sending DNS query: %s", e)
                return failed()

            sock.settimeout(self.config.timeout)
            try:
                response = sock.recv(RESPONSE_BUFFER_SIZE)
            except OSError as e:
                # socket.timeout is an OSError too
                logger.warning("Error reading DNS response: %s", e)
                return failed()

            try:
                self.codec.decode(response)
            except dns.exception.DNSException as e:
                logger.warning("Error unpacking DNS response: %s", e)
                return failed()

        return QueryResult(time.monotonic() - start, True)
