"""DNS message encoding and decoding, delegated to dnspython."""

import dns.message
import dns.name
import dns.rdataclass


class DnsCodec:
    """Packs queries to wire format and parses responses.

    Both methods raise dns.exception.DNSException subclasses on bad input.
    """

    def encode(self, domain: str, type_code: int) -> bytes:
        """Build a recursion-desired IN query for domain with a random ID."""
        qname = dns.name.from_text(domain)
        query = dns.message.make_query(qname, type_code, dns.rdataclass.IN)
        return query.to_wire()

    def decode(self, data: bytes) -> dns.message.Message:
        return dns.message.from_wire(data)
