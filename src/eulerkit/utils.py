from __future__ import annotations

from eth_hash.auto import keccak


def keccak256(data: bytes) -> bytes:
    # NOTE: Keccak-256 != SHA3-256 (NIST). Never use hashlib.sha3_256 here.
    return keccak(data)


def to_checksum_address(address: str) -> str:
    """Convert an address to EIP-55 checksummed format."""
    addr = strip_0x(address).lower()
    if len(addr) != 40 or any(c not in "0123456789abcdef" for c in addr):
        raise ValueError(f"Not a 20-byte hex address: {address!r}")
    addr_hash = keccak256(addr.encode("utf-8")).hex()
    result = "0x"
    for i, c in enumerate(addr):
        if c in "abcdef":
            result += c.upper() if int(addr_hash[i], 16) >= 8 else c
        else:
            result += c
    return result


def strip_0x(value: str) -> str:
    return value[2:] if value[:2] in ("0x", "0X") else value


def to_bytes(value: bytes | bytearray | str | None) -> bytes:
    """Accept raw bytes or a (0x-prefixed) hex string."""
    if value is None:
        return b""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return bytes.fromhex(strip_0x(value))


def to_hex(data: bytes) -> str:
    return "0x" + data.hex()


def module_key(module: str) -> str:
    """Registry key for a module path: ``"modules/EToken"`` -> ``"eToken"``."""
    name = module.split("/")[-1]
    return name[:1].lower() + name[1:]
