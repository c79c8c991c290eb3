import dataclasses

from eth_typing import ChecksumAddress
from hexbytes import HexBytes

from driftswap.checksum_cache import get_checksum_address


@dataclasses.dataclass(slots=True, frozen=True, eq=False)
class PooledToken:
    """
    An ERC-20 style asset held by a pool. Tokens are identified by their address, so a token
    compares equal to another token, or to a string / bytes representation of the same address.
    """

    address: ChecksumAddress
    symbol: str
    decimals: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "address", get_checksum_address(self.address))

    def __eq__(self, other: object) -> bool:
        match other:
            case PooledToken():
                return self.address == other.address
            case HexBytes():
                return self.address.lower() == other.to_0x_hex().lower()
            case bytes():
                return self.address.lower() == "0x" + other.hex().lower()
            case str():
                return self.address.lower() == other.lower()
            case _:
                return NotImplemented

    def __hash__(self) -> int:
        return hash(self.address)

    def __str__(self) -> str:
        return self.symbol

    def __repr__(self) -> str:  # pragma: no cover
        return f"{self.__class__.__name__}(address={self.address}, symbol='{self.symbol}', decimals={self.decimals})"  # noqa:E501
