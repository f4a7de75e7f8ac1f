"""Subnet address-space partitioning.

Splits a base IPv4 block into one private and one public subnet per
availability zone. The base block is tiled into ``2 ** extra_bits`` equal
siblings, where ``extra_bits`` is the smallest value giving at least
``2 * zone_count`` tiles. Zone ``i`` receives tile ``2i`` as its private subnet
and tile ``2i + 1`` as its public subnet; any remaining tiles stay unallocated.

The module has no AWS or CDK imports so it can be used (and tested) without a
synthesis context.

Example:
    >>> result = partition("10.0.0.0/16", 2)
    >>> [str(block) for block in result.private_blocks]
    ['10.0.0.0/18', '10.0.128.0/18']
    >>> [str(block) for block in result.public_blocks]
    ['10.0.64.0/18', '10.0.192.0/18']
"""

import ipaddress
import re
from dataclasses import dataclass

from .exceptions import CapacityError, InvalidAddressError, InvalidArgumentError

# /31 and /32 leave no room for network, broadcast and usable hosts.
MAX_SUBNET_PREFIX = 30

_ADDRESS_BITS = 32
_CIDR_PATTERN = re.compile(r"^\d{1,3}(\.\d{1,3}){3}/\d{1,2}$")


@dataclass(frozen=True, order=True)
class AddressBlock:
    """An IPv4 network in canonical form (host bits always zero)."""

    network: int
    prefix_length: int

    def __post_init__(self) -> None:
        if not 0 <= self.prefix_length <= _ADDRESS_BITS:
            raise InvalidAddressError(
                "Prefix length out of range", prefix_length=self.prefix_length
            )
        if not 0 <= self.network < 2**_ADDRESS_BITS:
            raise InvalidAddressError("Address out of range", network=self.network)
        if self.network & (self.size - 1):
            raise InvalidAddressError(
                "Address has host bits set",
                network=str(ipaddress.IPv4Address(self.network)),
                prefix_length=self.prefix_length,
            )

    @classmethod
    def parse(cls, cidr: str) -> "AddressBlock":
        """Parse ``A.B.C.D/prefix`` into a canonical block.

        Host bits are zeroed, the same way AWS canonicalizes CIDRs passed to
        CreateVpc/CreateSubnet.

        Raises:
            InvalidAddressError: If ``cidr`` is not an IPv4 CIDR literal
        """
        if not isinstance(cidr, str) or not _CIDR_PATTERN.match(cidr.strip()):
            raise InvalidAddressError("Not an IPv4 CIDR block", cidr=cidr)
        try:
            network = ipaddress.IPv4Network(cidr.strip(), strict=False)
        except ValueError as e:
            raise InvalidAddressError("Not an IPv4 CIDR block", cidr=cidr) from e
        return cls(int(network.network_address), network.prefixlen)

    @property
    def size(self) -> int:
        """Number of addresses in the block."""
        return 2 ** (_ADDRESS_BITS - self.prefix_length)

    @property
    def last(self) -> int:
        return self.network + self.size - 1

    @property
    def network_address(self) -> str:
        return str(ipaddress.IPv4Address(self.network))

    def contains(self, other: "AddressBlock") -> bool:
        """Return True if ``other`` lies entirely inside this block."""
        return self.network <= other.network and other.last <= self.last

    def overlaps(self, other: "AddressBlock") -> bool:
        return self.network <= other.last and other.network <= self.last

    def tile(self, prefix_length: int, index: int) -> "AddressBlock":
        """Return the ``index``-th sibling of length ``prefix_length`` inside this block."""
        if prefix_length < self.prefix_length or prefix_length > _ADDRESS_BITS:
            raise InvalidArgumentError(
                "Tile prefix must be between the block prefix and /32",
                block=str(self),
                prefix_length=prefix_length,
            )
        count = 2 ** (prefix_length - self.prefix_length)
        if not 0 <= index < count:
            raise InvalidArgumentError(
                "Tile index out of range", block=str(self), index=index, tiles=count
            )
        return AddressBlock(
            self.network + index * 2 ** (_ADDRESS_BITS - prefix_length), prefix_length
        )

    def __str__(self) -> str:
        return f"{self.network_address}/{self.prefix_length}"


@dataclass(frozen=True)
class ZoneSubnets:
    """The private/public block pair assigned to one availability zone."""

    zone_index: int
    private: AddressBlock
    public: AddressBlock


@dataclass(frozen=True)
class PartitionResult:
    """Outcome of :func:`partition`, ordered by zone index."""

    base: AddressBlock
    subnet_prefix_length: int
    zones: tuple[ZoneSubnets, ...]

    @property
    def zone_count(self) -> int:
        return len(self.zones)

    @property
    def private_blocks(self) -> tuple[AddressBlock, ...]:
        return tuple(zone.private for zone in self.zones)

    @property
    def public_blocks(self) -> tuple[AddressBlock, ...]:
        return tuple(zone.public for zone in self.zones)

    @property
    def reserved_tiles(self) -> int:
        """Tiles carved from the base block but left unallocated."""
        tiles = 2 ** (self.subnet_prefix_length - self.base.prefix_length)
        return tiles - 2 * self.zone_count

    def for_zone(self, zone_index: int) -> ZoneSubnets:
        if not 0 <= zone_index < self.zone_count:
            raise InvalidArgumentError(
                "Zone index out of range",
                zone_index=zone_index,
                zone_count=self.zone_count,
            )
        return self.zones[zone_index]


def subnet_prefix_for(base_prefix: int, zone_count: int) -> int:
    """Prefix length of each tile when ``zone_count`` zones share a block."""
    subnets_needed = 2 * zone_count
    extra_bits = (subnets_needed - 1).bit_length()
    return base_prefix + extra_bits


def partition(base_cidr: str, zone_count: int) -> PartitionResult:
    """Partition ``base_cidr`` into a private and a public subnet per zone.

    Args:
        base_cidr: IPv4 CIDR literal of the whole VPC (e.g. ``10.0.0.0/16``)
        zone_count: Number of availability zones, at least 1

    Returns:
        PartitionResult with ``zone_count`` zone pairs

    Raises:
        InvalidArgumentError: If ``zone_count`` is not a positive integer
        InvalidAddressError: If ``base_cidr`` does not parse
        CapacityError: If the tiles would be smaller than a /30
    """
    if isinstance(zone_count, bool) or not isinstance(zone_count, int) or zone_count < 1:
        raise InvalidArgumentError(
            "Zone count must be a positive integer", zone_count=zone_count
        )

    base = AddressBlock.parse(base_cidr)
    new_prefix = subnet_prefix_for(base.prefix_length, zone_count)
    if new_prefix > MAX_SUBNET_PREFIX:
        raise CapacityError(
            f"Not enough address space in {base} for {zone_count} availability zones",
            zone_count=zone_count,
            base_cidr=str(base),
            required_prefix_length=new_prefix,
            max_prefix_length=MAX_SUBNET_PREFIX,
            available_addresses=base.size,
        )

    zones = tuple(
        ZoneSubnets(
            zone_index=index,
            private=base.tile(new_prefix, 2 * index),
            public=base.tile(new_prefix, 2 * index + 1),
        )
        for index in range(zone_count)
    )
    return PartitionResult(base=base, subnet_prefix_length=new_prefix, zones=zones)


__all__ = [
    "MAX_SUBNET_PREFIX",
    "AddressBlock",
    "PartitionResult",
    "ZoneSubnets",
    "partition",
    "subnet_prefix_for",
]
