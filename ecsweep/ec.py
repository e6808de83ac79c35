import logging
import math
from typing import List, Optional

import zfec

from ecsweep.errors import CodecError, InsufficientShards, UnsupportedConfiguration

logger = logging.getLogger(__name__)

# zfec works over GF(2^8): at most 256 shards per stripe.
MAX_CODEC_SHARDS = 256


class CodecContext:
    """
    zfec encoder/decoder pair for one (data, parity) split.
    zfec counts in (k, m): k = data shards needed, m = total shards.
    """

    def __init__(self, data_shards: int, parity_shards: int):
        self.data_shards = data_shards
        self.parity_shards = parity_shards
        self.encoder = zfec.Encoder(data_shards, self.total_shards)
        self.decoder = zfec.Decoder(data_shards, self.total_shards)

    @property
    def total_shards(self) -> int:
        return self.data_shards + self.parity_shards

    def __repr__(self):
        return f"CodecContext(data_shards={self.data_shards}, parity_shards={self.parity_shards})"


class ShardSlot:
    """One position of a shard set, with an explicit present/absent marker."""

    def __init__(self, index: int, data: bytes):
        self.index = index
        self.data = data
        self.present = True

    def mark_absent(self):
        self.data = b""
        self.present = False

    def fill(self, data: bytes):
        self.data = bytes(data)
        self.present = True


class ShardSet:
    """
    Ordered data + parity slots of equal length.
    Slots [0, data_shards) carry the payload, the rest carry parity.
    """

    def __init__(self, data_shards: int, parity_shards: int, shard_size: int, slots: List[ShardSlot]):
        self.data_shards = data_shards
        self.parity_shards = parity_shards
        self.shard_size = shard_size
        self.slots = slots

    def __len__(self):
        return len(self.slots)

    def __iter__(self):
        return iter(self.slots)

    def __getitem__(self, index: int) -> ShardSlot:
        return self.slots[index]

    @property
    def encoded_bytes(self) -> int:
        return len(self.slots) * self.shard_size

    def present_count(self) -> int:
        return sum(1 for slot in self.slots if slot.present)

    def absent_indexes(self) -> List[int]:
        return [slot.index for slot in self.slots if not slot.present]

    def mark_tail_absent(self, count: int):
        """Mark the last `count` slots absent (simulated loss of that many shards)."""
        if count < 0 or count > len(self.slots):
            raise ValueError(f"Cannot drop {count} of {len(self.slots)} shards")
        for slot in self.slots[len(self.slots) - count:]:
            slot.mark_absent()

    def buffers(self) -> List[Optional[bytes]]:
        """Slot contents in order, None for absent slots."""
        return [slot.data if slot.present else None for slot in self.slots]


def construct(data_shards: int, parity_shards: int) -> CodecContext:
    if data_shards < 1:
        raise UnsupportedConfiguration(f"Data shards must be at least 1, got {data_shards}")
    if parity_shards < 0:
        raise UnsupportedConfiguration(f"Parity shards must not be negative, got {parity_shards}")
    if data_shards + parity_shards > MAX_CODEC_SHARDS:
        raise UnsupportedConfiguration(
            f"Too many shards: {data_shards} + {parity_shards} exceeds {MAX_CODEC_SHARDS}"
        )
    try:
        return CodecContext(data_shards, parity_shards)
    except (zfec.Error, ValueError) as e:
        raise UnsupportedConfiguration(
            f"zfec rejected {data_shards} data + {parity_shards} parity shards: {e}"
        ) from e


def split(payload: bytes, ctx: CodecContext) -> ShardSet:
    """
    Splits payload into ctx.data_shards equal blocks, zero-padding the tail,
    and allocates zero-filled parity slots of the same size.
    """
    if not payload:
        raise CodecError("Not enough data to split: payload is empty")

    # zfec requires exactly K blocks of equal size
    shard_size = math.ceil(len(payload) / ctx.data_shards)
    padded = payload + b"\x00" * (shard_size * ctx.data_shards - len(payload))

    slots = []
    for i in range(ctx.data_shards):
        start = i * shard_size
        slots.append(ShardSlot(i, padded[start:start + shard_size]))
    for i in range(ctx.data_shards, ctx.total_shards):
        slots.append(ShardSlot(i, b"\x00" * shard_size))

    return ShardSet(ctx.data_shards, ctx.parity_shards, shard_size, slots)


def encode(shard_set: ShardSet, ctx: CodecContext):
    """Fills the parity slots of shard_set in place from its data slots."""
    _check_shape(shard_set, ctx)
    for slot in shard_set.slots[:ctx.data_shards]:
        if not slot.present:
            raise CodecError(f"Cannot encode with data shard {slot.index} missing")
    data_blocks = [slot.data for slot in shard_set.slots[:ctx.data_shards]]

    parity_nums = list(range(ctx.data_shards, ctx.total_shards))
    if not parity_nums:
        return
    parity_blocks = ctx.encoder.encode(data_blocks, parity_nums)
    for num, block in zip(parity_nums, parity_blocks):
        shard_set.slots[num].fill(block)


def reconstruct(shard_set: ShardSet, ctx: CodecContext):
    """
    Recovers every absent slot of shard_set in place.
    Raises InsufficientShards when fewer than ctx.data_shards slots are present.
    """
    _check_shape(shard_set, ctx)
    present = [slot for slot in shard_set.slots if slot.present]
    if len(present) < ctx.data_shards:
        raise InsufficientShards(len(present), ctx.data_shards)

    missing = shard_set.absent_indexes()
    if not missing:
        return

    for slot in present:
        if len(slot.data) != shard_set.shard_size:
            raise CodecError(
                f"Shard {slot.index} has {len(slot.data)} bytes, expected {shard_set.shard_size}"
            )

    # zfec decodes from exactly K blocks
    chosen = present[:ctx.data_shards]
    data_blocks = ctx.decoder.decode([slot.data for slot in chosen], [slot.index for slot in chosen])
    for index in missing:
        if index < ctx.data_shards:
            shard_set.slots[index].fill(data_blocks[index])

    parity_missing = [index for index in missing if index >= ctx.data_shards]
    if parity_missing:
        parity_blocks = ctx.encoder.encode(list(data_blocks), parity_missing)
        for index, block in zip(parity_missing, parity_blocks):
            shard_set.slots[index].fill(block)

    logger.debug(f"Reconstructed shards {missing} from {[slot.index for slot in chosen]}")


def join(shard_set: ShardSet, original_size: int) -> bytes:
    """Joins the data slots and truncates the split padding."""
    for slot in shard_set.slots[:shard_set.data_shards]:
        if not slot.present:
            raise CodecError(f"Data shard {slot.index} is missing, reconstruct first")
    full_data = b"".join(slot.data for slot in shard_set.slots[:shard_set.data_shards])
    return full_data[:original_size]


def _check_shape(shard_set: ShardSet, ctx: CodecContext):
    if shard_set.data_shards != ctx.data_shards or len(shard_set) != ctx.total_shards:
        raise CodecError(
            f"Shard set has {shard_set.data_shards} data / {len(shard_set)} total shards, "
            f"codec expects {ctx.data_shards} / {ctx.total_shards}"
        )
