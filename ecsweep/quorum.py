"""
Read quorum probing.

Shards are dropped from the tail of the shard set, one more per step, until
reconstruction fails. The quorum reported is a property of that removal
order, not an exhaustive search over every subset of missing shards.
"""
import logging
from typing import Callable, Optional

from ecsweep.config import MIN_PARITY_SHARDS
from ecsweep.ec import ShardSet
from ecsweep.errors import InsufficientShards

logger = logging.getLogger(__name__)

Reconstructor = Callable[[ShardSet], None]


class QuorumProber:
    """
    Finds the read quorum of an encoded shard set.

    `reconstruct` must restore absent slots in place, or raise
    InsufficientShards when it cannot.
    """

    def __init__(self, reconstruct: Reconstructor, min_parity: int = MIN_PARITY_SHARDS):
        self.reconstruct = reconstruct
        self.min_parity = min_parity

    def probe(self, shard_set: ShardSet) -> Optional[int]:
        total_shards = len(shard_set)
        for i in range(shard_set.parity_shards, self.min_parity - 1, -1):
            shard_set.mark_tail_absent(i + 1)
            try:
                self.reconstruct(shard_set)
            except InsufficientShards as e:
                logger.debug(
                    f"{shard_set.data_shards}+{shard_set.parity_shards}: "
                    f"dropping {i + 1} shards failed ({e})"
                )
                return total_shards - i
            logger.debug(
                f"{shard_set.data_shards}+{shard_set.parity_shards}: "
                f"dropping {i + 1} shards reconstructed"
            )
        return None
