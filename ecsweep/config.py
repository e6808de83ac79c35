import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from ecsweep.errors import InvalidConfiguration

# -------------------------------------------------------------------
# Shard count limits
# -------------------------------------------------------------------

# zfec works over GF(2^8), so data + parity can never exceed 256.
# 257 is kept as the upper bound; the even-count rule rejects it anyway.
MAX_TOTAL_SHARDS = 257
MIN_TOTAL_SHARDS = 4
MIN_PARITY_SHARDS = 2

# -------------------------------------------------------------------
# Environment defaults
# -------------------------------------------------------------------

DEFAULT_TOTAL_SHARDS = int(os.getenv("ECSWEEP_TOTAL_SHARDS", "6"))
DEFAULT_PAYLOAD = os.getenv("ECSWEEP_PAYLOAD", "testfile.txt")
DEFAULT_OUTPUT_DIR = os.getenv("ECSWEEP_OUTPUT_DIR", "./output/")
DEFAULT_LOG_LEVEL = os.getenv("ECSWEEP_LOG_LEVEL", "WARNING")


def validate_total_shards(total_shards: int) -> None:
    """
    Gate a requested total shard count before any sweep work starts.
    Raises InvalidConfiguration naming the first rule that is broken.
    """
    if total_shards > MAX_TOTAL_SHARDS:
        raise InvalidConfiguration("Too many shards")
    if total_shards < MIN_TOTAL_SHARDS:
        raise InvalidConfiguration("Too few shards")
    if total_shards % 2 != 0:
        raise InvalidConfiguration("Total shards should be even")


class ShardConfiguration(BaseModel):
    model_config = ConfigDict(frozen=True)

    data_shards: int
    parity_shards: int

    @property
    def total_shards(self) -> int:
        return self.data_shards + self.parity_shards


class SweepConfig(BaseModel):
    """Immutable run settings handed to the sweep driver."""

    model_config = ConfigDict(frozen=True)

    total_shards: int = DEFAULT_TOTAL_SHARDS
    payload_path: Path = Path(DEFAULT_PAYLOAD)
    output_dir: Path = Path(DEFAULT_OUTPUT_DIR)
    show_read_quorum: bool = False


def iter_configurations(total_shards: int):
    """
    Yield every ShardConfiguration visited for total_shards, most redundant
    first: half/half, then one parity shard at a time moved to data until
    parity would drop below MIN_PARITY_SHARDS.
    """
    data_shards = total_shards // 2
    parity_shards = total_shards // 2
    while parity_shards >= MIN_PARITY_SHARDS:
        yield ShardConfiguration(data_shards=data_shards, parity_shards=parity_shards)
        data_shards += 1
        parity_shards -= 1

