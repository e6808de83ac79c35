import logging
from pathlib import Path
from typing import Iterator, List, Optional

from pydantic import BaseModel, ConfigDict

import ecsweep.ec as ec
from ecsweep.config import ShardConfiguration, SweepConfig, iter_configurations, validate_total_shards
from ecsweep.errors import PayloadReadFailure
from ecsweep.quorum import QuorumProber
from ecsweep.shard_store import ShardStore

logger = logging.getLogger(__name__)


class ConfigurationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    data_shards: int
    parity_shards: int
    shard_size: int
    encoded_bytes: int
    storage_ratio: float
    read_quorum: Optional[int] = None

    @property
    def display_ratio(self) -> str:
        return f"{self.storage_ratio:.2f}"


def payload_size(path: Path) -> int:
    try:
        return Path(path).stat().st_size
    except OSError as e:
        raise PayloadReadFailure(f"Cannot stat payload {path}: {e}") from e


def read_payload(path: Path) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as e:
        raise PayloadReadFailure(f"Cannot read payload {path}: {e}") from e


class SweepDriver:
    """
    Runs every (data, parity) split for config.total_shards and measures it.

    Each configuration gets a fresh codec, a fresh read of the payload and a
    fresh shard set; its artifacts are removed before the next one starts.
    The first error aborts the sweep.
    """

    def __init__(self, config: SweepConfig, store: Optional[ShardStore] = None):
        validate_total_shards(config.total_shards)
        self.config = config
        self.store = store or ShardStore(config.output_dir, config.payload_path.name)
        self.input_size: Optional[int] = None

    def iter_results(self) -> Iterator[ConfigurationResult]:
        self.input_size = payload_size(self.config.payload_path)
        if self.input_size == 0:
            raise PayloadReadFailure(f"Payload {self.config.payload_path} is empty")
        self.store.ensure_dir()
        logger.info(
            f"Sweeping {self.config.total_shards} shards over {self.config.payload_path} "
            f"({self.input_size} bytes)"
        )

        for shard_config in iter_configurations(self.config.total_shards):
            try:
                result = self.evaluate(shard_config)
            finally:
                self.store.clean_up()
            yield result

    def run(self) -> List[ConfigurationResult]:
        return list(self.iter_results())

    def evaluate(self, shard_config: ShardConfiguration) -> ConfigurationResult:
        if self.input_size is None:
            self.input_size = payload_size(self.config.payload_path)
        ctx = ec.construct(shard_config.data_shards, shard_config.parity_shards)

        payload = read_payload(self.config.payload_path)
        shard_set = ec.split(payload, ctx)
        ec.encode(shard_set, ctx)
        self.store.write_shards(shard_set.buffers())

        ratio = shard_set.encoded_bytes / self.input_size

        read_quorum = None
        if self.config.show_read_quorum:
            prober = QuorumProber(lambda shards: ec.reconstruct(shards, ctx))
            read_quorum = prober.probe(shard_set)

        logger.info(
            f"{shard_config.data_shards} data + {shard_config.parity_shards} parity: "
            f"shard size {shard_set.shard_size}, ratio {ratio:.2f}, read quorum {read_quorum}"
        )
        return ConfigurationResult(
            data_shards=shard_config.data_shards,
            parity_shards=shard_config.parity_shards,
            shard_size=shard_set.shard_size,
            encoded_bytes=shard_set.encoded_bytes,
            storage_ratio=ratio,
            read_quorum=read_quorum,
        )
