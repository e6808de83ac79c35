"""
On-disk shard artifacts for one sweep iteration.

Shards are written as <payload-name>.<index> into a single output directory,
and every such artifact is removed before the next configuration writes;
other files in the directory are left alone.
"""
import logging
from pathlib import Path
from typing import List, Optional

from ecsweep.errors import ShardStorageError

logger = logging.getLogger(__name__)


class ShardStore:
    def __init__(self, output_dir: Path, payload_name: str):
        self.output_dir = Path(output_dir)
        # avoid directory traversal
        self.payload_name = Path(payload_name).name.replace("..", "_")

    def ensure_dir(self):
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ShardStorageError(f"Cannot create output directory {self.output_dir}: {e}") from e

    def shard_path(self, index: int) -> Path:
        return self.output_dir / f"{self.payload_name}.{index}"

    def write_shards(self, buffers: List[Optional[bytes]]) -> List[Path]:
        self.ensure_dir()
        paths = []
        for index, data in enumerate(buffers):
            if data is None:
                continue
            path = self.shard_path(index)
            try:
                with path.open("wb") as f:
                    f.write(data)
            except OSError as e:
                raise ShardStorageError(f"Write error for {path}: {e}") from e
            paths.append(path)
        logger.debug(f"Wrote {len(paths)} shards to {self.output_dir}")
        return paths

    def is_shard_artifact(self, path: Path) -> bool:
        prefix, _, index = path.name.rpartition(".")
        return prefix == self.payload_name and index.isdigit()

    def clean_up(self) -> int:
        """Removes this payload's shard files from the output directory. Returns the count removed."""
        if not self.output_dir.exists():
            return 0
        removed = 0
        try:
            for path in list(self.output_dir.iterdir()):
                if self.is_shard_artifact(path) and (path.is_file() or path.is_symlink()):
                    path.unlink()
                    removed += 1
        except OSError as e:
            raise ShardStorageError(f"Delete error in {self.output_dir}: {e}") from e
        logger.debug(f"Removed {removed} shard files from {self.output_dir}")
        return removed
