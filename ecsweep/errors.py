"""
Errors raised by the sweep tool.

Everything derives from ECSweepError so the CLI can turn any of them into
a message and an exit code. InsufficientShards is the only one handled
below the CLI: the quorum prober uses it as its stop signal.
"""


class ECSweepError(Exception):
    """Base class for all sweep errors."""


class InvalidConfiguration(ECSweepError):
    """Requested total shard count is out of range or odd."""


class CodecError(ECSweepError):
    """The erasure codec could not process a shard set."""


class UnsupportedConfiguration(CodecError):
    """The (data, parity) pair cannot be realised by the codec."""


class InsufficientShards(CodecError):
    """Too few shards are present to reconstruct the rest."""

    def __init__(self, present: int, required: int):
        self.present = present
        self.required = required
        super().__init__(f"Need at least {required} shards to reconstruct, have {present}")


class PayloadReadFailure(ECSweepError):
    """The input payload could not be read."""


class ShardStorageError(ECSweepError):
    """A shard artifact could not be written or removed."""
