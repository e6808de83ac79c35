import ecsweep.ec as ec
from ecsweep.errors import InsufficientShards
from ecsweep.quorum import QuorumProber
from tests.helpers import make_payload


def _blank_set(data_shards, parity_shards, size=4):
    slots = [ec.ShardSlot(i, b"\x00" * size) for i in range(data_shards + parity_shards)]
    return ec.ShardSet(data_shards, parity_shards, size, slots)


class CountingReconstructor:
    """Fake codec: succeeds while at least `required` slots are present."""

    def __init__(self, required):
        self.required = required
        self.attempts = []

    def __call__(self, shard_set):
        present = shard_set.present_count()
        self.attempts.append(len(shard_set) - present)
        if present < self.required:
            raise InsufficientShards(present, self.required)
        for index in shard_set.absent_indexes():
            shard_set[index].fill(b"\x00" * shard_set.shard_size)


class ScriptedReconstructor:
    """Fake codec: succeeds or fails per attempt, in order."""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.attempts = []

    def __call__(self, shard_set):
        self.attempts.append(len(shard_set.absent_indexes()))
        if not self.outcomes.pop(0):
            raise InsufficientShards(shard_set.present_count(), shard_set.data_shards)
        for index in shard_set.absent_indexes():
            shard_set[index].fill(b"\x00" * shard_set.shard_size)


def test_probe_stops_at_first_failure():
    fake = CountingReconstructor(required=3)
    shard_set = _blank_set(3, 3)

    assert QuorumProber(fake).probe(shard_set) == 3
    # dropped 4 shards on the first attempt and stopped
    assert fake.attempts == [4]


def test_probe_walks_down_parity_levels():
    fake = ScriptedReconstructor([True, True, False])
    shard_set = _blank_set(5, 5)

    assert QuorumProber(fake).probe(shard_set) == 7
    assert fake.attempts == [6, 5, 4]


def test_probe_records_nothing_when_every_attempt_succeeds():
    fake = CountingReconstructor(required=1)
    shard_set = _blank_set(4, 4)

    assert QuorumProber(fake).probe(shard_set) is None
    assert fake.attempts == [5, 4, 3]


def test_probe_with_zfec_scenario():
    ctx = ec.construct(3, 3)
    shard_set = ec.split(make_payload(600), ctx)
    ec.encode(shard_set, ctx)

    prober = QuorumProber(lambda shards: ec.reconstruct(shards, ctx))
    assert prober.probe(shard_set) == 3


def test_probe_with_zfec_least_redundant_split():
    ctx = ec.construct(4, 2)
    shard_set = ec.split(make_payload(600), ctx)
    ec.encode(shard_set, ctx)

    prober = QuorumProber(lambda shards: ec.reconstruct(shards, ctx))
    assert prober.probe(shard_set) == 4


def test_failure_persists_as_more_shards_are_lost():
    payload = make_payload(500)
    for data_shards, parity_shards in [(3, 3), (5, 3), (6, 6)]:
        ctx = ec.construct(data_shards, parity_shards)
        outcomes = []
        for lost in range(data_shards + parity_shards + 1):
            shard_set = ec.split(payload, ctx)
            ec.encode(shard_set, ctx)
            shard_set.mark_tail_absent(lost)
            try:
                ec.reconstruct(shard_set, ctx)
                outcomes.append(True)
            except InsufficientShards:
                outcomes.append(False)

        first_failure = outcomes.index(False)
        assert first_failure == parity_shards + 1
        assert not any(outcomes[first_failure:])
