import pytest

from tests.helpers import make_payload


@pytest.fixture
def payload_file(tmp_path):
    """Writes a deterministic payload and returns its path; default 600 bytes."""

    def _write(size: int = 600, name: str = "testfile.txt"):
        path = tmp_path / name
        path.write_bytes(make_payload(size))
        return path

    return _write


@pytest.fixture
def output_dir(tmp_path):
    return tmp_path / "output"
