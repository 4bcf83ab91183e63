import pytest

from chipvm.machine import Machine


class FakeClock:
    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def program(*words: int) -> bytes:
    return b"".join(w.to_bytes(2, "big") for w in words)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_machine(clock):
    def _make(*words: int, **kwargs) -> Machine:
        return Machine(program(*words), clock=clock, **kwargs)
    return _make
