import pathlib
import threading
import sys

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))
import learner  # noqa: E402
from phraser import Phraser  # noqa: E402
from store import MemoryStore  # noqa: E402


def _count_workers(prefix: str) -> int:
    return len([t for t in threading.enumerate() if t.name.startswith(prefix)])


def test_mass_learn_does_not_spawn_extra_threads() -> None:
    phraser = Phraser(MemoryStore())
    with learner.Learner(phraser.store_phrase, name="mass-learn") as pool:
        assert _count_workers("mass-learn") == learner.WORKER_LIMIT

        # Flood the pool with learn requests.
        for _ in range(200):
            pool.learn(1, "alpha beta")
        pool.wait()

        assert _count_workers("mass-learn") == learner.WORKER_LIMIT
        assert pool.worker_count == learner.WORKER_LIMIT

    assert _count_workers("mass-learn") == 0
    assert phraser.transitions_from(1, "alpha") == [("beta", 1.0)]
    assert phraser.store.query_from(1, "alpha") == [("beta", 200)]


def test_failing_phrase_does_not_kill_worker() -> None:
    learnt = []

    def store_phrase(chain_id: int, phrase: str) -> None:
        if phrase == "boom":
            raise RuntimeError("boom")
        learnt.append((chain_id, phrase))

    with learner.Learner(store_phrase, name="failing-learn") as pool:
        pool.learn(1, "boom")
        pool.learn(2, "fine")
        pool.wait()
        assert pool.worker_count == 1

    assert learnt == [(2, "fine")]


def test_stop_flushes_pending_phrases() -> None:
    learnt = []
    pool = learner.Learner(lambda c, p: learnt.append(p), workers=3, name="flush")
    pool.start()
    for i in range(50):
        pool.learn(1, str(i))
    pool.stop()
    assert sorted(learnt, key=int) == [str(i) for i in range(50)]
    assert pool.worker_count == 0
