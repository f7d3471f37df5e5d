"""examples/multithreaded_usage.py - Per-thread decision log isolation demo.

Each worker thread reviews one claim inside ``wrap()``. The ambient log lives
in a ContextVar, so the two concurrent reviews never see each other's
entries, and a failing review releases its log before the error propagates.

Run:
    python examples/multithreaded_usage.py
"""

import sys
import threading
import time

from decisionlog import context as dlog, decision_log


# ---------------------------------------------------------------------------
# Business logic
# ---------------------------------------------------------------------------

POLICY_LIMITS = {"P-1": 5_000, "P-2": 0}


@decision_log
def coverage(policy_id: str) -> int:
    """Look up the remaining coverage for a policy."""
    time.sleep(0.01)  # simulate DB latency
    return dlog.trace(POLICY_LIMITS.get(policy_id, 0), "remaining")


@decision_log
def review_claim(claim_id: int, policy_id: str, amount: int) -> str:
    dlog.log_all([("claim_id", claim_id), ("policy_id", policy_id), ("amount", amount)])
    remaining = coverage(policy_id)
    if remaining == 0:
        raise RuntimeError(f"NoCoverage: policy_id={policy_id}")
    return dlog.trace("approved" if amount <= remaining else "partial", "outcome")


# ---------------------------------------------------------------------------
# Simulate two concurrent requests in separate threads
# ---------------------------------------------------------------------------


def worker(claim_id: int, policy_id: str, amount: int) -> None:
    name = threading.current_thread().name
    try:
        outcome, lines = dlog.wrap(
            "request", lambda: review_claim(claim_id, policy_id, amount)
        )
    except RuntimeError as exc:
        print(f"[{name}] ERROR: {exc} (active log left behind: {dlog.is_active()})")
        return
    print(f"[{name}] {outcome}:", file=sys.stdout)
    for line in lines:
        print(f"[{name}]   {line}", file=sys.stdout)


if __name__ == "__main__":
    t_a = threading.Thread(target=worker, args=(1001, "P-1", 3_000), name="Thread-A")
    t_b = threading.Thread(target=worker, args=(1002, "P-2", 800), name="Thread-B")

    t_a.start()
    t_b.start()
    t_a.join()
    t_b.join()
