"""examples/basic_usage.py - decisionlog integration demo.

Demonstrates the same loan pre-check written three ways:
    Scenario A: ambient API (state in a ContextVar)
    Scenario B: explicit API (state threaded as a value)
    Scenario C: @decision_log decorator over the ambient API

All three print identical decision logs, then the log is compressed the way
it would be before storing it.

Run:
    python examples/basic_usage.py
"""

import logging

from decisionlog import (
    DecisionLogHandler,
    compress,
    context as dlog,
    decision_log,
    decompress_result,
    explicit,
)

# ---------------------------------------------------------------------------
# Standard logger setup; the handler copies audit messages into the log
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
audit = logging.getLogger("loans.audit")
audit.addHandler(DecisionLogHandler(level=logging.WARNING, label="audit"))


APPLICATION = {"applicant": "A-1042", "income": 52_000, "requested": 180_000}


# ===========================================================================
# Scenario A: ambient
# ===========================================================================


def precheck_ambient(app: dict) -> bool:
    dlog.log("applicant", app["applicant"])
    ratio = dlog.trace(app["requested"] / app["income"], "loan_to_income", lambda v: f"{v:.2f}x")

    dlog.tag("decision")
    approved = ratio <= 4.0
    if not approved:
        audit.warning("loan-to-income above policy limit")
    dlog.log("approved", approved)
    return approved


# ===========================================================================
# Scenario B: explicit
# ===========================================================================


def precheck_explicit(app: dict):
    ctx = explicit.new("eligibility")
    ctx = explicit.log(ctx, "applicant", app["applicant"])
    ratio, ctx = explicit.trace(
        ctx, app["requested"] / app["income"], "loan_to_income", lambda v: f"{v:.2f}x"
    )

    ctx = explicit.tag(ctx, "decision")
    approved = ratio <= 4.0
    if not approved:
        ctx = explicit.log(ctx, "audit", "loan-to-income above policy limit")
    ctx = explicit.log(ctx, "approved", approved)
    return approved, ctx


# ===========================================================================
# Scenario C: decorator
# ===========================================================================


@decision_log("eligibility")
def eligibility(app: dict) -> float:
    dlog.log("applicant", app["applicant"])
    return dlog.trace(app["requested"] / app["income"], "loan_to_income", lambda v: f"{v:.2f}x")


@decision_log("decision")
def decide(ratio: float) -> bool:
    approved = ratio <= 4.0
    if not approved:
        audit.warning("loan-to-income above policy limit")
    dlog.log("approved", approved)
    return approved


# ---------------------------------------------------------------------------
# Run all scenarios
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    print("=" * 60)
    print("Scenario A: ambient")
    print("=" * 60)
    approved, lines_a = dlog.wrap("eligibility", lambda: precheck_ambient(APPLICATION))
    print("\n".join(lines_a))

    print()
    print("=" * 60)
    print("Scenario B: explicit")
    print("=" * 60)
    approved, ctx = precheck_explicit(APPLICATION)
    lines_b = explicit.close(ctx)
    print("\n".join(lines_b))

    print()
    print("=" * 60)
    print("Scenario C: decorator")
    print("=" * 60)
    dlog.start()
    decide(eligibility(APPLICATION))
    lines_c = dlog.close()
    print("\n".join(lines_c))

    print()
    print(f"identical: {lines_a == lines_b == lines_c}")

    payload = compress(lines_c, min_size="auto")
    print(f"stored as {payload.kind!r}, {len(payload.data)} bytes")
    print(f"restored: {decompress_result(payload)}")
