"""examples/basic_usage.py - lambdalog in a simulated Lambda handler.

Demonstrates:
    Scenario A - a healthy invocation: only info and above reach stdout.
    Scenario B - a failing invocation: the error is printed together with the
                 first and last events of the invocation, including the debug
                 lines that were never printed on their own.

Run:
    python examples/basic_usage.py
"""

from types import SimpleNamespace

from lambdalog import create_logger, invocation

# Module level, as in a real handler file: created during the cold start,
# before any invocation id exists.
log = create_logger("payments", level="info")
db_log = log.child({"name": "payments.db", "table": "balances"})


def get_balance(user_id: int) -> int:
    db_log.debug("querying balance for user_id=%d", user_id)
    return 3_000


@invocation()
def handler(event, context):
    log.add_log_property("user", log.mask(event["card"]))
    try:
        log.info("payment attempt: amount=%d", event["amount"])
        for step in range(12):
            log.debug("validation step %d", step)

        balance = get_balance(event["user_id"])
        if balance < event["amount"]:
            log.error("insufficient funds (balance=%d, requested=%d)", balance, event["amount"])
            return {"status": 402}

        log.info("payment successful")
        return {"status": 200}
    finally:
        log.remove_log_property("user")


if __name__ == "__main__":
    print("=" * 60)
    print("Scenario A: healthy invocation")
    print("=" * 60)
    handler(
        {"user_id": 1, "amount": 100, "card": "4111111111111111"},
        SimpleNamespace(aws_request_id="req-a"),
    )

    print()
    print("=" * 60)
    print("Scenario B: failing invocation (history printed to stderr)")
    print("=" * 60)
    handler(
        {"user_id": 2, "amount": 5_000, "card": "5500000000000004"},
        SimpleNamespace(aws_request_id="req-b"),
    )
