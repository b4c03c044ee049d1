import logging
import time

from dotenv import load_dotenv

import xraytrace

# ---- xraytrace Setup ----
load_dotenv()  # load from .env
# Arguments override XRAYTRACE_* / AWS_XRAY_DAEMON_ADDRESS from the environment
xraytrace.initialize(
    service_name="checkout-service",
    daemon_address="127.0.0.1:2000",
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@xraytrace.observe()
def charge_card(amount):
    time.sleep(0.1)
    xraytrace.update_current_span(annotations={"gateway": "stripe"})
    return {"charged": amount}


@xraytrace.observe()
def reserve_stock(items):
    time.sleep(0.05)
    return len(items)


@xraytrace.observe(name="checkout", root=True, annotations={"tier": "gold"})
def checkout(items, amount):
    logger.info("Checkout trace %s", xraytrace.get_current_trace_id())
    reserve_stock(items)
    return charge_card(amount)


def handle_request(headers):
    # Continue the trace of an upstream caller when it sent X-Amzn-Trace-Id
    with xraytrace.start_segment("handle_request", headers=headers):
        reserve_stock(["book"])


if __name__ == "__main__":
    logger.info("Sending a checkout trace every 10 seconds to the X-Ray daemon")
    logger.info("Press Ctrl+C to stop the loop")

    try:
        while True:
            checkout(["book", "pen"], 42.0)
            handle_request({"X-Amzn-Trace-Id": "Root=1-5ca8f82a-000102030405060708090a0b"})
            xraytrace.flush()
            time.sleep(10)
    except KeyboardInterrupt:
        logger.info("Loop stopped by user")
        print("\nLoop stopped.")
