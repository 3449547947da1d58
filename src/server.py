"""Protean Engine runner for the FreshCart backend.

Runs the asynchronous side of the backend in production, where commands and
events are processed through Redis instead of inline:
- Ordering publishes OrderPlaced / OrderStatusChanged to its stream
- Notifications subscribes to the ordering and identity streams and turns
  those events into pending notification rows

Usage:
    python src/server.py                        # Run both domain engines
    python src/server.py --domain notifications # Run only the notifications engine
"""

import argparse
import asyncio

from protean.server.engine import Engine

from shared.logging import configure_logging

DOMAIN_NAMES = ["ordering", "notifications"]


def _get_domain(name):
    """Import and initialize a domain by name."""
    if name == "ordering":
        from ordering.domain import ordering

        ordering.init()
        return ordering
    elif name == "notifications":
        from notifications.domain import notifications

        notifications.init()
        return notifications
    else:
        raise ValueError(f"Unknown domain: {name}")


async def run(domain_names):
    engines = [Engine(_get_domain(name)) for name in domain_names]
    await asyncio.gather(*(engine.run() for engine in engines))


def main():
    parser = argparse.ArgumentParser(description="FreshCart Engine runner")
    parser.add_argument(
        "--domain",
        choices=DOMAIN_NAMES,
        help="Run a single domain engine (default: run all)",
    )
    args = parser.parse_args()

    configure_logging()
    domain_names = [args.domain] if args.domain else DOMAIN_NAMES

    asyncio.run(run(domain_names))


if __name__ == "__main__":
    main()
