"""Protean Engine runner for the storefront domain.

With the production overlay, commands handed off with ``current_domain.process``
(lead-score activities) are stored and picked up here, and events are
dispatched to their handlers asynchronously.

Usage:
    PROTEAN_ENV=production python src/server.py
    PROTEAN_ENV=production python src/server.py --test-mode   # Drain pending work, then exit
"""

import argparse

from protean.server.engine import Engine


def _get_domain():
    from storefront.domain import storefront

    storefront.init()
    return storefront


def run(test_mode=False):
    engine = Engine(_get_domain(), test_mode=test_mode)
    engine.run()


def main():
    parser = argparse.ArgumentParser(description="Storefront Engine runner")
    parser.add_argument(
        "--test-mode",
        action="store_true",
        help="Process pending messages once and exit",
    )
    args = parser.parse_args()

    run(test_mode=args.test_mode)


if __name__ == "__main__":
    main()
