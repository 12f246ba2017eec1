"""
Wipe the fleet store back to empty tables.

Vehicles, customers and reservations (including maintenance blocks and
spare replacements) are all removed, and the empty store is written to the
configured pickle file. The file is picked from FLEET_DATA_PATH, falling
back to the default data path in fleet.config.

    $ python reset_data.py
    $ python seeds.py        # optional: load the demo fleet again
"""
import logging
import os

from fleet.config import Config
from fleet.models.store import Store

logger = logging.getLogger("reset_data")


def reset(store: Store) -> None:
    """Clear every table and persist the empty store."""
    store.clear()
    store.save()


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    reset(Store.instance(os.getenv("FLEET_DATA_PATH", Config.DATA_PATH)))
    logger.info("data.pkl has been cleared. Run `python seeds.py` to regenerate demo data.")


if __name__ == "__main__":
    main()
