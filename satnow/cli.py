"""
Command line entry point.

Order of work: parse flags, validate the observer and store path (no I/O
yet), open the store, optionally run an update from a source list, then
rank everything in the store and hand it to one presenter.
"""

import argparse
import logging

from satnow import config
from satnow.display import ConsoleDisplay
from satnow.errors import ConfigurationError, StoreError
from satnow.log import configure_logging
from satnow.model import build_tracked_set
from satnow.propagation import ObserverPosition, SkyfieldPropagator
from satnow.sources import fetch_url, update
from satnow.store import RecordStore
from satnow.tui import InteractiveDisplay

logger = logging.getLogger("satnow")

EPILOG = """\
sources:
  The --update file lists one TLE source per line: a local path or a URL.
  Text after '#' is a comment; blank lines are ignored.
"""


def build_parser():
    parser = argparse.ArgumentParser(
        prog="satnow",
        description="List tracked satellites by distance from an observer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EPILOG,
    )
    parser.add_argument("-x", "--lat", type=float, default=0.0, help="latitude in degrees")
    parser.add_argument("-y", "--lon", type=float, default=0.0, help="longitude in degrees")
    parser.add_argument("-a", "--alt", type=float, default=0.0, help="altitude in meters")
    parser.add_argument("-u", "--update", metavar="SOURCES", help="file listing TLE files/URLs to load into the store")
    parser.add_argument("-d", "--db", default=config.DEFAULT_DB_PATH, help=f"path to the record store (default: {config.DEFAULT_DB_PATH})")
    parser.add_argument("-v", "--verbose", action="store_true", help="output additional data (for debugging)")
    parser.add_argument("-g", "--gui", action="store_true", help="enable the interactive terminal view")
    parser.add_argument(
        "-r", "--refresh", type=int, default=config.DEFAULT_REFRESH_MS, metavar="MSEC",
        help="milliseconds between refreshes in the terminal view (negative waits for a key)",
    )
    parser.add_argument("--version", action="version", version=f"satnow v{config.VERSION}")
    return parser


def validate(args):
    observer = ObserverPosition(args.lat, args.lon, args.alt).validate()
    if not args.db:
        raise ConfigurationError("The store path must not be empty (see --help).")
    return observer


def main(argv=None, propagator=None, fetch=fetch_url):
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        observer = validate(args)
    except ConfigurationError as e:
        logger.error("[-] %s", e)
        return 1
    logger.info(
        "[+] Using viewer position (latitude: %s, longitude: %s, altitude: %s)",
        observer.latitude, observer.longitude, observer.altitude,
    )

    logger.info("[+] Using database: %s", args.db)
    try:
        store = RecordStore.open(args.db)
    except StoreError as e:
        logger.error("[-] %s", e)
        return 1

    with store:
        try:
            if args.update:
                update(args.update, store, fetch=fetch, verbose=args.verbose)
            records = store.fetch_all()
        except StoreError as e:
            logger.error("[-] %s", e)
            return 1

    tracked = build_tracked_set(observer, records, propagator or SkyfieldPropagator())
    if args.gui:
        display = InteractiveDisplay(args.refresh)
    else:
        display = ConsoleDisplay()
    display.render(tracked)
    return 0
