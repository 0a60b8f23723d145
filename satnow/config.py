import os

from satnow import __version__

VERSION = __version__

DEFAULT_DB_PATH = os.getenv("SATNOW_DB", "./.satnow.sql3")
# converted by argparse, so a bad value is a usage error
DEFAULT_REFRESH_MS = os.getenv("SATNOW_REFRESH_MS", "-1")
FETCH_TIMEOUT = float(os.getenv("SATNOW_FETCH_TIMEOUT", "20"))
USER_AGENT = os.getenv("SATNOW_USER_AGENT", f"satnow/{VERSION}")

# TLE layout
DATA_LINE_LENGTH = 69
NAME_LENGTH = 22  # celestrak says 24, sgp4 stores 22
NAME_LINE_THRESHOLD = 24
DATA_LINE_MARKER = "1 "
URL_SCHEME_SEPARATOR = "://"

# Interactive view
QUIT_KEYS = ("q", "Q")
DETAIL_KEYS = ("d", "D", "enter")
UPDATE_KEYS = (" ",)
LEGEND = "[Quit: (q)] [Update: (space)] [Movement: (pg)up/(pg)down] [Details: (d)]"

palette = [
    ("border", "dark green", ""),
    ("title", "white", ""),
    ("header", "light cyan", ""),
    ("row", "light gray", ""),
    ("cursor", "white", "dark green"),
    ("unavailable", "dark red", ""),
    ("status", "yellow", ""),
    ("legend", "dark gray", ""),
    ("detail", "white", "dark blue"),
]
