"""
Live terminal view of the tracked set, built on urwid.

States
------
  INIT -> STEADY -> (STEADY <-> DETAIL) -> TERMINATED

  STEADY  ranked list with a cursor. A refresh (alarm or space) recomputes
          and re-sorts the model, then puts the cursor back on the same
          satellite by catalog number (first row if it is gone).
  DETAIL  overlay with one satellite's fields, snapshotted when opened.
          Alarms keep firing but do not recompute.
  q       leaves from either state.

The terminal is owned by urwid.MainLoop.run(), which restores it on every
exit path, exceptions included. Rows are swapped in place inside a single
list walker on each rebuild; the surface itself is never recreated.
"""

import enum
import logging

import urwid

from satnow import config
from satnow.display import Display
from satnow.errors import PropagationError
from satnow.log import muted_console
from satnow.propagation import ground_distance_km

logger = logging.getLogger(__name__)

COLUMNS = (("ID", 10), ("NAME", 25), ("AZIMUTH", 12), ("ELEVATION", 12), ("RANGE (KM)", 12))
MARK = "->"
# border (2) + title and column header (2) + divider, status and legend (3)
CHROME_ROWS = 7


class State(enum.Enum):
    INIT = "init"
    STEADY = "steady"
    DETAIL = "detail"
    TERMINATED = "terminated"


def column_header():
    return " " * len(MARK) + "".join(label.ljust(width) for label, width in COLUMNS)


def format_row(entry, selected):
    la = entry.look_angle
    if la.available:
        az, el, rng = f"{la.azimuth:.3f}", f"{la.elevation:.3f}", f"{la.range_km:.3f}"
    else:
        az, el, rng = "-", "-", "unavailable"
    cells = (str(entry.catalog_id), entry.record.display_name, az, el, rng)
    text = "".join(cell.ljust(width) for cell, (_, width) in zip(cells, COLUMNS))
    return (MARK if selected else " " * len(MARK)) + text


def _field(fn):
    try:
        return fn()
    except (ValueError, IndexError):
        return "?"


def detail_fields(entry, tracked):
    rec = entry.record
    fields = [
        ("NORAD", str(rec.catalog_id)),
        ("Designator", _field(lambda: rec.international_designator)),
        ("Epoch", _field(lambda: rec.epoch.strftime("%Y-%m-%d %H:%M:%S UTC"))),
        ("BSTAR(drag term)", _field(lambda: f"{rec.bstar:.6g}")),
        ("Inclination(degs)", _field(lambda: f"{rec.inclination:.4f}")),
        ("RightAscension(degs)", _field(lambda: f"{rec.raan:.4f}")),
        ("Eccentricity", _field(lambda: f"{rec.eccentricity:.7f}")),
        ("ArgOfPerigee(degs)", _field(lambda: f"{rec.arg_perigee:.4f}")),
        ("MeanAnomaly(degs)", _field(lambda: f"{rec.mean_anomaly:.4f}")),
        ("MeanMotion(revs per day)", _field(lambda: f"{rec.mean_motion:.8f}")),
        ("RevolutionNumber", _field(lambda: str(rec.revolution_number))),
        ("Checksum", "ok" if rec.checksums_ok else "mismatch"),
        ("LookAngle", str(entry.look_angle)),
    ]

    try:
        point = tracked.propagator.ground_point(rec, tracked.timestamp)
    except PropagationError as e:
        logger.debug("no ground point for %s: %s", rec.display_name, e)
        fields += [(label, "unavailable") for label in ("SubPoint(lat, lon)", "Altitude(km)", "GC Distance(km)", "Speed(km/s)")]
    else:
        fields += [
            ("SubPoint(lat, lon)", f"{point.latitude:.3f}, {point.longitude:.3f}"),
            ("Altitude(km)", f"{point.altitude_km:.1f}"),
            ("GC Distance(km)", f"{ground_distance_km(tracked.observer, point):.1f}"),
            ("Speed(km/s)", f"{point.speed_km_s:.3f}"),
        ]
    return fields


class TrackerView:
    def __init__(self, tracked):
        self.tracked = tracked
        self.state = State.INIT
        self.cursor = 0
        self.detail = None

        self.status = urwid.Text("", wrap="clip")
        self.walker = urwid.SimpleFocusListWalker([])
        self.listbox = urwid.ListBox(self.walker)

        header = urwid.Pile([
            urwid.AttrMap(urwid.Text(f"}}-- satnow {config.VERSION} --{{", align="center"), "title"),
            urwid.AttrMap(urwid.Text(column_header(), wrap="clip"), "header"),
        ])
        footer = urwid.Pile([
            urwid.Divider("-"),
            urwid.AttrMap(self.status, "status"),
            urwid.AttrMap(urwid.Text(config.LEGEND, wrap="clip"), "legend"),
        ])
        self.frame = urwid.Frame(self.listbox, header=header, footer=footer)
        self.main = urwid.AttrMap(urwid.LineBox(self.frame), "border")
        self.top = urwid.WidgetPlaceholder(self.main)

    def start(self):
        self.state = State.STEADY
        self.cursor = 0
        self.rebuild()

    def selected(self):
        if not len(self.tracked):
            return None
        return self.tracked[self.cursor]

    def status_line(self):
        if not len(self.tracked):
            return "No satellites in the store"
        down = sum(1 for entry in self.tracked if not entry.look_angle.available)
        return (
            f"Updated {self.tracked.timestamp:%Y-%m-%d %H:%M:%S} UTC | "
            f"{len(self.tracked)} satellites | {down} unavailable"
        )

    def rebuild(self):
        rows = []
        for i, entry in enumerate(self.tracked):
            selected = i == self.cursor
            if selected:
                attr = "cursor"
            elif entry.look_angle.available:
                attr = "row"
            else:
                attr = "unavailable"
            rows.append(urwid.AttrMap(urwid.Text(format_row(entry, selected), wrap="clip"), attr))
        self.walker[:] = rows
        if rows:
            self.listbox.set_focus(self.cursor)
        self.status.set_text(self.status_line())

    def refresh(self):
        if self.state is not State.STEADY:
            return False
        current = self.selected()
        self.tracked.recompute()
        self.tracked.sort()

        index = self.tracked.index_of(current.catalog_id) if current else None
        self.cursor = index if index is not None else 0
        self.rebuild()
        return True

    def move_to(self, position):
        if not len(self.tracked):
            return
        self.cursor = max(0, min(len(self.tracked) - 1, position))
        self.rebuild()

    def show_detail(self):
        entry = self.selected()
        if entry is None:
            return
        self.detail = detail_fields(entry, self.tracked)
        rec = entry.record
        if rec.name:
            name = f"Name : {rec.name}"
        else:
            name = f"Name : {rec.catalog_id} (NORAD ID)"
        width = max(len(label) for label, _ in self.detail)
        body = [urwid.Text(name), urwid.Text(f"Line1: {rec.line1}"), urwid.Text(f"Line2: {rec.line2}"), urwid.Divider("-")]
        body += [urwid.Text(f"{label:>{width}}: {value}") for label, value in self.detail]

        box = urwid.AttrMap(urwid.LineBox(urwid.ListBox(urwid.SimpleListWalker(body)), title="Details"), "detail")
        self.top.original_widget = urwid.Overlay(
            box, self.main,
            align="center", width=("relative", 90),
            valign="middle", height=("relative", 80),
        )
        self.state = State.DETAIL

    def hide_detail(self):
        self.top.original_widget = self.main
        self.detail = None
        self.state = State.STEADY

    def quit(self):
        self.state = State.TERMINATED

    def handle_key(self, key, page=10):
        """Apply one key press. Returns False for keys that mean nothing here."""
        if key in config.QUIT_KEYS:
            self.quit()
            return True

        if self.state is State.DETAIL:
            if key in config.DETAIL_KEYS:
                self.hide_detail()
                return True
            return False

        if self.state is not State.STEADY:
            return False

        if key in config.UPDATE_KEYS:
            self.refresh()
        elif key == "up":
            self.move_to(self.cursor - 1)
        elif key == "down":
            self.move_to(self.cursor + 1)
        elif key == "page up":
            self.move_to(self.cursor - page)
        elif key == "page down":
            self.move_to(self.cursor + page)
        elif key == "home":
            self.move_to(0)
        elif key == "end":
            self.move_to(len(self.tracked) - 1)
        elif key in config.DETAIL_KEYS:
            self.show_detail()
        else:
            return False
        return True


class TrackerWidget(urwid.WidgetWrap):
    """Top-level widget; every key goes through the view's state machine."""

    def __init__(self, view):
        self.view = view
        super().__init__(view.top)

    def selectable(self):
        return True

    def keypress(self, size, key):
        page = max(1, size[1] - CHROME_ROWS) if len(size) > 1 else 1
        handled = self.view.handle_key(key, page)
        if self.view.state is State.TERMINATED:
            raise urwid.ExitMainLoop()
        return None if handled else key


def schedule_refresh(loop, view, refresh_ms):
    """Recompute every refresh_ms; a negative interval never schedules anything."""
    if refresh_ms < 0:
        return

    def tick(loop, data):
        if view.state is State.TERMINATED:
            return
        view.refresh()
        loop.set_alarm_in(refresh_ms / 1000.0, tick)

    loop.set_alarm_in(refresh_ms / 1000.0, tick)


class InteractiveDisplay(Display):
    def __init__(self, refresh_ms=-1, screen=None):
        self.refresh_ms = refresh_ms
        self.screen = screen

    def render(self, tracked):
        view = TrackerView(tracked)
        view.start()
        loop = urwid.MainLoop(TrackerWidget(view), palette=config.palette, screen=self.screen, handle_mouse=False)
        schedule_refresh(loop, view, self.refresh_ms)

        with muted_console():
            try:
                loop.run()
            except KeyboardInterrupt:
                pass
            finally:
                view.quit()
        return view
