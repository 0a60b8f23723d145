from rich.console import Console


class Display:
    """Something that can present a tracked set."""

    def render(self, tracked):
        raise NotImplementedError


def format_entry(count, total, entry):
    return f"[+] [{count}/{total}] ({entry.record.display_name}): LookAngle: {entry.look_angle}"


class ConsoleDisplay(Display):
    def __init__(self, console=None):
        self.console = console or Console(highlight=False)

    def render(self, tracked):
        total = len(tracked)
        for count, entry in enumerate(tracked, start=1):
            self.console.print(format_entry(count, total, entry), markup=False, highlight=False, emoji=False, soft_wrap=True)
