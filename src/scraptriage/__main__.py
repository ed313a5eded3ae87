from __future__ import annotations

import sys

from .cli import catalog as catalog_cli
from .cli import config as config_cli
from .cli import scan as scan_cli
from .cli import text as text_cli

USAGE = """\
usage: scraptriage [COMMAND] [ARGS...]

commands:
  scan IMAGE     triage an inventory screenshot
  text [FILE]    triage already-read text (stdin by default)
  catalog        list known items
  config         show or change settings
  tui            open the interactive app (default)
"""


def _run_tui() -> int:
    from .tui.app import run_tui

    return run_tui()


def main(argv=None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        return _run_tui()

    cmd, *rest = args
    cmd = cmd.lower().strip()

    if cmd == "scan":
        return scan_cli.main(rest)
    if cmd == "text":
        return text_cli.main(rest)
    if cmd in {"catalog", "items"}:
        return catalog_cli.main(rest)
    if cmd in {"config", "settings"}:
        return config_cli.main(rest)
    if cmd == "tui":
        return _run_tui()
    if cmd in {"-h", "--help", "help"}:
        print(USAGE)
        return 0

    print(f"Unknown command: {cmd}\n", file=sys.stderr)
    print(USAGE, file=sys.stderr)
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
