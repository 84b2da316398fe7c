from __future__ import annotations

import argparse
from pathlib import Path


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="python -m tis_web.cli",
        description="Scan terms of service through a running TermsInShort server.",
    )
    p.add_argument("--api-url", default="", help="Server base URL (defaults to [client] api_url in the INI).")
    sub = p.add_subparsers(dest="command", required=True)

    scan = sub.add_parser("scan", help="Analyze one document.")
    src = scan.add_mutually_exclusive_group(required=True)
    src.add_argument("--url", help="Website whose terms should be analyzed.")
    src.add_argument("--file", type=Path, help="Document to upload (PDF, image, ...).")
    src.add_argument("--text", help="Terms text; use '-' to read from stdin.")
    scan.add_argument("--json", action="store_true", help="Print the raw result JSON.")

    hist = sub.add_parser("history", help="Show or clear recent results.")
    hist.add_argument("--clear", action="store_true", help="Forget all stored results.")
    hist.add_argument("--show", metavar="COMPANY", help="Print the stored result for one company.")

    return p
