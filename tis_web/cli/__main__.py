from __future__ import annotations

import json
import sys
from typing import List, Optional

from tis_web.cli.args import build_parser
from tis_web.cli.controller import ScanController, render_result
from tis_web.client.api_client import ApiClient, file_payload_from_path, text_payload, url_payload
from tis_web.client.scan_session import CooldownActiveError, ScanBusyError, ScanSession
from tis_web.config.ini_config import IniConfig
from tis_web.domain.errors import AnalysisError
from tis_web.repositories.history_repository import HistoryRepository


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = IniConfig.from_env_or_default().load_settings()
    history = HistoryRepository(path=settings.history_path, max_entries=settings.history_max_entries)

    if args.command == "history":
        if args.clear:
            history.clear()
            print("History cleared.")
            return 0
        if args.show:
            result = history.get(args.show)
            if result is None:
                print(f"No stored result for {args.show!r}.", file=sys.stderr)
                return 1
            print(render_result(result))
            return 0
        for r in history.list():
            print(f"{r.company_name:<30} {r.verdict.value:<13} {r.risk_score:>3}/100")
        return 0

    if args.url:
        payload = url_payload(args.url)
    elif args.file:
        if not args.file.is_file():
            print(f"File not found: {args.file}", file=sys.stderr)
            return 2
        payload = file_payload_from_path(args.file)
    else:
        payload = text_payload(sys.stdin.read() if args.text == "-" else args.text)

    controller = ScanController(
        api=ApiClient(args.api_url or settings.client_api_url, timeout_seconds=settings.request_timeout_seconds + 30),
        session=ScanSession(cooldown_seconds=settings.cooldown_seconds),
        history=history,
    )

    try:
        result = controller.scan(payload)
    except (ScanBusyError, CooldownActiveError) as e:
        print(str(e), file=sys.stderr)
        return 3
    except AnalysisError as e:
        print(e.public_message(), file=sys.stderr)
        return 1

    print(json.dumps(result.to_dict(), indent=2) if args.json else render_result(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
