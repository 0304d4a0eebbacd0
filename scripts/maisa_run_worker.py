#!/usr/bin/env python3
"""Run a Maisa worker end to end from the command line.

Usage:
  MAISA_API_KEY='...' \\
  python3 scripts/maisa_run_worker.py --base-url https://worker.example.com/api/worker/abc \\
    --var prompt=hi --file ./input.pdf --out-dir ./out

Submits the run, polls until completion, downloads output files into --out-dir
and prints the final record as JSON.
"""

from __future__ import annotations

import argparse
import json
import logging
import mimetypes
import os
import sys
from pathlib import Path


REPO_ROOT = Path(__file__).resolve().parents[1]
# Allow `maisa_node` imports when the package is not installed.
sys.path.insert(0, str(REPO_ROOT / "backend"))

from maisa_node.services.host import BinaryAttachment, InMemoryHost, NodeInputItem  # noqa: E402
from maisa_node.services.node import MaisaWorkerNode  # noqa: E402
from maisa_node.core.config import get_settings  # noqa: E402


def _parse_var(raw: str) -> dict[str, str]:
    if "=" not in raw:
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got {raw!r}")
    name, value = raw.split("=", 1)
    return {"name": name.strip(), "value": value}


def _load_file(path: str) -> BinaryAttachment:
    p = Path(path)
    mime_type, _ = mimetypes.guess_type(p.name)
    return BinaryAttachment(data=p.read_bytes(), file_name=p.name, mime_type=mime_type)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--base-url", default=os.getenv("MAISA_BASE_URL"), help="Worker URL (with or without /run)")
    parser.add_argument("--api-key", default=os.getenv("MAISA_API_KEY"), help="Value for the ms-api-key header")
    parser.add_argument("--variant", choices=("legacy", "runs"), default=None)
    parser.add_argument("--var", action="append", type=_parse_var, default=[], help="Input variable NAME=VALUE")
    parser.add_argument("--file", action="append", default=[], help="File to upload (repeatable)")
    parser.add_argument("--interval", type=float, default=None, help="Polling interval in seconds")
    parser.add_argument("--timeout", type=float, default=None, help="Overall timeout in seconds")
    parser.add_argument("--no-download", action="store_true", help="Skip downloading output files")
    parser.add_argument("--out-dir", default="maisa_output", help="Where downloaded files are written")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    if not args.base_url or not args.api_key:
        parser.error("--base-url and --api-key (or MAISA_BASE_URL / MAISA_API_KEY) are required")

    binary = {f"file{index}": _load_file(path) for index, path in enumerate(args.file)}
    params = {
        "operation": "runWorker",
        "baseUrl": args.base_url,
        "inputVariables": args.var,
        "files": ",".join(binary),
        "autoDownloadFiles": not args.no_download,
    }
    if args.variant:
        params["apiVariant"] = args.variant
    if args.interval is not None:
        params["pollingInterval"] = args.interval
    if args.timeout is not None:
        params["timeout"] = args.timeout

    host = InMemoryHost(items=[NodeInputItem(binary=binary)], params=params, api_key=args.api_key)
    MaisaWorkerNode(get_settings()).execute(host)

    out_dir = Path(args.out_dir)
    for item in host.outputs[0]:
        for slot, attachment in (item.binary or {}).items():
            out_dir.mkdir(parents=True, exist_ok=True)
            target = out_dir / f"{slot}_{Path(attachment.file_name or 'file').name}"
            target.write_bytes(attachment.data)
            print(f"wrote {target}", file=sys.stderr)
        print(json.dumps(item.json, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
