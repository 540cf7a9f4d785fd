"""
Replay a recorded page trace through the metric engine.

Reads a JSON trace (see vitals/monitor_service/replay.py for the format),
drives a simulated page session through it and prints every reported
metric plus the final metrics record as JSON.

Usage:
    python -m scripts.replay_trace scripts/traces/sample_session.json
    python -m scripts.replay_trace trace.json --debug --json-logs
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from pydantic import ValidationError

from configs.settings import get_settings
from utils.logger import setup_logging, get_logger
from vitals.monitor_service.replay import Trace, replay_trace

_log = get_logger(__name__)


def run(path: Path, debug: bool = False) -> dict:
    raw = json.loads(path.read_text(encoding="utf-8"))
    trace = Trace.model_validate(raw)
    _log.info("trace_loaded", path=str(path), steps=len(trace.steps))
    return replay_trace(trace, debug=debug).as_dict()


def main() -> int:
    parser = argparse.ArgumentParser(description="Replay a page trace and print Web Vitals")
    parser.add_argument("trace", type=Path, help="Path to a JSON trace file")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log unsupported-capability and missing-data diagnostics as warnings",
    )
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON")
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    args = parser.parse_args()

    cfg = get_settings()
    setup_logging(level=args.log_level or cfg.log_level, json_output=args.json_logs or cfg.log_json)

    try:
        result = run(args.trace, debug=args.debug or cfg.debug)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        _log.error("trace_invalid", path=str(args.trace), error=str(e))
        return 1

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
