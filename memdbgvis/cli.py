"""Command line front-end: listen for triggers, print metrics, fire a test trigger, inspect a frame."""

import argparse
import os
import sys

from .core.bridge import decode_payload, hex_dump
from .core.launch import derive_handshake_path
from .core.metrics import get_runtime_metrics
from .core.protocol import AGENT_DELIMITER, AGENT_MARKER, DEFAULT_SIGNAL_PORT, ENV_AGENT_OPTIONS, ENV_SIGNAL, ENV_SIGNAL_PORT
from .core.signals import signal_port_from_env
from .core.trigger import visualize
from .inspector.listener import SignalListener


def _agent_argument(agent_path: str) -> str:
    return f"{AGENT_MARKER}{AGENT_DELIMITER}{agent_path}"


def cmd_listen(args) -> int:
    handshake_path = derive_handshake_path(_agent_argument(args.agent))
    if handshake_path is None:
        print(f"[Listen] Invalid agent path: {args.agent!r}", file=sys.stderr)
        return 2

    try:
        listener = SignalListener(handshake_path, channel=args.signal, port=args.port)
    except (OSError, ValueError) as e:
        print(f"[Listen] Cannot bind signal channel: {e}", file=sys.stderr)
        return 1

    print(f"[Listen] Waiting for triggers on {listener.address} (handshake: {handshake_path}). Press Ctrl+C to exit.")
    received = 0
    try:
        with listener:
            while args.count == 0 or received < args.count:
                notice = listener.wait(timeout=args.timeout)
                if notice is None:
                    print("[Listen] Timed out waiting for a trigger.")
                    return 1
                received += 1
                line = notice.call_site if notice.call_site is not None else "unknown"
                print(f"[Listen] {notice.received_at:%H:%M:%S} trigger at line {line}")
    except KeyboardInterrupt:
        print("\n[Listen] Stopped.")
    return 0


def cmd_metrics(args) -> int:
    print(get_runtime_metrics())
    return 0


def cmd_trigger(args) -> int:
    os.environ[ENV_AGENT_OPTIONS] = _agent_argument(args.agent)
    delivered = visualize(call_site=args.line)
    print(f"[Trigger] {'delivered' if delivered else 'no inspector listening'}")
    return 0


def cmd_dump(args) -> int:
    try:
        with open(args.frame, "rb") as f:
            data = f.read()
    except OSError as e:
        print(f"[Dump] Cannot read {args.frame!r}: {e}", file=sys.stderr)
        return 1

    try:
        payload = decode_payload(data)
    except ValueError as e:
        print(f"[Dump] Malformed frame: {e}", file=sys.stderr)
        print(hex_dump(data))
        return 1

    print(f"[Dump] status={payload.status.name} length={len(payload.body)}")
    if payload.ok:
        print(hex_dump(payload.body))
    else:
        print(payload.body.decode("ascii", errors="replace"))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="memdbgvis", description="memdbgvis trigger protocol tools")
    sub = parser.add_subparsers(dest="command", required=True)

    listen = sub.add_parser("listen", help="Wait for trigger cues and print their call sites")
    listen.add_argument("--agent", required=True, help="Path of the agent module (handshake file is derived from it)")
    listen.add_argument("--signal", choices=["unix", "udp"], default=None, help="Signal channel (default: platform default)")
    listen.add_argument("--port", type=int, default=None, help=f"UDP port (default: {DEFAULT_SIGNAL_PORT})")
    listen.add_argument("--count", type=int, default=0, help="Exit after N triggers (default: run until Ctrl+C)")
    listen.add_argument("--timeout", type=float, default=None, help="Give up after S seconds without a trigger")
    listen.set_defaults(func=cmd_listen)

    metrics = sub.add_parser("metrics", help="Print the runtime metrics snapshot of this process")
    metrics.set_defaults(func=cmd_metrics)

    trigger = sub.add_parser("trigger", help="Fire one trigger as if the agent were attached")
    trigger.add_argument("--agent", required=True, help="Path of the agent module")
    trigger.add_argument("--signal", choices=["unix", "udp", "none"], default=None, help="Signal channel")
    trigger.add_argument("--port", type=int, default=None, help="UDP port")
    trigger.add_argument("--line", type=int, default=None, help="Call site to report (default: this line)")
    trigger.set_defaults(func=cmd_trigger)

    dump = sub.add_parser("dump", help="Decode a serialized object frame and print its status and bytes")
    dump.add_argument("frame", help="File holding one frame as produced by object_to_bytes")
    dump.set_defaults(func=cmd_dump)
    return parser


def main_cli(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if getattr(args, "signal", None):
        os.environ[ENV_SIGNAL] = args.signal
    if getattr(args, "port", None) is not None:
        os.environ[ENV_SIGNAL_PORT] = str(args.port)
    elif hasattr(args, "port"):
        args.port = signal_port_from_env()

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main_cli())
