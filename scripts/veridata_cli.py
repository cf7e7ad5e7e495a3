#!/usr/bin/env python3
# scripts/veridata_cli.py

import argparse
import json
import logging
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from veridata.audit.events import EventType
from veridata.core.config import load_config
from veridata.core.service import VeriDataService
from veridata.errors import RegistryError
from veridata.hashing import compute_sha256_from_file

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("veridata_cli")

DEFAULT_AUDIT_LOG = "reports/audit_log.json"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="VeriData data-source registry",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Start a fresh registry state file
  veridata --state state.json init

  # Register a verifier, submit a dataset, verify it
  veridata --state state.json --as admin add-verifier alice
  veridata --state state.json --as bob add --name sensor-log --file data.csv
  veridata --state state.json --as alice verify <hash>
  veridata --state state.json balance bob
        """,
    )
    parser.add_argument(
        "--config",
        default="config/config.yaml",
        help="Configuration file path (default: config/config.yaml)",
    )
    parser.add_argument(
        "--state",
        default="veridata_state.json",
        help="Registry state file (default: veridata_state.json)",
    )
    parser.add_argument(
        "--as", dest="caller", default=None, help="Calling account identity"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init", help="Create an empty state file")

    add = sub.add_parser("add", help="Submit a data source")
    add.add_argument("--name", default="", help="Display name")
    group = add.add_mutually_exclusive_group(required=True)
    group.add_argument("--hash", dest="content_hash", help="Content hash")
    group.add_argument("--file", help="Dataset file to hash with SHA-256")

    verify = sub.add_parser("verify", help="Verify a data source")
    verify.add_argument("content_hash")

    get = sub.add_parser("get", help="Show a data source record")
    get.add_argument("content_hash")

    sub.add_parser("list", help="List content hashes in submission order")

    access = sub.add_parser("access", help="Log access to a data source")
    access.add_argument("content_hash")

    add_verifier = sub.add_parser("add-verifier", help="Authorize a verifier")
    add_verifier.add_argument("account")

    feedback = sub.add_parser("feedback", help="Rate a data source 1-5")
    feedback.add_argument("content_hash")
    feedback.add_argument("rating", type=int)

    balance = sub.add_parser("balance", help="Show an account's token balance")
    balance.add_argument("account")

    mint = sub.add_parser("mint", help="Mint tokens (admin only)")
    mint.add_argument("account")
    mint.add_argument("amount", type=int)

    events = sub.add_parser("events", help="Show or export the event stream")
    events.add_argument(
        "--kind", choices=[k.value for k in EventType], help="Filter by event kind"
    )
    events.add_argument("--subject", help="Filter by content hash or account")
    events.add_argument(
        "--export",
        nargs="?",
        const=True,
        help="Write a JSON audit log (default path: audit.export_path from config)",
    )

    return parser


def require_caller(args) -> str:
    if not args.caller:
        logger.error(f"Command '{args.command}' needs a calling account (--as)")
        sys.exit(2)
    return args.caller


def run_command(service: VeriDataService, args) -> bool:
    """Execute one subcommand. Returns True if state changed."""
    if args.command == "add":
        caller = require_caller(args)
        content_hash = args.content_hash
        if args.file:
            content_hash = compute_sha256_from_file(args.file)
        record = service.add(caller, args.name, content_hash)
        print(record.content_hash)
        return True

    if args.command == "verify":
        reward = service.verify(require_caller(args), args.content_hash)
        print(f"Verified {args.content_hash}; reward {reward}")
        return True

    if args.command == "get":
        print(service.get(args.content_hash).model_dump_json(indent=2))
        return False

    if args.command == "list":
        for content_hash in service.list_all_hashes():
            print(content_hash)
        return False

    if args.command == "access":
        service.record_access(require_caller(args), args.content_hash)
        return True

    if args.command == "add-verifier":
        service.add_verifier(require_caller(args), args.account)
        print(f"Verifier added: {args.account}")
        return True

    if args.command == "feedback":
        record = service.submit_feedback(
            require_caller(args), args.content_hash, args.rating
        )
        print(
            f"Average rating {record.average_rating} over {record.rating_count} ratings"
        )
        return True

    if args.command == "balance":
        print(service.balance_of(args.account))
        return False

    if args.command == "mint":
        service.mint(require_caller(args), args.account, args.amount)
        return True

    if args.command == "events":
        kind = EventType(args.kind) if args.kind else None
        if args.export:
            target = args.export
            if target is True:
                target = service.config.audit.export_path or DEFAULT_AUDIT_LOG
            path = service.event_log.export_json(target)
            print(path)
        else:
            for event in service.event_log.events(kind=kind, subject=args.subject):
                print(json.dumps(event.model_dump(mode="json")))
        return False

    raise ValueError(f"Unknown command: {args.command}")


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    # Load configuration
    try:
        config = load_config(args.config)
    except Exception as e:
        logger.error(f"Failed to load configuration: {e}")
        sys.exit(1)

    state_path = Path(args.state)
    if args.command == "init":
        if state_path.exists():
            logger.error(f"State file already exists: {state_path}")
            sys.exit(1)
        service = VeriDataService.from_config(config)
        service.save_state(state_path)
        logger.info(f"Initialized registry state at {state_path}")
        return

    if not state_path.exists():
        logger.error(f"State file not found: {state_path} (run 'init' first)")
        sys.exit(1)

    service = VeriDataService.load_state(config, state_path)

    try:
        changed = run_command(service, args)
    except RegistryError as e:
        logger.error(f"{type(e).__name__}: {e}")
        sys.exit(1)
    except (OSError, ValueError) as e:
        logger.error(f"Command '{args.command}' failed: {e}")
        sys.exit(1)

    if changed:
        service.save_state(state_path)


if __name__ == "__main__":
    main()
