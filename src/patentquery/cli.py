"""CLI entrypoint for patentquery."""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, List, Optional

from patentquery.config.loader import load_config
from patentquery.output.export import export_rows
from patentquery.retrieval.client import QueryClient
from patentquery.retrieval.errors import QueryError
from patentquery.retrieval.models import ENDPOINTS, QuerySpec
from patentquery.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def _parse_json_arg(value: str, label: str) -> Any:
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise ValueError(f"--{label} is not valid JSON: {e}") from e


def _parse_fields(value: str) -> List[str]:
    fields = [field.strip() for field in value.split(",") if field.strip()]
    if not fields:
        raise ValueError("--fields must name at least one field")
    return fields


def cmd_query(args: argparse.Namespace) -> int:
    """Run one query and print flattened rows."""
    config = args.loaded_config
    overrides = {}
    if args.endpoint:
        overrides["endpoint"] = args.endpoint
    if args.timeout is not None:
        overrides["timeout"] = args.timeout

    try:
        filter_ = _parse_json_arg(args.filter, "filter")
        if not isinstance(filter_, dict):
            raise ValueError("--filter must be a JSON object")
        spec = QuerySpec(
            filter=filter_,
            fields=_parse_fields(args.fields),
            sort=_parse_json_arg(args.sort, "sort") if args.sort else None,
        )
        client = QueryClient.from_config(config, **overrides)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    per_page = args.per_page or config["defaults"]["per_page"]
    try:
        result = client.query(spec.with_options(per_page=per_page))
    except QueryError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.raw:
        print(json.dumps(result.as_response(), indent=2, sort_keys=True))
        return 0

    if not result.is_complete:
        logger.warning(f"Showing {result.count} of {result.total_count} matches; use --per-page to fetch more")
    rows = client.flatten(result)
    print(export_rows(rows, format=args.format, out=args.out, result=result))
    return 0


def cmd_endpoints(args: argparse.Namespace) -> int:
    """List registered endpoints."""
    print(f"{'Name':<22} {'Records key':<22} {'Total key':<32}")
    print("-" * 76)
    for endpoint in ENDPOINTS.values():
        print(f"{endpoint.name:<22} {endpoint.records_key:<22} {endpoint.total_key:<32}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Query the PatentsView API and flatten the results")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to YAML config (default: patentquery.config.yaml if present)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    query_parser = subparsers.add_parser("query", help="Run a single query")
    query_parser.add_argument(
        "--filter",
        type=str,
        required=True,
        help='Filter predicate as JSON, e.g. \'{"assignee_organization":"university of maryland"}\'',
    )
    query_parser.add_argument(
        "--fields",
        type=str,
        required=True,
        help="Comma-separated field names to return",
    )
    query_parser.add_argument(
        "--per-page",
        type=int,
        default=None,
        help="Records per page (default: from config)",
    )
    query_parser.add_argument(
        "--sort",
        type=str,
        default=None,
        help='Sort as JSON, e.g. \'[{"patent_date":"desc"}]\'',
    )
    query_parser.add_argument(
        "--endpoint",
        type=str,
        choices=sorted(ENDPOINTS),
        default=None,
        help="Endpoint to query (default: from config)",
    )
    query_parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Request timeout in seconds (default: from config)",
    )
    query_parser.add_argument(
        "--format",
        type=str,
        choices=["json", "csv"],
        default="json",
        help="Output format for flattened rows (default: json)",
    )
    query_parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Write output to this file instead of stdout",
    )
    query_parser.add_argument(
        "--raw",
        action="store_true",
        help="Print the parsed response instead of flattened rows",
    )
    query_parser.set_defaults(func=cmd_query)

    endpoints_parser = subparsers.add_parser("endpoints", help="List queryable endpoints")
    endpoints_parser.set_defaults(func=cmd_endpoints)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        args.loaded_config = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    configure_logging(args.loaded_config.get("logging"))

    try:
        return args.func(args)
    except Exception as e:
        logger.error(f"Error running command '{args.command}': {e}", exc_info=True)
        raise


if __name__ == "__main__":
    sys.exit(main())
