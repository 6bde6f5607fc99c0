"""
Export Applications

Fetches every application through the admin endpoints and writes the
spreadsheet export as CSV.

Usage:
    cd apps/api
    ADMIN_TOKEN=... python scripts/export_applications.py \
        --endpoint https://api.example.com/api/v1 \
        --endpoint https://api.example.com/server \
        --output applications.csv [--track baby]
"""

import argparse
import asyncio
import os
import sys
from pathlib import Path

# Add the src directory to the path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from recruit.client.admin import AdminGatewayClient
from recruit.client.fallback import EndpointError


async def export_applications(
    endpoints: list[str],
    admin_token: str,
    output: Path,
    track: str | None = None,
) -> int:
    """Write the export and return the number of applications."""
    client = AdminGatewayClient(endpoints, admin_token)
    applications = await client.list_applications(track)
    client.write_csv(output)
    return len(applications)


def main() -> int:
    parser = argparse.ArgumentParser(description="Export recruitment applications to CSV")
    parser.add_argument(
        "--endpoint",
        action="append",
        required=True,
        help="API base URL; repeat to add fallbacks in order",
    )
    parser.add_argument("--output", type=Path, default=Path("applications.csv"))
    parser.add_argument("--track", choices=["baby", "staff"], default=None)
    args = parser.parse_args()

    admin_token = os.environ.get("ADMIN_TOKEN")
    if not admin_token:
        print("ADMIN_TOKEN environment variable is required", file=sys.stderr)
        return 2

    try:
        count = asyncio.run(
            export_applications(args.endpoint, admin_token, args.output, args.track)
        )
    except EndpointError as e:
        print(f"Export failed ({e.status_code or 'network'}): {e.message}", file=sys.stderr)
        return 1

    print(f"Exported {count} applications to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
