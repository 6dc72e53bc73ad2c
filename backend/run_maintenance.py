#!/usr/bin/env python
"""
Operational tasks for the Ledgerly backend.

Usage:
    python run_maintenance.py sweep-bind-requests             # Delete expired/consumed bind requests
    python run_maintenance.py issue-token --user-id ID        # Mint a web token for support use
    python run_maintenance.py set-tier --user-id ID --tier family
    python run_maintenance.py set-tier --user-id ID --status inactive

Uses the storage backend from the environment (STORAGE_BACKEND).
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

from rich.console import Console
from rich.table import Table

from api.dependencies import ServiceContainer
from modules.auth.exceptions import UserNotFoundError
from modules.billing.models import SubscriptionStatus, SubscriptionTier
from shared.config import get_settings

console = Console()


async def sweep_bind_requests(container: ServiceContainer) -> int:
    removed = await container.bind_requests.sweep_expired()
    console.print(f"[green]✓[/green] Removed {removed} stale bind request(s)")
    return 0


async def issue_token(container: ServiceContainer, user_id: str) -> int:
    """Mint a web token for an existing user."""
    try:
        user = await container.users.get_user(user_id)
    except UserNotFoundError:
        console.print(f"[red]Error:[/red] No user with id {user_id}")
        return 1

    issued = container.tokens.issue(user.id)
    console.print(f"[bold]Token for {user.email}[/bold] (expires {issued.expires_at.isoformat()})")
    console.print(issued.token, soft_wrap=True)
    return 0


async def set_tier(
    container: ServiceContainer,
    user_id: str,
    tier: Optional[SubscriptionTier],
    status: Optional[SubscriptionStatus],
) -> int:
    """Change a user's tier and/or subscription status. No payment is involved."""
    subscriptions = container.subscriptions
    if tier is not None:
        await subscriptions.change_tier(user_id, tier)
    if status is not None:
        await subscriptions.set_status(user_id, status)
    subscription = await subscriptions.get_subscription(user_id)
    limits = container.policy.limits(subscription.tier)

    table = Table(title=f"Subscription for {user_id}")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Tier", subscription.tier.display_name)
    table.add_row("Status", subscription.status.value)
    table.add_row("Price", f"${limits.price_usd}/month")
    table.add_row("Groups", str(limits.groups) if limits.groups is not None else "unlimited")
    console.print(table)
    return 0


def main():
    parser = argparse.ArgumentParser(description="Ledgerly maintenance tasks")
    parser.add_argument("--log-level", type=str, help="Override LOG_LEVEL")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("sweep-bind-requests", help="Delete expired and consumed bind requests")

    issue = commands.add_parser("issue-token", help="Issue a web token for a user")
    issue.add_argument("--user-id", required=True, help="User to issue the token for")

    tier = commands.add_parser("set-tier", help="Change a user's subscription tier or status")
    tier.add_argument("--user-id", required=True, help="User whose subscription to change")
    tier.add_argument("--tier", choices=[t.value for t in SubscriptionTier], help="New tier")
    tier.add_argument("--status", choices=[s.value for s in SubscriptionStatus], help="New status")

    args = parser.parse_args()

    settings = get_settings()
    logging.basicConfig(
        level=(args.log_level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    container = ServiceContainer(settings)

    if args.command == "sweep-bind-requests":
        code = asyncio.run(sweep_bind_requests(container))
    elif args.command == "issue-token":
        code = asyncio.run(issue_token(container, args.user_id))
    else:
        if args.tier is None and args.status is None:
            parser.error("set-tier needs --tier and/or --status")
        code = asyncio.run(set_tier(
            container,
            args.user_id,
            SubscriptionTier(args.tier) if args.tier else None,
            SubscriptionStatus(args.status) if args.status else None,
        ))
    sys.exit(code)


if __name__ == "__main__":
    main()
