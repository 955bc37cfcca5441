#!/usr/bin/env python3
"""
CLI helper utilities for consistent error handling and service validation.
"""

import functools
import click
from rich.console import Console
from typing import List, Optional, Any

console = Console(stderr=True)


def validate_context_for_command(ctx: click.Context, required_services: Optional[List[str]] = None) -> bool:
    """
    Validate context has required services with helpful error messages.

    Args:
        ctx: Click context object
        required_services: List of required service names (e.g., ['store', 'source'])

    Returns:
        bool: True if validation passes, False otherwise
    """
    if not ctx.obj:
        console.print("❌ No context available. Configuration may not be loaded properly.", style="red")
        console.print("💡 Try running: python showtracker.py config-check", style="yellow")
        return False

    if required_services:
        missing = [s for s in required_services if not ctx.obj.get(s)]
        if missing:
            console.print(f"❌ Required services unavailable: {', '.join(missing)}", style="red")
            _suggest_service_fixes(missing)
            return False

    return True


def get_service_from_context(ctx: click.Context, service_name: str, required: bool = True) -> Optional[Any]:
    """
    Get a service from context with proper error handling.

    Args:
        ctx: Click context object
        service_name: Name of the service to retrieve
        required: Whether the service is required (affects error handling)

    Returns:
        Service instance or None if not available
    """
    if not ctx.obj:
        if required:
            console.print("❌ No context available. Configuration may not be loaded properly.", style="red")
            raise click.Abort()
        return None

    service = ctx.obj.get(service_name)
    if not service and required:
        console.print(f"❌ {service_name.upper()} service not available. Please check your configuration.", style="red")
        _suggest_service_fixes([service_name])
        raise click.Abort()

    return service


def _suggest_service_fixes(missing_services: List[str]) -> None:
    """Provide specific suggestions for fixing missing services."""
    suggestions = {
        'source': [
            "Check your configuration file for the [source] section",
            "Supported types: tmdb, tvrage",
            "TMDB requires [tmdb] api_key (get one from https://www.themoviedb.org/settings/api)",
        ],
        'store': [
            "Check your configuration file for the [store] section",
            "Supported types: json, sqlite",
        ],
    }

    console.print("💡 Configuration suggestions:", style="yellow")
    for service in missing_services:
        for suggestion in suggestions.get(service, [f"Check configuration for {service} service"]):
            console.print(f"   - {suggestion}", style="yellow")

    console.print("   - Run 'python showtracker.py config-check' for comprehensive diagnosis", style="yellow")


def pass_showtracker_context(f):
    """
    Decorator that validates the ShowTracker context is available before executing command.

    Note: This should be used AFTER @click.pass_context decorator.
    """
    @functools.wraps(f)
    def wrapper(ctx: click.Context, *args, **kwargs):
        if not validate_context_for_command(ctx):
            raise click.Abort()
        return f(ctx, *args, **kwargs)

    return wrapper
