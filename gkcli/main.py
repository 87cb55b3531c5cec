"""gk command line entry point.

Usage: gk [--config PATH] [--verbose] login | logout | auth status | auth token
| provider list | pr list | pr view NUMBER --remote URL | launchpad | api PATH
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List

from gkcli.api.gitkraken import GitKrakenClient
from gkcli.auth import AuthSession, OAuthClient, YamlTokenStore
from gkcli.config import AppConfig, load_config
from gkcli.errors import ConfigurationError, GkError
from gkcli.launchpad import AggregateResult, Repository, collect_pull_requests, load_launchpad
from gkcli.logging import GkLogging
from gkcli.models import BasicCredential
from gkcli.providers import ProviderRegistry, resolve_remote
from gkcli.providers.base import STATE_FILTERS
from gkcli.utils import canonical_timestamp, mask_secret, utc_now

LOG = logging.getLogger("gkcli.main")


def _session(config: AppConfig) -> AuthSession:
    oauth = OAuthClient(config.oauth, config.oauth_client_secret_resolved)
    return AuthSession(oauth, YamlTokenStore(config.token_file), config.oauth)


def _repositories(config: AppConfig, remotes: List[str] | None) -> List[Repository]:
    """Repositories from --remote arguments, else from config."""
    if remotes:
        return [Repository(remote=remote) for remote in remotes]
    repos = [Repository(name=entry.name, remote=entry.remote) for entry in config.repositories]
    if not repos:
        raise ConfigurationError("No repositories configured (add 'repositories:' to the config or pass --remote)")
    return repos


def _print_failures(result: AggregateResult) -> None:
    if not result.incomplete:
        return
    print(f"\nWarning: results are incomplete, {len(result.failures)} repository(s) failed:", file=sys.stderr)
    for failure in result.failures:
        print(f"  {failure.repository.label}: {failure.error}", file=sys.stderr)


def cmd_login(args: argparse.Namespace, config: AppConfig) -> int:
    session = _session(config)
    if session.is_authenticated:
        print("Already logged in. Run 'gk logout' first to log in again.")
        return 0
    if not config.oauth.client_id or not config.oauth_client_secret_resolved:
        raise ConfigurationError(
            "OAuth client not configured: set oauth.client_id and oauth.client_secret "
            "(or GK_OAUTH_CLIENT_ID and GK_OAUTH_CLIENT_SECRET)"
        )
    session.login()
    print("Successfully logged in")
    return 0


def cmd_logout(args: argparse.Namespace, config: AppConfig) -> int:
    _session(config).logout()
    print("Logged out")
    return 0


def cmd_auth_status(args: argparse.Namespace, config: AppConfig) -> int:
    token = _session(config).current_token()
    if token is None:
        print("Not logged in")
        return 0
    print("Logged in")
    if token.expires_at is None:
        print("Token expires: never")
    else:
        expired = " (expired)" if token.expires_at <= utc_now() else ""
        print(f"Token expires: {canonical_timestamp(token.expires_at)}{expired}")
    print(f"Refresh token: {'yes' if token.refresh_token else 'no'}")
    return 0


def cmd_auth_token(args: argparse.Namespace, config: AppConfig) -> int:
    print(_session(config).get_token())
    return 0


def cmd_provider_list(args: argparse.Namespace, config: AppConfig) -> int:
    registry = ProviderRegistry.from_config(config)
    names = registry.configured_providers()
    if not names:
        print("No providers configured")
        return 0
    for name in names:
        credential = registry.credential(name)
        if isinstance(credential, BasicCredential):
            print(f"{name.value}: {credential.username} ({mask_secret(credential.secret)})")
        else:
            print(f"{name.value}: {mask_secret(credential.token)}")
    return 0


def cmd_pr_list(args: argparse.Namespace, config: AppConfig) -> int:
    repos = _repositories(config, args.remote)
    registry = ProviderRegistry.from_config(config)
    try:
        result = collect_pull_requests(repos, registry, state=args.state, max_workers=config.launchpad.max_workers)
    finally:
        registry.close()

    for group in result.items:
        print(f"{group.repository.name or group.locator.full_name} ({group.locator.provider.value})")
        if not group.pull_requests:
            print("  No pull requests")
        for pr in group.pull_requests:
            author = f" by {pr.author}" if pr.author else ""
            # GitHub reports merged PRs as closed; the merged filter already kept only merged ones.
            state = "merged" if args.state == "merged" else pr.state
            print(f"  #{pr.number} {pr.title} [{state}]{author}")
    _print_failures(result)
    return 0


def cmd_pr_view(args: argparse.Namespace, config: AppConfig) -> int:
    locator = resolve_remote(args.remote)
    registry = ProviderRegistry.from_config(config)
    try:
        pr = registry.get_provider(locator.provider).get_pull_request(locator.owner, locator.repo, args.number)
    finally:
        registry.close()

    print(f"#{pr.number} {pr.title}")
    print(f"State:   {pr.state}")
    print(f"Author:  {pr.author}")
    print(f"Branch:  {pr.source_branch} -> {pr.target_branch}")
    print(f"URL:     {pr.url}")
    print(f"Created: {pr.created_at}")
    print(f"Updated: {pr.updated_at}")
    if pr.body:
        print()
        print(pr.body)
    return 0


def cmd_launchpad(args: argparse.Namespace, config: AppConfig) -> int:
    repos = _repositories(config, args.remote)
    registry = ProviderRegistry.from_config(config)
    try:
        result = load_launchpad(repos, registry, max_workers=config.launchpad.max_workers)
    finally:
        registry.close()

    if not result.items:
        print("Nothing open")
    for item in result.items:
        author = f" by {item.author}" if item.author else ""
        print(f"[{item.kind}] {item.repository} #{item.number} {item.title}{author} (updated {item.updated_at})")
    _print_failures(result)
    return 0


def cmd_api(args: argparse.Namespace, config: AppConfig) -> int:
    client = GitKrakenClient(_session(config), api_url=config.oauth.api_url)
    try:
        data = client.request(args.method, args.path, json=args.data)
    finally:
        client.close()
    if data is not None:
        print(json.dumps(data, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gk",
        description="Pull requests and issues from GitHub, GitLab and Bitbucket in one place",
    )
    parser.add_argument("--config", "-c", type=Path, default=None, help="Path to YAML config file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("login", help="Log in through the browser").set_defaults(func=cmd_login)
    sub.add_parser("logout", help="Forget the stored token").set_defaults(func=cmd_logout)

    auth = sub.add_parser("auth", help="Inspect the stored login")
    auth_sub = auth.add_subparsers(dest="auth_command", required=True)
    auth_sub.add_parser("status", help="Show login state and expiry").set_defaults(func=cmd_auth_status)
    auth_sub.add_parser("token", help="Print a valid access token").set_defaults(func=cmd_auth_token)

    provider = sub.add_parser("provider", help="Configured hosting providers")
    provider_sub = provider.add_subparsers(dest="provider_command", required=True)
    provider_sub.add_parser("list", help="List configured providers").set_defaults(func=cmd_provider_list)

    pr = sub.add_parser("pr", help="Pull requests")
    pr_sub = pr.add_subparsers(dest="pr_command", required=True)
    pr_list = pr_sub.add_parser("list", help="List pull requests across repositories")
    pr_list.add_argument("--state", choices=STATE_FILTERS, default="open")
    pr_list.add_argument("--remote", action="append", help="Remote URL (repeatable), default: configured repositories")
    pr_list.set_defaults(func=cmd_pr_list)
    pr_view = pr_sub.add_parser("view", help="Show one pull request")
    pr_view.add_argument("number", type=int)
    pr_view.add_argument("--remote", required=True, help="Remote URL of the repository")
    pr_view.set_defaults(func=cmd_pr_view)

    launchpad = sub.add_parser("launchpad", help="Open pull requests and issues, most recent first")
    launchpad.add_argument("--remote", action="append", help="Remote URL (repeatable), default: configured repositories")
    launchpad.set_defaults(func=cmd_launchpad)

    api = sub.add_parser("api", help="Call the service API with the login token")
    api.add_argument("path", help="API path, e.g. /patches")
    api.add_argument("--method", "-X", choices=("GET", "POST", "PATCH", "DELETE"), default="GET", type=str.upper)
    api.add_argument("--data", "-d", type=json.loads, default=None, help="JSON request body")
    api.set_defaults(func=cmd_api)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point: parse, load config, dispatch."""
    args = build_parser().parse_args(argv)
    try:
        config = load_config(args.config)
        GkLogging(config.logging, verbose=args.verbose).setup()
        return args.func(args, config)
    except KeyboardInterrupt:
        return 130
    except GkError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        LOG.exception("Fatal error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
