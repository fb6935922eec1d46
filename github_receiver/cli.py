"""CLI entry point: github-receiver.

    github-receiver --org acme --repo alerts --authtoken-file /secrets/token
    github-receiver --enable-inmemory --repo alerts    # no GitHub, local issues

Every option can also be set with its ``GITHUB_RECEIVER_*`` env var.
"""

from __future__ import annotations

import sys

import click
import uvicorn

from github_receiver.api import create_app
from github_receiver.core.config import ConfigError, Settings, resolve_token

_ENV = "GITHUB_RECEIVER_"


@click.command()
@click.option("--host", default="0.0.0.0", envvar=f"{_ENV}HOST", help="Listen address")
@click.option("--port", default=9393, type=int, envvar=f"{_ENV}PORT", help="Listen port")
@click.option("--authtoken", default=None, envvar=f"{_ENV}AUTHTOKEN", help="GitHub token")
@click.option(
    "--authtoken-file",
    default=None,
    type=click.Path(dir_okay=False),
    envvar=f"{_ENV}AUTHTOKEN_FILE",
    help="File containing the GitHub token",
)
@click.option("--org", default="", envvar=f"{_ENV}ORG", help="GitHub organisation")
@click.option("--repo", default="", envvar=f"{_ENV}REPO", help="Default repository for new issues")
@click.option(
    "--enable-auto-close",
    is_flag=True,
    envvar=f"{_ENV}AUTO_CLOSE",
    help="Close an alert's issue when the alert resolves",
)
@click.option(
    "--label",
    "labels",
    multiple=True,
    envvar=f"{_ENV}LABELS",
    help="Extra label added to new issues (repeatable)",
)
@click.option(
    "--extra-label",
    "extra_labels",
    multiple=True,
    envvar=f"{_ENV}EXTRA_LABELS",
    help="Alert label copied into issue bodies (repeatable)",
)
@click.option(
    "--enable-inmemory",
    is_flag=True,
    envvar=f"{_ENV}INMEMORY",
    help="Keep issues in memory instead of GitHub",
)
@click.option(
    "--timeout",
    default=30.0,
    type=float,
    envvar=f"{_ENV}TIMEOUT",
    help="Seconds allowed per tracker call",
)
@click.option("--log-level", default="INFO", envvar=f"{_ENV}LOG_LEVEL", help="Log level")
def main(
    host: str,
    port: int,
    authtoken: str | None,
    authtoken_file: str | None,
    org: str,
    repo: str,
    enable_auto_close: bool,
    labels: tuple[str, ...],
    extra_labels: tuple[str, ...],
    enable_inmemory: bool,
    timeout: float,
    log_level: str,
) -> None:
    """Receive Alertmanager webhooks and track firing alerts as GitHub issues."""
    try:
        settings = Settings(
            repo=repo,
            org=org,
            authtoken=resolve_token(authtoken, authtoken_file),
            auto_close=enable_auto_close,
            labels=_flatten(labels),
            extra_labels=_flatten(extra_labels),
            inmemory=enable_inmemory,
            timeout=timeout,
        )
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    app = create_app(settings, log_level=log_level)
    uvicorn.run(app, host=host, port=port, log_level=log_level.lower(), log_config=None)


def _flatten(values: tuple[str, ...]) -> tuple[str, ...]:
    """Accept both repeated options and comma separated values."""
    return tuple(
        item.strip() for value in values for item in value.split(",") if item.strip()
    )


if __name__ == "__main__":
    main()
