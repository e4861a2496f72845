# file: trustscore/cli.py
"""
trustscore CLI.

Commands:
  - evaluate: score a signal payload (JSON file or stdin)
  - score-url: score a bare URL using URL-shape signals only
  - settings: show or update the sensitivity profile and backend flag
  - allowlist: add, remove or list allowlisted domains
  - history: show recent evaluations
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable, TypeVar

import click

from trustscore import __version__
from trustscore.config import TrustScoreConfig, load_config
from trustscore.core.domain import normalize_domain
from trustscore.core.url_signals import payload_from_url
from trustscore.errors import InvalidPayloadError, TrustScoreError
from trustscore.io.report import (
    evaluation_text,
    export_json,
    history_text,
    settings_text,
)
from trustscore.logging_config import configure_logging
from trustscore.service import TrustScoreService
from trustscore.settings import SENSITIVITIES
from trustscore.store import SQLiteKeyValueStore

T = TypeVar("T")

config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML config path.",
)
store_option = click.option(
    "--store",
    "store_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="SQLite store path (overrides config).",
)
json_option = click.option("--json", "as_json", is_flag=True, help="Print JSON to stdout.")


def _setup(config_path: Path | None, store_path: Path | None) -> TrustScoreConfig:
    config = load_config(yaml_path=config_path)
    if store_path is not None:
        config = config.model_copy(update={"store_path": store_path})
    configure_logging(level=config.log_level, json_logging=config.json_logging)
    return config


def _build_service(config: TrustScoreConfig) -> TrustScoreService:
    return TrustScoreService(
        SQLiteKeyValueStore(config.store_path),
        tab_cache_max_entries=config.tab_cache_max_entries,
        history_capacity=config.history_capacity,
    )


def _run(config: TrustScoreConfig, fn: Callable[[TrustScoreService], Awaitable[T]]) -> T:
    async def runner() -> T:
        service = _build_service(config)
        try:
            return await fn(service)
        finally:
            await service.drain()

    try:
        return asyncio.run(runner())
    except TrustScoreError as exc:
        raise click.ClickException(str(exc)) from exc


def _read_payload(source: str) -> dict[str, Any]:
    text = sys.stdin.read() if source == "-" else Path(source).read_text(encoding="utf-8")
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InvalidPayloadError(f"Payload is not valid JSON: {exc}") from exc
    if not isinstance(raw, dict):
        raise InvalidPayloadError("Payload must be a JSON object.")
    return raw


def _echo_json(obj: Any) -> None:
    click.echo(json.dumps(obj, indent=2, sort_keys=True))


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__)
def main() -> None:
    """Explainable trust scores for web pages."""


@main.command("evaluate")
@click.argument("payload", type=str)
@click.option("--tab-id", default="0", show_default=True, help="Tab identity for the result cache.")
@click.option(
    "--report",
    "report_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Write the evaluation as JSON to a file.",
)
@json_option
@config_option
@store_option
def evaluate_cmd(
    payload: str,
    tab_id: str,
    report_path: Path | None,
    as_json: bool,
    config_path: Path | None,
    store_path: Path | None,
) -> None:
    """
    Score a signal payload. PAYLOAD is a JSON file path, or `-` for stdin.
    """

    config = _setup(config_path, store_path)
    try:
        raw = _read_payload(payload)
    except (OSError, InvalidPayloadError) as exc:
        raise click.ClickException(str(exc)) from exc

    result = _run(config, lambda service: service.evaluate_signals(raw, tab_id=tab_id))

    if report_path is not None:
        export_json(result.to_dict(), report_path)
    if as_json:
        _echo_json(result.to_dict())
    else:
        click.echo(evaluation_text(result), nl=False)


@main.command("score-url")
@click.argument("url", type=str)
@json_option
@config_option
@store_option
def score_url_cmd(
    url: str, as_json: bool, config_path: Path | None, store_path: Path | None
) -> None:
    """Score a URL from its shape alone (no DOM or behavior signals)."""

    config = _setup(config_path, store_path)
    try:
        payload = payload_from_url(url)
    except ValueError as exc:
        raise click.ClickException(f"Cannot parse URL: {exc}") from exc

    result = _run(config, lambda service: service.evaluate_signals(payload))
    if as_json:
        _echo_json(result.to_dict())
    else:
        click.echo(evaluation_text(result), nl=False)


@main.group("settings")
def settings_group() -> None:
    """Show or update settings."""


@settings_group.command("show")
@json_option
@config_option
@store_option
def settings_show_cmd(as_json: bool, config_path: Path | None, store_path: Path | None) -> None:
    config = _setup(config_path, store_path)
    settings = _run(config, lambda service: service.get_settings())
    if as_json:
        _echo_json(settings.to_dict())
    else:
        click.echo(settings_text(settings), nl=False)


@settings_group.command("set")
@click.option(
    "--sensitivity",
    type=click.Choice(list(SENSITIVITIES), case_sensitive=False),
    default=None,
    help="Sensitivity profile.",
)
@click.option("--backend/--no-backend", "enable_backend", default=None, help="Backend flag.")
@json_option
@config_option
@store_option
def settings_set_cmd(
    sensitivity: str | None,
    enable_backend: bool | None,
    as_json: bool,
    config_path: Path | None,
    store_path: Path | None,
) -> None:
    """Update one or more settings; unspecified settings are left as they are."""

    partial: dict[str, Any] = {}
    if sensitivity is not None:
        partial["sensitivity"] = sensitivity.lower()
    if enable_backend is not None:
        partial["enableBackend"] = enable_backend
    if not partial:
        raise click.UsageError("Nothing to update. Pass --sensitivity and/or --backend.")

    config = _setup(config_path, store_path)
    settings = _run(config, lambda service: service.save_settings(partial))
    if as_json:
        _echo_json(settings.to_dict())
    else:
        click.echo(settings_text(settings), nl=False)


@main.group("allowlist")
def allowlist_group() -> None:
    """Manage allowlisted domains."""


def _toggle(domain: str, allow: bool, config_path: Path | None, store_path: Path | None) -> None:
    if normalize_domain(domain) is None:
        raise click.ClickException(f"Invalid domain: {domain!r}. Enter a domain like example.com.")
    config = _setup(config_path, store_path)
    result = _run(config, lambda service: service.toggle_allowlist(domain, allow))
    for entry in result["allowlist"]:
        click.echo(entry)


@allowlist_group.command("add")
@click.argument("domain", type=str)
@config_option
@store_option
def allowlist_add_cmd(domain: str, config_path: Path | None, store_path: Path | None) -> None:
    _toggle(domain, True, config_path, store_path)


@allowlist_group.command("remove")
@click.argument("domain", type=str)
@config_option
@store_option
def allowlist_remove_cmd(domain: str, config_path: Path | None, store_path: Path | None) -> None:
    _toggle(domain, False, config_path, store_path)


@allowlist_group.command("list")
@config_option
@store_option
def allowlist_list_cmd(config_path: Path | None, store_path: Path | None) -> None:
    config = _setup(config_path, store_path)
    settings = _run(config, lambda service: service.get_settings())
    for entry in settings.allowlist:
        click.echo(entry)


@main.command("history")
@click.option("--limit", type=int, default=None, help="Show at most this many entries.")
@json_option
@config_option
@store_option
def history_cmd(
    limit: int | None, as_json: bool, config_path: Path | None, store_path: Path | None
) -> None:
    """Show recent evaluations, newest first."""

    config = _setup(config_path, store_path)
    entries = _run(config, lambda service: service.get_history())
    if as_json:
        shown = entries if limit is None else entries[:limit]
        _echo_json([e.to_dict() for e in shown])
    else:
        click.echo(history_text(entries, limit=limit), nl=False)
