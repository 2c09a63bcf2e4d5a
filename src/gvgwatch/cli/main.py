"""gvg-watch CLI — Typer 기반."""

import logging
from pathlib import Path

import typer

from gvgwatch.config import AppConfig
from gvgwatch.exceptions import GvgWatchError
from gvgwatch.logging_config import setup_file_logging, setup_logging, teardown_file_logging
from gvgwatch.services.orchestrator import MODES, SnapshotOrchestrator

logger = logging.getLogger(__name__)

app = typer.Typer(help="Guild battle castle snapshot collector")


def _echo(msg: str = "", err: bool = False) -> None:
    typer.echo(msg, err=err)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable DEBUG logging"),
    log_file: bool = typer.Option(
        False, "--log-file", help="Also write DEBUG logs to <data-dir>/logs"
    ),
    log_dir: Path = typer.Option(None, "--log-dir", help="Write DEBUG logs to this directory"),
) -> None:
    """Guild battle castle snapshot collector."""
    level = logging.DEBUG if verbose else logging.INFO
    setup_logging(level)
    ctx.obj = {"log_file": log_file, "log_dir": log_dir}


def _get_config() -> AppConfig:
    return AppConfig()


def _apply_overrides(
    config: AppConfig,
    server: str | None,
    workers: int | None,
    data_dir: Path | None,
) -> AppConfig:
    """CLI 옵션으로 설정 일부를 덮어쓴다. 검증은 AppConfig가 다시 수행한다."""
    overrides: dict = {}
    if server is not None:
        overrides["server_id"] = server
    if workers is not None:
        overrides["concurrency"] = workers
    if data_dir is not None:
        overrides["data_dir"] = data_dir
    if not overrides:
        return config
    return AppConfig(**{**config.model_dump(), **overrides})


def _get_api_client(config: AppConfig):
    from gvgwatch.infra.api_client import BattleApiClient

    return BattleApiClient(
        config.api_base_url,
        max_retries=config.max_retries,
        retry_backoff=config.retry_backoff,
        timeout=config.request_timeout,
    )


def _handle_error(e: GvgWatchError) -> None:
    _echo(f"Error: {e}", err=True)
    raise typer.Exit(code=1)


def _progress(msg: str) -> None:
    """진행 상황 콜백."""
    _echo(msg)


def _resolve_log_dir(ctx: typer.Context, config: AppConfig) -> Path | None:
    """--log-dir > --log-file / LOG_TO_FILE (<data_dir>/logs) > 파일 로그 없음."""
    opts = ctx.obj or {}
    if opts.get("log_dir") is not None:
        return opts["log_dir"]
    if opts.get("log_file") or config.log_to_file:
        return config.log_dir
    return None


def _run(
    ctx: typer.Context,
    modes: tuple[str, ...],
    server: str | None,
    workers: int | None,
    data_dir: Path | None,
) -> None:
    try:
        config = _apply_overrides(_get_config(), server, workers, data_dir)
    except ValueError as e:
        _echo(f"Invalid configuration: {e}", err=True)
        raise typer.Exit(code=1)

    log_dir = _resolve_log_dir(ctx, config)
    file_handler = setup_file_logging(log_dir, modes) if log_dir is not None else None

    logger.info(
        "Command: modes=%s server=%s workers=%d data_dir=%s",
        ",".join(modes),
        config.server_id,
        config.concurrency,
        config.data_dir,
    )
    try:
        with _get_api_client(config) as client:
            orchestrator = SnapshotOrchestrator(config, client)
            results = orchestrator.run_all(modes, progress=_progress)
    except GvgWatchError as e:
        _handle_error(e)
    finally:
        if file_handler is not None:
            teardown_file_logging(file_handler)

    for mode, path in results.items():
        _echo(f"  {mode}: {path}")
    _echo("Done.")


_server_opt = typer.Option(
    None, "--server", "-s", help="Server id (1=JP, 2=KR, 3=Asia, 4=NA, 5=EU, 6=Global)"
)
_workers_opt = typer.Option(None, "--workers", "-w", help="Concurrent requests (default: 3)")
_data_dir_opt = typer.Option(None, "--data-dir", "-o", help="Output directory (default: data)")


@app.command()
def run(
    ctx: typer.Context,
    server: str = _server_opt,
    workers: int = _workers_opt,
    data_dir: Path = _data_dir_opt,
) -> None:
    """Collect guild battle and grand battle snapshots (local.json + global.json)."""
    _run(ctx, MODES, server, workers, data_dir)


@app.command()
def local(
    ctx: typer.Context,
    server: str = _server_opt,
    workers: int = _workers_opt,
    data_dir: Path = _data_dir_opt,
) -> None:
    """Collect the per-world guild battle snapshot only (local.json)."""
    _run(ctx, ("local",), server, workers, data_dir)


@app.command()
def grand(
    ctx: typer.Context,
    server: str = _server_opt,
    workers: int = _workers_opt,
    data_dir: Path = _data_dir_opt,
) -> None:
    """Collect the grand battle snapshot only (global.json)."""
    _run(ctx, ("global",), server, workers, data_dir)
