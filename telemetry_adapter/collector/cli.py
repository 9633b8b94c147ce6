"""Command-line interface to run the telemetry collector.

This CLI loads application configuration, initializes vendor adapters, and
runs poll cycles at the configured interval in the foreground. Collected
points are written to stdout as JSON lines; shipping them to a metrics store
is left to whatever consumes that stream.

Usage
-----
    telemetry-adapter --config config.json
    telemetry-adapter --config config.json --once
    telemetry-adapter --config config.json --discover
    telemetry-adapter --sample-config imonnit
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional, TextIO

import orjson

from ..adapters import (
    VendorAdapter,
    get_adapter,
    get_available_source_ids,
    hobolink,
    imonnit,
    log_adapter_status,
    register_adapter,
)
from ..adapters.errors import VendorError
from ..adapters.hobolink import HobolinkAdapter
from ..adapters.imonnit import ImonnitAdapter
from ..config.models import AppConfig, EnvSettings, SourceConfig
from ..domain.emitter import MemoryAccumulator
from ..domain.models import MetricPoint
from ..observability import setup_logging
from .app import TelemetryCollector

logger = logging.getLogger(__name__)


def _build_hobolink(sc: SourceConfig) -> HobolinkAdapter:
    kwargs = {"measurement": sc.measurement} if sc.measurement else {}
    return HobolinkAdapter(
        sc.server or hobolink.DEFAULT_SERVER,
        sc.user,
        sc.password,
        sc.token,
        sc.serial_numbers,
        sc.http_timeout_seconds,
        **kwargs,
    )


def _build_imonnit(sc: SourceConfig) -> ImonnitAdapter:
    kwargs = {"measurement": sc.measurement} if sc.measurement else {}
    return ImonnitAdapter(
        sc.server or imonnit.DEFAULT_SERVER,
        sc.token,
        sc.serial_numbers,
        sc.http_timeout_seconds,
        name_delimiter=sc.name_delimiter,
        **kwargs,
    )


ADAPTER_TYPES: Dict[str, Callable[[SourceConfig], VendorAdapter]] = {
    "hobolink": _build_hobolink,
    "imonnit": _build_imonnit,
}

SAMPLE_CONFIGS: Dict[str, str] = {
    "hobolink": HobolinkAdapter.sample_config,
    "imonnit": ImonnitAdapter.sample_config,
}


async def _init_from_config(config_path: Path) -> tuple[TelemetryCollector, AppConfig]:
    """Initialize adapters and collector from a JSON config file.

    Parameters
    ----------
    config_path: Path
        Filesystem path to the JSON configuration file.

    Returns
    -------
    tuple[TelemetryCollector, AppConfig]
        A collector ready to start, and the loaded configuration.
    """
    cfg = AppConfig.load(config_path)
    for source_id, sc in cfg.sources.items():
        build = ADAPTER_TYPES.get(sc.type)
        if build is None:
            raise ValueError(f"unsupported source type {sc.type!r} for {source_id!r}")
        register_adapter(source_id, build(sc))
    log_adapter_status()
    return TelemetryCollector(), cfg


def _point_to_json(point: MetricPoint) -> bytes:
    return orjson.dumps(
        {
            "measurement": point.measurement,
            "tags": point.tags,
            "fields": point.fields,
            "timestamp": point.timestamp,
        }
    )


def write_points(accumulator: MemoryAccumulator, out: TextIO) -> int:
    """Write and clear the accumulated points; return how many were written."""
    count = len(accumulator.points)
    for point in accumulator.points:
        out.write(_point_to_json(point).decode("utf-8") + "\n")
    out.flush()
    accumulator.clear()
    return count


async def _discover_source(source_id: str, adapter: VendorAdapter) -> List[str]:
    lines: List[str] = []
    if isinstance(adapter, ImonnitAdapter):
        networks = await adapter.network_list()
        sensors = await adapter.sensor_list()
        for network in networks.networks:
            lines.append(f"{source_id}\tnetwork\t{network.network_id}\t{network.network_name}")
        for sensor in sensors.sensors:
            lines.append(f"{source_id}\tsensor\t{sensor.sensor_id}\t{sensor.sensor_name}")
    elif isinstance(adapter, HobolinkAdapter):
        observations = await adapter.fetch_observations(None)
        for logger_sn in sorted({o.logger_sn for o in observations.observations}):
            lines.append(f"{source_id}\tlogger\t{logger_sn}")
    return lines


async def _discover(out: TextIO) -> List[str]:
    """Print the devices each configured source can see.

    A source whose listing fails is logged and skipped. Returns the ids of
    the skipped sources.
    """
    failed: List[str] = []
    for source_id in get_available_source_ids():
        try:
            lines = await _discover_source(source_id, get_adapter(source_id))
        except VendorError as exc:
            logger.error(
                "cli.discover.failed",
                extra={"source_id": source_id, "error": str(exc)},
            )
            failed.append(source_id)
            continue
        for line in lines:
            out.write(line + "\n")
    out.flush()
    return failed


async def _run(
    config_path: Path,
    *,
    once: bool = False,
    discover: bool = False,
    out: Optional[TextIO] = None,
) -> None:
    """Run poll cycles until interrupted (or once).

    Builds the collector, polls at the configured interval and writes points
    to ``out`` after every cycle.
    """
    stream = out or sys.stdout
    collector, cfg = await _init_from_config(config_path)
    await collector.start()
    try:
        if discover:
            await _discover(stream)
            return
        accumulator = MemoryAccumulator()
        while True:
            await collector.gather(accumulator)
            write_points(accumulator, stream)
            if once:
                break
            await asyncio.sleep(cfg.interval_seconds)
    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
    finally:
        await collector.stop()


def main() -> None:
    """CLI entrypoint for running the telemetry collector."""
    settings = EnvSettings()
    parser = argparse.ArgumentParser(description="Sensor telemetry adapter")
    parser.add_argument("--config", help="Path to JSON app config")
    parser.add_argument(
        "--log-level",
        dest="log_level",
        choices=[
            "CRITICAL",
            "ERROR",
            "WARNING",
            "INFO",
            "DEBUG",
        ],
        help="Logging level (overrides environment)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (once sets DEBUG)",
    )
    parser.add_argument(
        "--once", action="store_true", help="Run a single poll cycle and exit"
    )
    parser.add_argument(
        "--discover",
        action="store_true",
        help="List the devices visible to each configured source and exit",
    )
    parser.add_argument(
        "--sample-config",
        dest="sample_config",
        choices=sorted(SAMPLE_CONFIGS),
        help="Print a sample source config for a vendor type and exit",
    )
    args = parser.parse_args()

    effective_level = args.log_level or (
        "DEBUG" if args.verbose > 0 else settings.log_level.upper()
    )
    setup_logging(effective_level)

    if args.sample_config:
        sys.stdout.write(SAMPLE_CONFIGS[args.sample_config])
        return

    config_path = args.config or settings.config_path
    if not config_path:
        parser.error("--config is required (or set TELEMETRY_ADAPTER_CONFIG_PATH)")
    asyncio.run(_run(Path(config_path), once=args.once, discover=args.discover))


if __name__ == "__main__":
    main()
