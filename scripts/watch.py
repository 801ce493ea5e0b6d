#!/usr/bin/env python3
"""Poll a snapshot feed and print tracking events as they happen.

Usage
-----
Point the tracker at a feed (or omit both to use the built-in mock feed)::

    export TACMON_SNAPSHOT_URL="https://example.com/targets.json"
    export TACMON_OBSERVER_LAT=50.45
    export TACMON_OBSERVER_LNG=30.52
    python scripts/watch.py

Options::

    --url URL            Snapshot URL (overrides TACMON_SNAPSHOT_URL)
    --file PATH          Local JSON snapshot file (overrides TACMON_SNAPSHOT_PATH)
    --radius KM          Danger-zone radius in km
    --observer LAT,LNG   Observer position
    --interval SECONDS   Poll interval
    --cycles N           Stop after N cycles (default: run until interrupted)
    --json               Print events as JSON lines
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Any

from pytacmon import (
    Coordinate,
    EventLog,
    MarkerIndex,
    PollingScheduler,
    TacmonConfigError,
    TrackerConfig,
    TrackingEngine,
    TrackingEvent,
    build_source,
)
from pytacmon.sources import HttpSnapshotSource


def _parse_observer(value: str) -> Coordinate:
    try:
        lat_text, lng_text = value.split(",", 1)
        return Coordinate(lat=float(lat_text), lng=float(lng_text))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected LAT,LNG within range, got {value!r}") from exc


def _build_config(args: argparse.Namespace) -> TrackerConfig:
    overrides: dict[str, Any] = {}
    if args.url:
        overrides["snapshot_url"] = args.url
    if args.file:
        overrides["snapshot_path"] = args.file
    if args.radius is not None:
        overrides["radius_km"] = args.radius
    if args.interval is not None:
        overrides["poll_interval"] = args.interval
    if args.observer is not None:
        overrides["observer_lat"] = args.observer.lat
        overrides["observer_lng"] = args.observer.lng
    return TrackerConfig.from_env(**overrides)


async def run(args: argparse.Namespace) -> int:
    config = _build_config(args)
    source = build_source(config)
    engine = TrackingEngine.from_config(config, source=source)

    markers = MarkerIndex()
    log = EventLog(config.log_capacity)
    done = asyncio.Event()
    cycles = 0

    def on_events(events: list[TrackingEvent]) -> None:
        markers.apply(events)
        log.apply(events)
        for event in events:
            if args.json_mode:
                print(event.model_dump_json())
            else:
                print(f"{event.emitted_at:%H:%M:%S} {event.kind.value:<15} {_summary(event)}")

    def on_result(result: Any) -> None:
        nonlocal cycles
        cycles += 1
        if not args.json_mode:
            print(f"-- cycle {result.generation}: {result.outcome.value}, tracking {len(markers)}", file=sys.stderr)
        if args.cycles and cycles >= args.cycles:
            done.set()

    scheduler = PollingScheduler(engine, interval=config.poll_interval, on_events=on_events, on_result=on_result)
    scheduler.start()
    try:
        await done.wait()
    finally:
        await scheduler.stop()
        if isinstance(source, HttpSnapshotSource):
            await source.close()
        if not args.json_mode and len(log):
            print("-- event log (newest first)", file=sys.stderr)
            for entry in log.entries():
                print(f"{entry.level.value:<6} {entry}", file=sys.stderr)
    return 0


def _summary(event: TrackingEvent) -> str:
    entity = getattr(event, "entity", None)
    if entity is not None:
        return f"{entity.id} {entity.category} {entity.label!r} @ {entity.lat:.4f},{entity.lng:.4f}"
    distance = getattr(event, "distance_km", None)
    if distance is not None:
        return f"{event.entity_id} at {distance:.2f} km"
    reason = getattr(event, "reason", None)
    if reason is not None:
        return reason
    return getattr(event, "entity_id", "")


def main() -> None:
    parser = argparse.ArgumentParser(description="Watch a tracked-entity feed and print events.")
    parser.add_argument("--url", help="Snapshot URL")
    parser.add_argument("--file", help="Local JSON snapshot file")
    parser.add_argument("--radius", type=float, help="Danger-zone radius in km")
    parser.add_argument("--observer", type=_parse_observer, help="Observer position as LAT,LNG")
    parser.add_argument("--interval", type=float, help="Poll interval in seconds")
    parser.add_argument("--cycles", type=int, default=0, help="Stop after N cycles")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Print events as JSON lines")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    try:
        sys.exit(asyncio.run(run(args)))
    except TacmonConfigError as exc:
        raise SystemExit(f"Configuration error: {exc}") from exc
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
