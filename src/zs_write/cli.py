"""ZS Write - command line."""
from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

import click

from zs_core.protocol import LEGACY, PROFILES
from zs_write.const import ERRORS
from zs_write.writer import ContainerWriter

CANONICAL_JSON_KW = {"sort_keys": True, "separators": (",", ":"), "ensure_ascii": False}


class CliFailure(Exception):
    def __init__(self, code: str, detail: str = "") -> None:
        self.code = code
        message = ERRORS[code]
        super().__init__(f"{code}: {message}" + (f" ({detail})" if detail else ""))


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; a trailing Z and naive values mean UTC."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(text)
    except ValueError as e:
        raise CliFailure("E_TIMESTAMP", value) from e
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def read_payload(source: Path | None, text: str | None) -> bytes:
    if text is not None:
        if source is not None:
            raise CliFailure("E_PAYLOAD_CONFLICT")
        return text.encode("utf-8")
    if source is None or str(source) == "-":
        return sys.stdin.buffer.read()
    try:
        return source.read_bytes()
    except OSError as e:
        raise CliFailure("E_PAYLOAD_SOURCE", str(e)) from e


@click.command()
@click.argument("dest", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("source", required=False, type=click.Path(dir_okay=False, allow_dash=True, path_type=Path))
@click.option("--text", default=None, help="Use TEXT as the payload instead of SOURCE")
@click.option("--layout", type=click.Choice(sorted(PROFILES)), default=LEGACY.name, show_default=True,
              help="Header/block size arithmetic")
@click.option("--timestamp", default=None, help="Build time (ISO-8601, UTC) for reproducible containers")
@click.option("--host", default=None, help="Override the build host recorded in metadata")
@click.option("--user", default=None, help="Override the build user recorded in metadata")
@click.option("--json", "as_json", is_flag=True, help="Print the write result as JSON")
@click.option("-v", "--verbose", is_flag=True, help="Log progress")
def main(
    dest: Path,
    source: Path | None,
    text: str | None,
    layout: str,
    timestamp: str | None,
    host: str | None,
    user: str | None,
    as_json: bool,
    verbose: bool,
) -> None:
    """Write SOURCE (or stdin) into the ZS container DEST."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        payload = read_payload(source, text)
        when = parse_timestamp(timestamp) if timestamp else None
        writer = ContainerWriter(host=host, user=user, profile=PROFILES[layout])
        try:
            result = writer.write(dest, payload, timestamp=when)
        except OSError as e:
            raise CliFailure("E_WRITE_IO", str(e)) from e
        except ValueError as e:
            raise CliFailure("E_LAYOUT", str(e)) from e
    except Exception as e:
        # Fail closed, with a single-line reason.
        click.echo(f"FATAL: {e}", err=True)
        raise SystemExit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), **CANONICAL_JSON_KW))
    else:
        click.echo(f"PASS: Container written at {result.path}")
        click.echo(f"  Bytes: {result.file_size}")
        click.echo(f"  Payload: {result.payload_length}")
        click.echo(f"  SHA-256: {result.content_digest.hex()}")


if __name__ == "__main__":
    main()
