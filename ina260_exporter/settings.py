import argparse
import logging
import socket
from pathlib import Path
from typing import List, Optional

import pydantic

from ina260_exporter.multiplexer import TCA9548A_ADDRESS, CHANNELS
from ina260_exporter.util import ConfigError

logger = logging.getLogger(__name__)


class Settings(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(frozen=True)

    multiplexer_address: int = pydantic.Field(default=TCA9548A_ADDRESS, ge=0x00, le=0x7F)
    channel: int = pydantic.Field(default=0, ge=0, lt=CHANNELS)

    metrics_enabled: bool = True
    metrics_port: int = pydantic.Field(default=9090, ge=1, le=65535)
    metrics_addr: str = '0.0.0.0'

    poll_interval_s: float = pydantic.Field(default=1.0, gt=0, le=86400, allow_inf_nan=False)

    hostname: str = pydantic.Field(default_factory=socket.gethostname)

    log_file: Optional[Path] = None
    verbose: bool = False


def parse_int(text: str) -> int:
    """
    '112' -> 112
    '0x70' -> 112
    """
    try:
        return int(text, 0)
    except (TypeError, ValueError):
        raise ConfigError(f'Invalid integer: {text!r}') from None


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='ina260-exporter',
        description='Export INA260 readings behind a TCA9548A multiplexer as prometheus metrics',
    )
    parser.add_argument('address', nargs='?', default=hex(TCA9548A_ADDRESS),
                        help='TCA9548A address, decimal or 0x-prefixed hex (default: %(default)s)')
    parser.add_argument('channel', nargs='?', default='0',
                        help='multiplexer channel the INA260 is on, 0-7 (default: %(default)s)')
    parser.add_argument('--port', default='9090', help='metrics HTTP port (default: %(default)s)')
    parser.add_argument('--addr', default='0.0.0.0', help='metrics HTTP bind address (default: %(default)s)')
    parser.add_argument('--interval', default='1.0', help='seconds between readings (default: %(default)s)')
    parser.add_argument('--no-metrics', action='store_true', help='only log readings, do not serve metrics')
    parser.add_argument('--hostname', default=None, help='hostname label (default: this host)')
    parser.add_argument('--log-file', default=None, help='also log into this file, rotated daily')
    parser.add_argument('-v', '--verbose', action='store_true', help='debug logging')
    return parser


def load_settings(argv: Optional[List[str]] = None) -> Settings:
    """
    Parse command line into settings. Raises ConfigError on any invalid value.
    """
    args = _build_parser().parse_args(argv)

    values = dict(
        multiplexer_address=parse_int(args.address),
        channel=parse_int(args.channel),
        metrics_enabled=not args.no_metrics,
        metrics_port=parse_int(args.port),
        metrics_addr=args.addr,
        poll_interval_s=args.interval,
        log_file=args.log_file,
        verbose=args.verbose,
    )
    if args.hostname:
        values['hostname'] = args.hostname

    try:
        return Settings(**values)
    except pydantic.ValidationError as e:
        errors = '; '.join(f"{'.'.join(map(str, error['loc']))}: {error['msg']}" for error in e.errors())
        raise ConfigError(f'Invalid settings: {errors}') from None
