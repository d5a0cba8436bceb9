import datetime
import logging.config
import sys
from threading import Thread
from typing import List, Optional

from ina260_exporter import config
from ina260_exporter.bus import I2CBus
from ina260_exporter.ina260_service import INA260Session
from ina260_exporter.metrics_service import Labels, LogSink, MetricsSink, PrometheusSink, device_label
from ina260_exporter.multiplexer import select_channel
from ina260_exporter.polling_service import PollingServiceWorker
from ina260_exporter.settings import Settings, load_settings
from ina260_exporter.util import ConfigError, ServiceWorker

logger = logging.getLogger(__name__)


def run_and_wait(*workers: ServiceWorker):
    threads = []

    for worker in workers:
        threads.append(Thread(target=worker.run))
        threads[-1].start()

    try:
        for thread in threads:
            thread.join()
    except KeyboardInterrupt:
        logger.info('Interrupted, shutting down')
        for worker in workers:
            worker.shutdown()
        for thread in threads:  # bus is closed after this returns, let running cycles finish
            thread.join()


def build_sink(settings: Settings) -> MetricsSink:
    if not settings.metrics_enabled:
        logger.info('Metrics endpoint disabled, readings are only logged')
        return LogSink()

    sink = PrometheusSink()
    sink.serve(settings.metrics_port, settings.metrics_addr)
    return sink


def run(settings: Settings, bus: I2CBus):
    logger.info(f'Using TCA9548A at address: {settings.multiplexer_address:#x}')
    select_channel(bus, settings.multiplexer_address, settings.channel)

    session = INA260Session(bus)
    session.identify()

    labels = Labels(
        hostname=settings.hostname,
        device=device_label(settings.multiplexer_address, settings.channel),
    )
    sink = build_sink(settings)

    polling_service = PollingServiceWorker(
        session=session,
        sink=sink,
        labels=labels,
        delay=datetime.timedelta(seconds=settings.poll_interval_s),
    )

    logger.info(f'Reading INA260 values for {labels.device} every {settings.poll_interval_s}s')
    run_and_wait(polling_service)


def main(argv: Optional[List[str]] = None) -> int:
    logging.config.dictConfig(config.logging_config())

    try:
        settings = load_settings(argv)
    except ConfigError as e:
        logger.error(str(e))
        return 2

    logging.config.dictConfig(config.logging_config(settings.log_file, settings.verbose))
    logger.debug(f'Settings: {settings}')

    try:
        with I2CBus.open() as bus:
            run(settings, bus)
    except ConfigError as e:
        logger.error(str(e))
        return 2
    except OSError:
        logger.exception('Setup failed')
        return 1

    return 0


def cli():
    sys.exit(main())

