import abc
import logging
from typing import Iterable, NamedTuple, Optional

from prometheus_client import CollectorRegistry, Gauge, start_http_server

logger = logging.getLogger(__name__)


class Labels(NamedTuple):
    hostname: str
    device: str


class Sample(NamedTuple):
    metric: str  # current, voltage or power
    labels: Labels
    value: float


def device_label(multiplexer_address: int, channel: int) -> str:
    """
    0x70, 3 -> tca0x70_ch3_ina260
    """
    return f'tca{multiplexer_address:#x}_ch{channel}_ina260'


class MetricsSink(metaclass=abc.ABCMeta):
    @abc.abstractmethod
    def publish(self, samples: Iterable[Sample]):
        raise NotImplementedError()


class PrometheusSink(MetricsSink):
    """
    Keeps the latest sample values in gauges, scraped over HTTP by prometheus.

    The polling loop is the only writer. The exposition server thread only reads.
    """

    GAUGES = {
        'current': ('ina260_current_amperes', 'Current measured by INA260 sensor in Amperes.'),
        'voltage': ('ina260_voltage_volts', 'Bus voltage measured by INA260 sensor in Volts.'),
        'power': ('ina260_power_watts', 'Power measured by INA260 sensor in Watts.'),
    }

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or CollectorRegistry()
        self._gauges = {
            metric: Gauge(name, documentation, Labels._fields, registry=self.registry)
            for metric, (name, documentation) in self.GAUGES.items()
        }

    def publish(self, samples: Iterable[Sample]):
        for sample in samples:
            self._gauges[sample.metric].labels(*sample.labels).set(sample.value)

    def serve(self, port: int, addr: str = '0.0.0.0'):
        """
        Start metrics endpoint in a daemon thread
        """
        start_http_server(port, addr=addr, registry=self.registry)
        logger.info(f'Serving prometheus metrics on {addr}:{port}/metrics')


class LogSink(MetricsSink):
    """
    Used when metrics exposition is disabled
    """

    def publish(self, samples: Iterable[Sample]):
        for sample in samples:
            logger.debug(f'{sample.labels.device} {sample.metric}={sample.value}')
