import datetime
import logging

from ina260_exporter.ina260_service import INA260Session
from ina260_exporter.metrics_service import Labels, MetricsSink
from ina260_exporter.util import ServiceWorker

logger = logging.getLogger(__name__)


class PollingServiceWorker(ServiceWorker):
    """
    Polling service reads INA260 measurement every `delay` and forwards it to metrics sink.

    A failed read skips the whole cycle, nothing is published for it.
    There is no timeout on bus transactions, a wedged bus blocks this loop.
    """

    delay = datetime.timedelta(seconds=1)

    def __init__(self, session: INA260Session, sink: MetricsSink, labels: Labels, delay: datetime.timedelta = None):
        self._session = session
        self._sink = sink
        self._labels = labels

        if delay is not None:
            self.delay = delay

        super().__init__()

    def trigger(self):
        measurement = self._session.read_measurement()
        logger.info(f'Voltage: {measurement.voltage:.3f} V, Current: {measurement.current:.3f} A, Power: {measurement.power:.3f} W')
        self._sink.publish(measurement.samples(self._labels))
