from typing import Dict, List

import pytest

from ina260_exporter import codec
from ina260_exporter.bus import I2CBus
from ina260_exporter.ina260_service import INA260Session, INA260_ADDRESS
from ina260_exporter.metrics_service import Labels, MetricsSink
from ina260_exporter.multiplexer import TCA9548A_ADDRESS

REMOTE_IO_ERROR = 121


class FakeI2C:
    """
    busio.I2C stand-in: TCA9548A at 0x70 routing to INA260s on its channels.

    Records every transaction as (kind, address, bytes written).
    """
    def __init__(self, multiplexer_address: int = TCA9548A_ADDRESS):
        self.multiplexer_address = multiplexer_address
        self.mask = 0
        self.sensors: Dict[int, Dict[int, int]] = {}
        self.failures: Dict[int, List[Exception]] = {}
        self.transactions = []
        self.deinitialized = False
        self._locked = False

    def add_sensor(self, channel: int, **registers: int) -> Dict[int, int]:
        values = {
            codec.MANUFACTURER_ID: 0x5449,
            codec.DEVICE_ID: 0x2260,
            codec.CURRENT: 0x0000,
            codec.BUS_VOLTAGE: 0x0000,
            codec.POWER: 0x0000,
        }
        names = {
            'manufacturer_id': codec.MANUFACTURER_ID,
            'device_id': codec.DEVICE_ID,
            'current': codec.CURRENT,
            'voltage': codec.BUS_VOLTAGE,
            'power': codec.POWER,
        }
        for name, value in registers.items():
            values[names[name]] = value
        self.sensors[channel] = values
        return values

    def fail(self, register: int, error: Exception = None, times: int = 1):
        error = error or OSError(REMOTE_IO_ERROR, 'Remote I/O error')
        self.failures.setdefault(register, []).extend([error] * times)

    def try_lock(self) -> bool:
        if self._locked:
            return False
        self._locked = True
        return True

    def unlock(self):
        self._locked = False

    def writeto(self, address, buffer, *, start=0, end=None):
        data = bytes(buffer[start:end])
        self.transactions.append(('write', address, data))

        if address != self.multiplexer_address:
            raise OSError(REMOTE_IO_ERROR, 'Remote I/O error')
        self.mask = data[0]

    def writeto_then_readfrom(self, address, buffer_out, buffer_in, *, out_start=0, out_end=None, in_start=0, in_end=None):
        data = bytes(buffer_out[out_start:out_end])
        self.transactions.append(('write_then_read', address, data))

        routed = [channel for channel in sorted(self.sensors) if self.mask & (1 << channel)]
        if address != INA260_ADDRESS or not routed:
            raise OSError(REMOTE_IO_ERROR, 'Remote I/O error')

        register = data[0]
        if self.failures.get(register):
            raise self.failures[register].pop(0)

        if in_end is None:
            in_end = len(buffer_in)
        buffer_in[in_start:in_end] = self.sensors[routed[0]][register].to_bytes(2, 'big')

    def deinit(self):
        self.deinitialized = True

    @property
    def register_reads(self) -> List[int]:
        return [data[0] for kind, address, data in self.transactions if kind == 'write_then_read']


class RecordingSink(MetricsSink):
    def __init__(self):
        self.samples = []

    def publish(self, samples):
        self.samples.extend(samples)


@pytest.fixture
def i2c():
    return FakeI2C()


@pytest.fixture
def bus(i2c):
    return I2CBus(i2c)


@pytest.fixture
def selected_bus(i2c, bus):
    """
    Bus with a default INA260 on channel 0, already selected
    """
    i2c.add_sensor(0)
    i2c.mask = 0x01
    return bus


@pytest.fixture
def session(selected_bus):
    return INA260Session(selected_bus)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def labels():
    return Labels(hostname='pi', device='tca0x70_ch0_ina260')
