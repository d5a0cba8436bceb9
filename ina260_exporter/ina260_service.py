import logging
from typing import List, NamedTuple

from ina260_exporter import codec
from ina260_exporter.bus import I2CBus
from ina260_exporter.metrics_service import Labels, Sample

logger = logging.getLogger(__name__)

INA260_ADDRESS = 0x40

TI_MANUFACTURER_ID = 0x5449
INA260_DEVICE_ID = 0x2260


class DeviceIdentity(NamedTuple):
    manufacturer_id: int
    device_id: int

    @property
    def is_expected(self) -> bool:
        return self.manufacturer_id == TI_MANUFACTURER_ID and self.device_id == INA260_DEVICE_ID


class Measurement(NamedTuple):
    voltage: float  # Volts
    current: float  # Amperes
    power: float  # Watts

    def samples(self, labels: Labels) -> List[Sample]:
        return [
            Sample('current', labels, self.current),
            Sample('voltage', labels, self.voltage),
            Sample('power', labels, self.power),
        ]


class INA260Session:
    """
    INA260 power monitor behind the currently selected multiplexer channel.

    Every INA260 answers at 0x40, so the session talks to whatever channel the
    multiplexer routes to at the moment of each transaction.
    """
    def __init__(self, bus: I2CBus, address: int = INA260_ADDRESS):
        self._bus = bus
        self._device = bus.device(address)
        self.address = address

    def read_register(self, register: int) -> int:
        return codec.read_register(self._device, register)

    def identify(self) -> DeviceIdentity:
        """
        Read manufacturer and device ID.

        Mismatch only produces a warning: some clones report other IDs and still work.
        """
        with self._bus.lock:
            identity = DeviceIdentity(
                manufacturer_id=self.read_register(codec.MANUFACTURER_ID),
                device_id=self.read_register(codec.DEVICE_ID),
            )
        if identity.is_expected:
            logger.info(f'INA260: Manufacturer ID: {identity.manufacturer_id:#06x}, Device ID: {identity.device_id:#06x}')
        else:
            logger.warning(f'Unexpected INA260 Manufacturer ID or Device ID. '
                           f'Expected {TI_MANUFACTURER_ID:#06x}/{INA260_DEVICE_ID:#06x}, '
                           f'got {identity.manufacturer_id:#06x}/{identity.device_id:#06x}')
        return identity

    def read_measurement(self) -> Measurement:
        """
        Read current, bus voltage and power, in that order.

        Three separate transactions, so the values are not from the same instant.
        Any failed read raises and nothing is returned.
        """
        with self._bus.lock:
            raw_current = self.read_register(codec.CURRENT)
            raw_voltage = self.read_register(codec.BUS_VOLTAGE)
            raw_power = self.read_register(codec.POWER)

        return Measurement(
            voltage=codec.decode_voltage(raw_voltage),
            current=codec.decode_current(raw_current),
            power=codec.decode_power(raw_power),
        )
