import pytest

from ina260_exporter.ina260_service import INA260Session
from ina260_exporter.metrics_service import Labels, PrometheusSink, device_label
from ina260_exporter.multiplexer import select_channel
from ina260_exporter.polling_service import PollingServiceWorker


def test_sensor_on_channel_3_is_exported(i2c, bus):
    i2c.add_sensor(0, current=0x7FFF)  # another INA260 at the same address on channel 0
    i2c.add_sensor(3, current=0x0010, voltage=0x0190, power=0x0064)

    select_channel(bus, 0x70, 3)
    session = INA260Session(bus)
    assert session.identify().is_expected

    sink = PrometheusSink()
    labels = Labels(hostname='pi', device=device_label(0x70, 3))
    PollingServiceWorker(session, sink, labels).trigger()

    label_values = {'hostname': 'pi', 'device': 'tca0x70_ch3_ina260'}
    assert sink.registry.get_sample_value('ina260_current_amperes', label_values) == pytest.approx(0.02)
    assert sink.registry.get_sample_value('ina260_voltage_volts', label_values) == 0.5
    assert sink.registry.get_sample_value('ina260_power_watts', label_values) == 1.0
