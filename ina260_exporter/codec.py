"""
INA260 register access and unit conversion.

All registers are 16 bit big-endian. Current is two's complement, the sensor
measures in both directions. Voltage and power are unsigned.
"""
from adafruit_bus_device.i2c_device import I2CDevice

CONFIG = 0x00
CURRENT = 0x01
BUS_VOLTAGE = 0x02
POWER = 0x03
MANUFACTURER_ID = 0xFE
DEVICE_ID = 0xFF

VOLTAGE_LSB_MV = 1.25
CURRENT_LSB_MA = 1.25
POWER_LSB_MW = 10.0


def read_register(device: I2CDevice, register: int) -> int:
    """
    Write register address, read two bytes back in one transaction.
    """
    out_buffer = bytes([register])
    in_buffer = bytearray(2)
    with device:
        device.write_then_readinto(out_buffer, in_buffer)
    return int.from_bytes(in_buffer, 'big')


def to_signed16(raw: int) -> int:
    raw &= 0xFFFF
    if raw & 0x8000:
        return raw - 0x10000
    return raw


def decode_voltage(raw: int) -> float:
    """
    Bus voltage register -> Volts
    """
    return raw * VOLTAGE_LSB_MV / 1000.0


def decode_current(raw: int) -> float:
    """
    Current register -> Amperes, negative when current flows backwards
    """
    return to_signed16(raw) * CURRENT_LSB_MA / 1000.0


def decode_power(raw: int) -> float:
    """
    Power register -> Watts
    """
    return raw * POWER_LSB_MW / 1000.0
