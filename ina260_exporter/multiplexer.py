import logging

from ina260_exporter.bus import I2CBus
from ina260_exporter.util import ConfigError

logger = logging.getLogger(__name__)

TCA9548A_ADDRESS = 0x70
CHANNELS = 8


def validate_address(address: int) -> int:
    """
    Check `address` is a 7-bit I2C address
    """
    if isinstance(address, bool) or not isinstance(address, int) or not 0 <= address <= 0x7F:
        raise ConfigError(f'I2C address must be between 0x00 and 0x7F, got {address!r}')
    return address


def channel_mask(channel: int) -> int:
    """
    Return TCA9548A control byte with only `channel` enabled
    """
    if isinstance(channel, bool) or not isinstance(channel, int) or not 0 <= channel < CHANNELS:
        raise ConfigError(f'Channel number must be between 0 and {CHANNELS - 1}, got {channel!r}')
    return 1 << channel


def select_mask(bus: I2CBus, address: int, mask: int):
    """
    Write raw control byte to the multiplexer.

    The TCA9548A has no register address, the single byte written is the channel mask.
    The mask is absolute: channels not set in it are disconnected. Several bits fan
    out to several channels at once, 0 disconnects everything.

    Routing stays in effect for every later transaction on the bus until the next
    select, so callers sharing the bus must hold `bus.lock` around select + reads.
    """
    validate_address(address)
    if isinstance(mask, bool) or not isinstance(mask, int) or not 0 <= mask <= 0xFF:
        raise ConfigError(f'Channel mask must be between 0x00 and 0xFF, got {mask!r}')

    device = bus.device(address)
    with bus.lock, device:
        device.write(bytes([mask]))


def select_channel(bus: I2CBus, address: int, channel: int):
    mask = channel_mask(channel)
    select_mask(bus, address, mask)
    logger.info(f'TCA9548A at {address:#x}: selected channel {channel}')
