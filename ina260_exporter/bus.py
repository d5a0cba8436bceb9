import logging
from threading import RLock

from adafruit_bus_device.i2c_device import I2CDevice

logger = logging.getLogger(__name__)


class I2CBus:
    """
    Exclusive owner of the physical I2C bus. Created once at startup, closed at shutdown.

    `lock` guards multi-transaction sequences. The TCA9548A channel register is shared
    hardware state: whoever selects a channel must hold the lock until its device
    transactions on that channel are done, otherwise a second poller could route them
    to another channel.
    """

    def __init__(self, i2c):
        self._i2c = i2c
        self._closed = False
        self.lock = RLock()

    @classmethod
    def open(cls) -> 'I2CBus':
        import board

        i2c = board.I2C()  # uses board.SCL and board.SDA
        logger.info(f'Initialized I2C bus: {i2c}')
        return cls(i2c)

    def device(self, address: int) -> I2CDevice:
        """
        Return device handle for 7-bit `address`. Does not touch the bus.
        """
        if self._closed:
            raise OSError('I2C bus is closed')
        return I2CDevice(self._i2c, address, probe=False)

    def close(self):
        if self._closed:
            return
        self._closed = True
        deinit = getattr(self._i2c, 'deinit', None)
        if deinit is not None:
            deinit()
        logger.info('I2C bus closed')

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> 'I2CBus':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
