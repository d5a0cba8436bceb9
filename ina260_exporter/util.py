import abc
import datetime
import logging
import time

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """
    Invalid configuration value. Always raised before any bus transaction is attempted.
    """


class ServiceWorker(metaclass=abc.ABCMeta):
    """
    Service worker provides a scaffolding for user logic to be ran every `delay` seconds.
    Tracks heartbeat and supports graceful shutdown.

    A failed trigger is logged and skipped, the next attempt happens after the same delay.
    There is no backoff and no retry ceiling.
    """

    delay: datetime.timedelta = datetime.timedelta(seconds=5)

    def __init__(self):
        self._heartbeat = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)  # very old heartbeat as default
        self._shutdown = False

    def run(self):
        """
        Run the loop
        """
        while not self._shutdown:
            try:
                self.trigger()
                self._heartbeat = datetime.datetime.now(datetime.timezone.utc)  # Update heartbeat only if trigger executed successfully
            except Exception:
                logger.exception(f'Unhandled error in {self.__class__.__name__}.trigger, last success: {self.heartbeat:%Y-%m-%d %H:%M:%S}')

            time.sleep(self.delay.total_seconds())

    def shutdown(self):
        """
        Set shutdown flag
        """
        self._shutdown = True

    @property
    def heartbeat(self) -> datetime.datetime:
        """
        Return timestamp of last heartbeat
        """
        return self._heartbeat

    @abc.abstractmethod
    def trigger(self):
        """
        User code runs here
        """
        raise NotImplementedError()
