"""Abstract base class for lazily-initialized external service adapters."""

from abc import ABC, abstractmethod
import logging
import threading

logger = logging.getLogger(__name__)


class BaseExternalService(ABC):
    """Base class for adapters around external collaborators.

    Subclasses must implement:
        - service_name: identifier used in the service registry
        - load(): connect / load model weights (blocking, called once)

    ensure_loaded() may be called from several worker threads at once;
    load() still runs exactly once per instance.
    """

    service_name: str = ""
    _loaded: bool = False

    def __init__(self) -> None:
        self._load_lock = threading.Lock()

    @abstractmethod
    def load(self) -> None:
        """Open clients or load model artifacts. Called once by ensure_loaded()."""

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def ensure_loaded(self) -> None:
        """Load the service if not already loaded."""
        if self._loaded:
            return
        with self._load_lock:
            if self._loaded:
                return
            logger.info("Loading service: %s", self.service_name)
            self.load()
            self._loaded = True
            logger.info("Service loaded: %s", self.service_name)
