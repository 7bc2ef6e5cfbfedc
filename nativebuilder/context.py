import os
import threading

from .catalog import Catalog
from .config import ProjectSettings
from .platforms import detect_host_platform

_MISSING = object()


class PlanningContext:
    """Everything one planning run reads, plus its run-once memo.

    Constructed once when planning starts and passed to every resolution
    call. Nothing in here outlives the run.
    """

    def __init__(self, catalog=None, manifest=None, settings=None, host_platform=None, host_path=None):
        self.catalog = catalog if catalog is not None else Catalog()
        self.manifest = dict(manifest or {})
        self.settings = settings if settings is not None else ProjectSettings()
        self.host_platform = host_platform if host_platform is not None else detect_host_platform()
        if host_path is None:
            host_path = [p for p in os.environ.get("PATH", "").split(os.pathsep) if p]
        self.host_path = tuple(host_path)
        self._once_results = {}
        self._once_lock = threading.Lock()

    def execute_once(self, key, func):
        """Run ``func`` the first time ``key`` is seen and cache its result.

        Later calls with the same key return the cached value without calling
        ``func`` again, so its side effects happen at most once per run.
        """
        with self._once_lock:
            result = self._once_results.get(key, _MISSING)
            if result is _MISSING:
                result = func()
                self._once_results[key] = result
            return result
