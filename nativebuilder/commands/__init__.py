from .clean import clean
from .config import config
from .doctor import doctor
from .init import init
from .list_sdks import list_sdks
from .log import log
from .plan import plan, targets
from .version import version

__all__ = ["clean", "config", "doctor", "init", "list_sdks", "log", "plan", "targets", "version"]
