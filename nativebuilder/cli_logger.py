import datetime
import sys
import traceback
import os
from colorama import Fore, Style, init

# Initialize Colorama
init(autoreset=True)

LOG_DIR = os.environ.get(
    "NATIVEBUILDER_LOG_DIR",
    os.path.join(os.path.expanduser("~"), ".nativebuilder", "logs"),
)

# level -> (console colour, marker)
_LEVEL_STYLES = {
    "": (Fore.CYAN, ""),
    "INFO": (Fore.CYAN, ""),
    "SUCCESS": (Fore.GREEN, "✓ "),
    "WARNING": (Fore.YELLOW, "⚠ "),
    "ERROR": (Fore.RED, "✖ "),
    "DEBUG": (Fore.WHITE + Style.DIM, ""),
    "TRACEBACK": (Fore.RED, ">> "),
}


class Logger:
    """Console + per-run log file.

    The log file gets plain text records; colour codes only go to the console.
    Debug records always reach the file but are shown on the console only
    when ``verbose`` is set (``--verbose`` or ``NATIVEBUILDER_DEBUG``).
    """

    def __init__(self, log_dir=LOG_DIR, verbose=None):
        os.makedirs(log_dir, exist_ok=True)
        self.log_file = os.path.join(
            log_dir,
            f"nativebuilder_{datetime.datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
        )
        if verbose is None:
            verbose = bool(os.environ.get("NATIVEBUILDER_DEBUG"))
        self.verbose = verbose

    def _get_timestamp(self):
        return datetime.datetime.now().strftime("%H:%M:%S")

    def _log(self, level, message, stream=sys.stdout, indent=0, marker=True, show_timestamp=True, console=True):
        color, mark = _LEVEL_STYLES[level]
        text = f"{' ' * indent}{mark if marker else ''}{message}"
        if show_timestamp:
            timestamp = self._get_timestamp()
            record = f"[{timestamp}] [{level}] {text}\n"
            line = f"{color}{Style.BRIGHT}[{timestamp}]{Style.RESET_ALL} {color}{text}{Style.RESET_ALL}"
        else:
            record = f"[{level}] {text}\n" if level else f"{text}\n"
            line = f"{color}{text}{Style.RESET_ALL}"

        if console:
            print(line, file=stream)
        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write(record)

    def info(self, message):
        self._log("INFO", message)

    def step_info(self, message, indent=0):
        self._log("", message, indent=indent, show_timestamp=False)

    def success(self, message):
        self._log("SUCCESS", message)

    def warning(self, message):
        # Resolution diagnostics span several lines; keep their layout.
        lines = str(message).rstrip("\n").splitlines() or [""]
        self._log("WARNING", lines[0], stream=sys.stderr)
        for line in lines[1:]:
            self._log("WARNING", line, stream=sys.stderr, marker=False, show_timestamp=False)

    def error(self, message):
        self._log("ERROR", message, stream=sys.stderr)

    def debug(self, message):
        self._log("DEBUG", message, console=self.verbose)

    def exception(self, exc_type, exc_value, exc_traceback):
        self.error(f"An unhandled exception occurred: {exc_value}")
        for line in traceback.format_exception(exc_type, exc_value, exc_traceback):
            for sub_line in line.splitlines():
                if sub_line.strip():
                    self._log("TRACEBACK", sub_line, stream=sys.stderr)


logger = Logger()

def get_latest_log_file():
    """Return the path to the latest log file."""
    log_files = [os.path.join(LOG_DIR, f) for f in os.listdir(LOG_DIR) if f.endswith(".log")]
    if not log_files:
        return None
    return max(log_files, key=os.path.getctime)
