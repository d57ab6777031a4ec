import os
import datetime
import threading
import json

from rich.console import Console

from pkgledger.modules.config import config as default_config


class Logger:
    LEVELS = {
        "debug": 10,
        "info": 20,
        "success": 25,
        "warning": 30,
        "error": 40,
    }

    LOG_STYLES = {
        "DEBUG": "dim",
        "INFO": "blue",
        "SUCCESS": "green",
        "WARNING": "yellow",
    }

    def __init__(self, name="pkgledger", cfg=None):
        cfg = cfg or default_config
        self.name = name
        self.log_file = os.path.expanduser(
            cfg.get("logging", "log_file", fallback="~/.cache/pkgledger/pkgledger.log"))
        self.history_file = os.path.expanduser(
            cfg.get("logging", "history_file", fallback="~/.cache/pkgledger/history.log"))
        self.color_output = cfg.getboolean("logging", "color_output", fallback=True)
        self.log_to_file = cfg.getboolean("logging", "log_to_file", fallback=False)
        self.log_to_console = cfg.getboolean("logging", "log_to_console", fallback=True)
        self.use_utc = cfg.getboolean("logging", "timestamp_utc", fallback=False)
        self.log_format = cfg.get("logging", "log_format", fallback="text").lower()
        self.max_log_size_kb = cfg.getint("logging", "max_log_size_kb", fallback=0)

        level_str = cfg.get("logging", "level", fallback="warning").lower()
        self.min_level = self.LEVELS.get(level_str, 30)

        if self.log_to_file:
            self._ensure_dir(self.log_file)
            self._ensure_dir(self.history_file)

        self.console = Console(stderr=True, no_color=not self.color_output, highlight=False)
        self._lock = threading.Lock()

    def _ensure_dir(self, filepath):
        dirpath = os.path.dirname(filepath)
        if not dirpath:
            return
        try:
            os.makedirs(dirpath, exist_ok=True)
        except OSError as e:
            self.log_to_file = False
            self.console.print(f"Logger: failed to create log directory {dirpath}: {e}", markup=False)

    def _get_timestamp(self):
        if self.use_utc:
            now = datetime.datetime.now(datetime.timezone.utc)
        else:
            now = datetime.datetime.now()
        return now.strftime("%Y-%m-%d %H:%M:%S")

    def _rotate_if_needed(self, filepath):
        if self.max_log_size_kb <= 0:
            return
        if os.path.exists(filepath) and os.path.getsize(filepath) > self.max_log_size_kb * 1024:
            os.replace(filepath, filepath + ".1")

    def _write_file(self, filepath, message):
        if not self.log_to_file:
            return
        try:
            self._rotate_if_needed(filepath)
            with open(filepath, "a", encoding="utf-8") as f:
                f.write(message + "\n")
        except OSError as e:
            self.console.print(f"Logger: failed to write log file {filepath}: {e}", markup=False)

    def _format_text(self, level, message):
        timestamp = self._get_timestamp()
        return f"[{timestamp}] [{self.name}] [{level}] {message}"

    def _format_json(self, level, message):
        return json.dumps({
            "timestamp": self._get_timestamp(),
            "logger": self.name,
            "level": level,
            "message": message
        })

    def _format_message(self, level, message):
        if self.log_format == "json":
            return self._format_json(level, message)
        return self._format_text(level, message)

    def _log_to_console(self, formatted, level):
        if not self.log_to_console:
            return
        style = None
        if self.color_output and self.log_format == "text":
            style = self.LOG_STYLES.get(level.upper())
        self.console.print(formatted, style=style, markup=False, soft_wrap=True)

    def _should_log(self, level):
        return self.LEVELS.get(level.lower(), 0) >= self.min_level

    def _record_history(self, formatted):
        self._write_file(self.history_file, formatted)

    def log(self, level, message, *, to_history=False):
        level = level.upper()
        formatted = self._format_message(level, message)
        with self._lock:
            # history ignora o nível mínimo: eventos de estado sempre são registrados
            if to_history:
                self._record_history(formatted)
            if not self._should_log(level):
                return
            self._log_to_console(formatted, level)
            self._write_file(self.log_file, formatted)

    def debug(self, message):
        self.log("DEBUG", message)

    def info(self, message, *, to_history=False):
        self.log("INFO", message, to_history=to_history)

    def success(self, message, *, to_history=False):
        self.log("SUCCESS", message, to_history=to_history)

    def warning(self, message, *, to_history=False):
        self.log("WARNING", message, to_history=to_history)

