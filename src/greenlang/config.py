"""
Runtime configuration for the evaluator.

Defaults suit embedding. ``RuntimeConfig.from_env()`` lets a host override
them through ``GREENLANG_*`` environment variables, and
``RuntimeConfig.from_file()`` reads them from a YAML or JSON settings file:

    strict_resume: false
    max_call_depth: 64
"""

import json
import os
import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Union

import yaml


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _stdout_line(text: str) -> None:
    sys.stdout.write(text + "\n")


@dataclass
class RuntimeConfig:
    """Settings for one interpreter."""

    # Line sink for the print built-in; None writes to stdout
    output: Optional[Callable[[str], None]] = None

    # Record @process events for the diagram generator
    trace_process: bool = True

    # Resuming a completed instance raises IllegalStateError when True,
    # and is a no-op that reports a warning when False
    strict_resume: bool = True

    max_call_depth: int = 100

    def write_line(self, text: str) -> None:
        """Send one line of program output to the configured sink."""
        (self.output or _stdout_line)(text)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None,
                 **overrides) -> "RuntimeConfig":
        """Build a config from ``GREENLANG_*`` variables plus keyword overrides."""
        env = os.environ if environ is None else environ
        config = cls()
        if "GREENLANG_STRICT_RESUME" in env:
            config.strict_resume = _env_bool(env["GREENLANG_STRICT_RESUME"])
        if "GREENLANG_TRACE_PROCESS" in env:
            config.trace_process = _env_bool(env["GREENLANG_TRACE_PROCESS"])
        if "GREENLANG_MAX_CALL_DEPTH" in env:
            config.max_call_depth = int(env["GREENLANG_MAX_CALL_DEPTH"])
        for key, value in overrides.items():
            if not hasattr(config, key):
                raise KeyError(f"unknown runtime setting '{key}'")
            setattr(config, key, value)
        return config

    @classmethod
    def from_file(cls, path: Union[Path, str], **overrides) -> "RuntimeConfig":
        """Build a config from a YAML (or ``.json``) settings file plus overrides."""
        settings_path = Path(path)
        if not settings_path.exists():
            raise FileNotFoundError(f"settings file not found: {settings_path}")
        with settings_path.open("r", encoding="utf-8") as fp:
            if settings_path.suffix == ".json":
                data = json.load(fp)
            else:
                data = yaml.safe_load(fp) or {}
        if not isinstance(data, dict):
            raise ValueError(f"settings file must hold a mapping: {settings_path}")
        data.update(overrides)
        return cls.from_env(environ={}, **data)

    def to_dict(self) -> Dict[str, Any]:
        """Serializable settings (the output sink is omitted)."""
        return {f.name: getattr(self, f.name) for f in fields(self) if f.name != "output"}
