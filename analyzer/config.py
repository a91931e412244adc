"""
Analyzer configuration.

Settings are read from a JSON file looked up in the working directory and
then in the user's home directory, the same way model registries are found:

    pyanalyze.json
    ~/.pyanalyze/config.json

When no file exists the defaults below apply.
"""
import json
import os
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from analyzer.errors import AnalyzerError

CONFIG_FILE = "pyanalyze.json"
USER_CONFIG_FILE = os.path.join("~", ".pyanalyze", "config.json")


class AnalyzerConfig(BaseModel):
    """Tunable behaviour of the lexer and parser."""
    tab_width: int = 8
    builtin_functions: List[str] = Field(default_factory=lambda: ["print"])
    type_hints: List[str] = Field(
        default_factory=lambda: ["int", "float", "str", "bool", "complex"]
    )
    # Read every statement up to the closing DEDENT instead of exactly one.
    multi_statement_blocks: bool = False
    # Reject 'break'/'continue' outside of a loop body.
    strict_loop_control: bool = False

    @field_validator("tab_width")
    @classmethod
    def _positive_tab_width(cls, value):
        if value < 1:
            raise ValueError("tab_width must be at least 1")
        return value


def config_search_paths():
    return [CONFIG_FILE, os.path.expanduser(USER_CONFIG_FILE)]


def load_config(path: Optional[str] = None) -> AnalyzerConfig:
    """Load the analyzer configuration.

    Args:
        path: Explicit config file. When omitted the search paths are tried
            in order and the defaults are used if none exists.

    Raises:
        AnalyzerError: If an explicit path is missing, or a config file is
            not valid JSON or holds invalid settings.
    """
    if path is not None:
        if not os.path.exists(path):
            raise AnalyzerError(
                f"Config file not found: {path}",
                suggestion=f"Run 'pyanalyze init' to create {CONFIG_FILE}",
            )
        return _read_config(path)

    for candidate in config_search_paths():
        if os.path.exists(candidate):
            return _read_config(candidate)
    return AnalyzerConfig()


def _read_config(path):
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise AnalyzerError(
            f"Config file {path} is not valid JSON: {e.msg}",
            line_number=e.lineno,
            column=e.colno,
        ) from e
    try:
        return AnalyzerConfig.model_validate(data)
    except ValidationError as e:
        raise AnalyzerError(
            f"Invalid settings in {path}: {e.error_count()} error(s)",
            context=str(e),
            suggestion="Compare the file against 'pyanalyze init' output",
        ) from e


def write_default_config(path=CONFIG_FILE):
    """Write the default configuration as JSON and return the path."""
    with open(path, "w") as f:
        json.dump(AnalyzerConfig().model_dump(), f, indent=2)
    return path
