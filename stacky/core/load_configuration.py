"""
    Find and load configuration files:
    - `config.json` in the user's stacky config directory
    - files specified on the command line, in the order given

    Each file holds a (possibly partial) JSON object in the shape of StackyConfiguration.
    Later files override earlier ones, nested objects are merged.
"""
from typing import Any
import json
import os
import pathlib

from pydantic import ValidationError

from .configuration import StackyConfiguration, merge_config_data
from .logger import DiagnosticsLogger

def read_config_file(config_path: pathlib.Path, log: DiagnosticsLogger) -> dict[str, Any]|None:
    """Read and validate the config file at `config_path`.
    Return the raw JSON object, or None if the file could not be read or is invalid."""
    log.info("loading-config-file", "loading configuration file", config_path)
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except OSError as ex:
        log.error("config-file-read-error", f"could not read configuration file: {ex}", config_path)
        return None
    except ValueError as ex:
        log.error("config-file-json-parse-error", f"could not parse configuration file as JSON: {ex}", config_path)
        return None

    if not isinstance(data, dict):
        log.error("config-file-not-an-object", "skipped configuration file. expected a JSON object at the top level", config_path)
        return None

    try:
        StackyConfiguration.model_validate(data)
    except ValidationError as validation_error:
        log.error("invalid-config-file", f"skipped configuration file. {str(validation_error)}", config_path)
        return None
    return data

def locate_user_stacky_config_dir(log: DiagnosticsLogger) -> pathlib.Path|None:
    """Compute the location of the user's stacky config directory.

    If the XDG_CONFIG_HOME environment variable is set and not empty,
    the user config dir must be located at:
        $XDG_CONFIG_HOME/stacky

    Otherwise use ~/.config/stacky (the XDG-compatible default location).
    """
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", None)
    if xdg_config_home: # set, not empty
        log.detail("using user config dir '$XDG_CONFIG_HOME/stacky' because the XDG_CONFIG_HOME environment variable is set")
        xdg_config_home_path = pathlib.Path(xdg_config_home)
        if not xdg_config_home_path.is_dir():
            log.warning("bad-xdg-config-home", f"will not load user config. XDG_CONFIG_HOME environment variable is set to '{xdg_config_home}' but this is not an existing directory")
            return None
        result = xdg_config_home_path / "stacky"
    else:
        log.detail("checking for user config dir at '$HOME/.config/stacky'")
        result = pathlib.Path.home() / ".config" / "stacky"

    if result.is_dir():
        log.detail(f"using user config dir '{result}'")
        return result
    log.detail("no user config dir found (not a problem unless you thought you'd created one)")
    return None

def locate_user_config_file(stacky_user_config_dir: pathlib.Path, log: DiagnosticsLogger) -> pathlib.Path|None:
    result = stacky_user_config_dir / "config.json"
    if result.is_file():
        log.detail(f"using user config.json file '{result}'")
        return result
    log.detail("no user config.json file found")
    return None

def load_configuration(config_paths: list[pathlib.Path], log: DiagnosticsLogger, use_default_config: bool = True) -> tuple[StackyConfiguration, list[pathlib.Path]]:
    """Load the user config file (unless `use_default_config` is false), then each of `config_paths`.
    Return the resulting configuration and the paths of the files that were applied."""
    candidate_paths: list[pathlib.Path] = []
    if use_default_config:
        if user_config_dir := locate_user_stacky_config_dir(log):
            if user_config_file_path := locate_user_config_file(user_config_dir, log):
                candidate_paths.append(user_config_file_path)
    candidate_paths += config_paths

    merged: dict[str, Any] = {}
    loaded_paths: list[pathlib.Path] = []
    for config_path in candidate_paths:
        data = read_config_file(config_path, log)
        if data is not None:
            merged = merge_config_data(merged, data)
            loaded_paths.append(config_path)

    return StackyConfiguration.model_validate(merged), loaded_paths
