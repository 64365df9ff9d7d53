"""Manages configuration

It's effectively a singleton using module imports.
"""
from os import path
from types import SimpleNamespace
from importlib.resources import files
import getpass
import logging

import yaml

log = logging.getLogger(__name__)
RTSPREP_CONF_PATH = f'/home/{getpass.getuser()}/rtsprep-conf.yml'


def load_yaml(p: str) -> dict:
    with open(p, 'r') as f:
        return yaml.safe_load(f)


def default_config_path() -> str:
    return str(files('rtsprep').joinpath('default-rtsprep-conf.yml'))


if path.isfile(RTSPREP_CONF_PATH):
    config = load_yaml(RTSPREP_CONF_PATH)
else:
    log.info(f'{RTSPREP_CONF_PATH} not found. Using default configuration.')
    config = load_yaml(default_config_path())

queue_config = SimpleNamespace(**config['queue'])
telescope_config = SimpleNamespace(**config['telescope'])
reflag_config = SimpleNamespace(**config['reflag'])
conversion_config = SimpleNamespace(**config['conversion'])
beam_config = SimpleNamespace(**config['beam'])
