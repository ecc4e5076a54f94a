"""YAML configuration.

A configuration file has three optional sections::

	harmony:
	  root: D
	  mode: dorian
	  category: clear
	  pressure_norm: 0.5
	  seed: 42          # omit for a different piece every run

	clock:
	  bpm: 72

	moods:
	  path: my_moods.yaml   # alternative mood tables, same format as nimbus/data/moods.yaml

Missing files and missing keys fall back to ``DEFAULT_CONFIG``.
"""

import copy
import logging
import os
import typing

import yaml


logger = logging.getLogger(__name__)


DEFAULT_CONFIG: typing.Dict[str, typing.Dict[str, typing.Any]] = {
	"harmony": {
		"root": "C",
		"mode": "ionian",
		"category": "clear",
		"pressure_norm": 0.5,
		"seed": None,
	},
	"clock": {
		"bpm": 72,
	},
	"moods": {
		"path": None,
	},
}


def merge_config (overrides: typing.Optional[typing.Mapping[str, typing.Any]]) -> typing.Dict[str, typing.Dict[str, typing.Any]]:

	"""Return ``DEFAULT_CONFIG`` with each section updated from ``overrides``.

	Unknown sections are kept as-is so callers can carry their own settings.
	"""

	config = copy.deepcopy(DEFAULT_CONFIG)

	if not overrides:
		return config

	for section, values in overrides.items():

		if not isinstance(values, dict):
			raise ValueError(f"Config section {section!r} must be a mapping")

		config.setdefault(section, {}).update(values)

	return config


def load_config (config_path: str = "nimbus.yaml") -> typing.Dict[str, typing.Dict[str, typing.Any]]:

	"""
	Load configuration from a YAML file, merged over the defaults.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return merge_config(None)

	with open(config_path, "r") as f:
		return merge_config(yaml.safe_load(f))
