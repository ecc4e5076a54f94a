"""Constants for Nimbus.

This package contains two sets of constants:

- ``nimbus.constants.pulses`` - Pulse-based timing used by the musical clocks
- ``nimbus.constants.registers`` - Octaves and MIDI bounds for voicings and note pools

Pulse constants are re-exported here, so ``nimbus.constants.PULSES_PER_BAR``
works without importing the submodule.
"""

# These match the values in nimbus.constants.pulses.

PULSES_PER_QUARTER_NOTE = 24
BEATS_PER_BAR = 4
PULSES_PER_BAR = PULSES_PER_QUARTER_NOTE * BEATS_PER_BAR
