"""
Nimbus - an endlessly evolving harmony engine driven by the weather.

Nimbus turns slowly-changing environmental readings into harmony that never
settles into a loop. An external mapper reduces the weather to a key root, a
mode, a category (``"clear"``, ``"rain"``, ``"storm"``, ...) and a normalised
air pressure; Nimbus turns that context into chord progressions and plays them
in musical time, announcing every chord change to whatever voices, bass lines,
arpeggios or displays are listening. It produces no sound itself.

What it does:

- **Mood-driven Markov harmony.** Each weather category selects a mood with
  its own starting-degree weights, 7×7 transition table and progression
  length range. Progressions are random walks over scale degrees with no
  immediate repeats, so every cycle is new.
- **Seventh chords in any mode.** Diatonic maj7/m7/7/m7b5 chords are built by
  stacking thirds in ionian, dorian, mixolydian, aeolian, lydian, locrian and
  the harmonic/melodic minors.
- **Secondary dominants.** Brief V7/x chords are injected before ii, IV, V
  and vi, at a rate set by the mood, while melodic pools stay in key.
- **Smooth voice leading.** Bass inversions minimise leaps; pad voicings move
  each voice to its nearest octave inside a fixed register.
- **Glitch-free playback.** A state machine advances chords on bar
  boundaries, queues progression changes until the current cycle ends (or
  swaps immediately for dramatic changes), shortens secondary dominants, and
  pauses and resumes without retriggering.
- **Host-agnostic timing.** The player talks to an abstract clock: a
  deterministic ``ManualClock`` for tests and offline use, or a real-time
  ``AsyncioClock``.

Minimal example:

    ```python
    import nimbus

    clock = nimbus.ManualClock()
    harmony = nimbus.HarmonicState("D", "dorian", category="rain", pressure_norm=0.3, clock=clock)
    harmony.on("harmony", lambda update: print(update.change.chord.name(), update.voicing))

    harmony.start()           # first chord now
    clock.advance_bars(16)    # the next few chord changes
    harmony.set_category("storm")
    ```

Package-level exports: ``HarmonicState``, ``ProgressionPlayer``,
``generate_progression``, ``ManualClock``, ``AsyncioClock``.
"""

import nimbus.clock
import nimbus.harmonic_state
import nimbus.player
import nimbus.progression


AsyncioClock = nimbus.clock.AsyncioClock
HarmonicState = nimbus.harmonic_state.HarmonicState
ManualClock = nimbus.clock.ManualClock
ProgressionPlayer = nimbus.player.ProgressionPlayer
generate_progression = nimbus.progression.generate_progression
