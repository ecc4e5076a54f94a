import os
import random
import typing

import pytest
import yaml

import nimbus.clock
import nimbus.harmonic_state
import nimbus.moods
import nimbus.player
import nimbus.progression


def _cycle_bars (progression: nimbus.progression.Progression) -> int:

	"""Bars one full pass through a progression takes, with halved secondary dominants."""

	half = max(1, nimbus.progression.round_half_up(progression.harmonic_rhythm / 2))

	return sum(half if chord.is_secondary_dominant else progression.harmonic_rhythm for chord in progression.chords)


@pytest.fixture
def harmony (clock: nimbus.clock.ManualClock) -> nimbus.harmonic_state.HarmonicState:

	"""A seeded session in D dorian on the manual clock."""

	return nimbus.harmonic_state.HarmonicState("D", "dorian", category="clear", pressure_norm=0.5, clock=clock, rng=random.Random(51))


@pytest.fixture
def updates (harmony: nimbus.harmonic_state.HarmonicState) -> typing.List[nimbus.harmonic_state.HarmonyUpdate]:

	received: typing.List[nimbus.harmonic_state.HarmonyUpdate] = []
	harmony.on(nimbus.harmonic_state.HARMONY_EVENT, received.append)

	return received


def test_nothing_plays_before_start (harmony, updates, clock) -> None:

	clock.advance_bars(32)

	assert updates == []
	assert harmony.player.current_progression is None


def test_start_announces_voiced_first_chord (harmony, updates) -> None:

	harmony.start()

	assert len(updates) == 1

	update = updates[0]
	progression = harmony.player.current_progression

	assert update.change.index == 0
	assert update.change.chord is progression.chords[0]
	assert update.voicing == tuple(update.change.chord.notes)
	assert harmony.current_voicing == update.voicing
	assert progression.root == "D"
	assert progression.mode == "dorian"


def test_voicings_stay_in_register (harmony, updates, clock) -> None:

	harmony.start()
	clock.advance_bars(200)

	assert len(updates) > 20

	for update in updates:
		assert all(48 <= pitch <= 84 for pitch in update.voicing)


def test_cycle_end_generates_fresh_progression (harmony, clock) -> None:

	"""With nothing queued, the end of a cycle brings a newly generated progression."""

	harmony.start()
	first = harmony.player.current_progression

	clock.advance_bars(_cycle_bars(first))

	assert harmony.player.current_progression is not first
	assert harmony.player.position[0] == 0


def test_pressure_change_waits_for_cycle_end (harmony, clock) -> None:

	harmony.start()
	first = harmony.player.current_progression

	harmony.set_pressure(1.0)

	assert harmony.player.current_progression is first
	assert harmony.player.next_progression is not None
	assert harmony.player.next_progression.harmonic_rhythm == 8

	queued = harmony.player.next_progression
	clock.advance_bars(_cycle_bars(first))

	assert harmony.player.current_progression is queued


def test_root_change_is_immediate (harmony, updates) -> None:

	harmony.start()
	harmony.set_root("F")

	assert harmony.player.current_progression.root == "F"
	assert harmony.player.position[0] == 0
	assert len(updates) == 2


def test_mode_change_is_immediate (harmony) -> None:

	harmony.start()
	harmony.set_mode("lydian")

	assert harmony.player.current_progression.mode == "lydian"


def test_mild_category_change_is_deferred (harmony) -> None:

	harmony.start()
	first = harmony.player.current_progression

	harmony.set_category("rain")

	assert harmony.player.current_progression is first
	assert harmony.player.next_progression.mood is nimbus.moods.Mood.GENTLE


def test_dramatic_category_change_is_immediate (harmony) -> None:

	harmony.start()
	harmony.set_category("storm")

	assert harmony.player.current_progression.mood is nimbus.moods.Mood.TENSE
	assert harmony.player.current_progression.harmonic_rhythm == 2


def test_unchanged_context_is_ignored (harmony) -> None:

	harmony.start()
	first = harmony.player.current_progression

	harmony.set_root("D")
	harmony.set_mode("dorian")
	harmony.set_category("clear")
	harmony.set_pressure(0.5)

	assert harmony.player.current_progression is first
	assert harmony.player.next_progression is None


def test_changes_before_start_are_recorded (harmony, updates) -> None:

	harmony.set_root("A")
	harmony.set_category("fog")

	assert updates == []

	harmony.start()

	assert harmony.player.current_progression.root == "A"
	assert harmony.player.current_progression.mood is nimbus.moods.Mood.SUSPENDED


def test_pause_and_resume (harmony, updates, clock) -> None:

	harmony.start()
	harmony.pause()
	clock.advance_bars(50)

	assert len(updates) == 1

	harmony.resume()
	clock.advance_bars(50)

	assert len(updates) > 1


@pytest.mark.parametrize("change", [
	lambda harmony: harmony.set_root("F"),
	lambda harmony: harmony.set_mode("lydian"),
	lambda harmony: harmony.set_category("storm"),
])
def test_immediate_change_while_paused_stays_paused (harmony, updates, clock, change) -> None:

	"""Key, mode and dramatic weather changes during a pause wait silently for resume()."""

	harmony.start()
	harmony.pause()
	change(harmony)

	assert harmony.player.state == nimbus.player.PlayerState.PAUSED
	assert harmony.player.position[0] == 0
	assert len(updates) == 1

	clock.advance_bars(50)
	assert len(updates) == 1

	replacement = harmony.player.current_progression
	harmony.resume()

	assert harmony.player.state == nimbus.player.PlayerState.RUNNING
	assert len(updates) == 2
	assert updates[-1].change.chord == replacement.chords[0]


def test_root_change_while_paused_uses_new_root (harmony, updates) -> None:

	harmony.start()
	harmony.pause()
	harmony.set_root("F")

	assert harmony.player.state == nimbus.player.PlayerState.PAUSED
	assert harmony.player.current_progression.root == "F"


def test_stop_resets_voice_leading (harmony, updates) -> None:

	harmony.start()
	harmony.stop()

	assert harmony.current_voicing is None
	assert harmony.player.state == nimbus.player.PlayerState.IDLE

	harmony.start()

	assert updates[-1].voicing == tuple(updates[-1].change.chord.notes)


def test_dispose (harmony, updates, clock) -> None:

	harmony.start()
	harmony.dispose()
	harmony.start()
	clock.advance_bars(50)

	assert len(updates) == 1
	assert harmony.player.state == nimbus.player.PlayerState.DISPOSED


# ---------------------------------------------------------------------------
# from_config()
# ---------------------------------------------------------------------------

def test_from_config_is_reproducible () -> None:

	config = {"harmony": {"root": "E", "mode": "aeolian", "category": "drizzle", "seed": 7}}

	first = nimbus.harmonic_state.HarmonicState.from_config(config, clock=nimbus.clock.ManualClock())
	second = nimbus.harmonic_state.HarmonicState.from_config(config, clock=nimbus.clock.ManualClock())

	first.start()
	second.start()

	assert first.player.current_progression == second.player.current_progression
	assert first.player.current_progression.mood is nimbus.moods.Mood.MELANCHOLY


def test_from_config_creates_realtime_clock () -> None:

	harmony = nimbus.harmonic_state.HarmonicState.from_config({"clock": {"bpm": 90}})

	assert isinstance(harmony.clock, nimbus.clock.AsyncioClock)
	assert harmony.clock.current_bpm == 90


def test_from_config_loads_custom_moods (tmp_path) -> None:

	path = os.path.join(tmp_path, "moods.yaml")
	table = {
		"calm": {
			"starting_weights": {1: 1},
			"transitions": {1: {5: 1}, 5: {1: 1}},
			"length_range": [2, 2],
			"secondary_dominant_probability": 0,
		}
	}

	with open(path, "w") as f:
		yaml.safe_dump(table, f)

	harmony = nimbus.harmonic_state.HarmonicState.from_config(
		{"moods": {"path": path}, "harmony": {"category": "storm"}},
		clock = nimbus.clock.ManualClock()
	)

	harmony.start()

	assert harmony.player.current_progression.degrees() == [1, 5]
