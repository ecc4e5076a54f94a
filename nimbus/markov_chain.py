import random
import typing


StateType = typing.TypeVar("StateType")

DEGREES: typing.Tuple[int, ...] = (1, 2, 3, 4, 5, 6, 7)


def weighted_pick (
	weights: typing.Mapping[StateType, float],
	rng: random.Random,
	exclude: typing.Optional[StateType] = None,
	fallback: typing.Optional[typing.Sequence[typing.Any]] = None
) -> StateType:

	"""Choose one key from a weight table, optionally excluding one key.

	Keys with non-positive weight are never chosen by the weighted draw. If no
	positive-weight key remains after the exclusion, the choice falls back to a
	uniform draw over every other key of the table (or of ``fallback`` when the
	table offers nothing), so a value is always returned.

	Parameters:
		weights: Key → relative weight. Weights need not sum to anything.
		rng: Random source.
		exclude: Key that must not be returned (e.g. the current state).
		fallback: Keys to draw from when the table itself has no candidate.
			Defaults to the scale degrees 1–7.
	"""

	options: typing.List[typing.Tuple[StateType, float]] = []
	total_weight = 0.0

	for key, weight in weights.items():

		if key == exclude or weight <= 0:
			continue

		options.append((key, float(weight)))
		total_weight += weight

	if not options:
		# Degenerate row: any key but the excluded one, uniformly.
		candidates = [key for key in weights if key != exclude]

		if not candidates:
			candidates = [key for key in (fallback or DEGREES) if key != exclude]

		if not candidates:
			raise ValueError("No candidate keys to choose from")

		return rng.choice(candidates)

	roll = rng.uniform(0, total_weight)
	accum = 0.0

	for key, weight in options:
		accum += weight
		if roll <= accum:
			return key

	return options[-1][0]


class MarkovChain (typing.Generic[StateType]):

	"""
	A weighted Markov chain that never repeats its current state.
	"""

	def __init__ (
		self,
		transitions: typing.Mapping[StateType, typing.Mapping[StateType, float]],
		initial_weights: typing.Mapping[StateType, float],
		rng: typing.Optional[random.Random] = None
	) -> None:

		"""
		Initialize the chain with transition rows and starting weights.
		"""

		if not transitions:
			raise ValueError("Transitions cannot be empty")

		self.transitions = transitions
		self.initial_weights = initial_weights
		self.rng = rng or random.Random()
		self.state: typing.Optional[StateType] = None


	def start (self) -> StateType:

		"""
		Draw a starting state from the initial weights.
		"""

		self.state = weighted_pick(self.initial_weights, self.rng, fallback=list(self.transitions))

		return self.state


	def step (self) -> StateType:

		"""
		Advance to a different state, chosen from the current state's row.
		"""

		if self.state is None:
			return self.start()

		# A state with no row of its own draws uniformly from every other state.
		row = self.transitions.get(self.state, {})
		self.state = weighted_pick(row, self.rng, exclude=self.state, fallback=list(self.transitions))

		return self.state


	def walk (self, length: int) -> typing.List[StateType]:

		"""
		Return a fresh sequence of ``length`` states with no immediate repeats.
		"""

		if length <= 0:
			return []

		states = [self.start()]

		while len(states) < length:
			states.append(self.step())

		return states
