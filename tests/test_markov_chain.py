import random
import unittest

import nimbus.markov_chain


class WeightedPickTests (unittest.TestCase):

	"""
	Tests for the weighted choice helper.
	"""

	def test_excluded_key_never_chosen (self) -> None:

		"""
		The excluded key is skipped even when it carries most of the weight.
		"""

		rng = random.Random(1)
		weights = {1: 50, 2: 1, 3: 0}

		for _ in range(500):
			self.assertEqual(nimbus.markov_chain.weighted_pick(weights, rng, exclude=1), 2)


	def test_zero_weights_never_chosen (self) -> None:

		"""
		Keys with zero weight are not drawn while a positive key remains.
		"""

		rng = random.Random(2)
		weights = {1: 0, 2: 3, 3: 0, 4: 1}

		picks = {nimbus.markov_chain.weighted_pick(weights, rng) for _ in range(500)}

		self.assertEqual(picks, {2, 4})


	def test_weights_are_respected (self) -> None:

		"""
		A 9:1 table picks the heavy key roughly nine times in ten.
		"""

		rng = random.Random(3)
		weights = {"a": 9, "b": 1}

		heavy = sum(1 for _ in range(2000) if nimbus.markov_chain.weighted_pick(weights, rng) == "a")

		self.assertGreater(heavy, 1700)
		self.assertLess(heavy, 1900)


	def test_degenerate_row_draws_uniformly_from_other_keys (self) -> None:

		"""
		An all-zero row falls back to every key except the excluded one.
		"""

		rng = random.Random(4)
		weights = {1: 0, 2: 0, 3: 0}

		picks = [nimbus.markov_chain.weighted_pick(weights, rng, exclude=2) for _ in range(200)]

		self.assertEqual(set(picks), {1, 3})


	def test_only_excluded_positive_falls_back_to_degrees (self) -> None:

		"""
		When the table offers nothing but the excluded key, the default degrees are used.
		"""

		rng = random.Random(5)

		picks = {nimbus.markov_chain.weighted_pick({1: 5}, rng, exclude=1) for _ in range(300)}

		self.assertTrue(picks <= {2, 3, 4, 5, 6, 7})
		self.assertNotIn(1, picks)


	def test_empty_table_uses_fallback (self) -> None:

		"""
		An empty table draws from the explicit fallback keys.
		"""

		rng = random.Random(6)

		self.assertIn(nimbus.markov_chain.weighted_pick({}, rng, fallback=["x", "y"]), {"x", "y"})


	def test_no_candidates_raises (self) -> None:

		"""
		Excluding the only fallback key leaves nothing to choose.
		"""

		with self.assertRaises(ValueError):
			nimbus.markov_chain.weighted_pick({}, random.Random(7), exclude="x", fallback=["x"])


class MarkovChainTests (unittest.TestCase):

	"""
	Tests for the no-repeat Markov chain.
	"""

	def setUp (self) -> None:

		self.transitions = {
			1: {1: 100, 2: 1, 3: 1},
			2: {1: 1, 2: 100, 3: 1},
			3: {1: 1, 2: 1, 3: 100},
		}


	def test_empty_transitions_raise (self) -> None:

		"""
		A chain needs at least one row.
		"""

		with self.assertRaises(ValueError):
			nimbus.markov_chain.MarkovChain(transitions={}, initial_weights={1: 1})


	def test_walk_never_repeats (self) -> None:

		"""
		Heavy self-weights are ignored: consecutive states always differ.
		"""

		chain = nimbus.markov_chain.MarkovChain(self.transitions, {1: 1}, rng=random.Random(8))

		for _ in range(50):
			states = chain.walk(12)

			self.assertEqual(len(states), 12)

			for previous, current in zip(states, states[1:]):
				self.assertNotEqual(previous, current)


	def test_walk_starts_from_initial_weights (self) -> None:

		"""
		A single positive starting weight fixes the first state.
		"""

		chain = nimbus.markov_chain.MarkovChain(self.transitions, {1: 0, 2: 0, 3: 4}, rng=random.Random(9))

		for _ in range(20):
			self.assertEqual(chain.walk(3)[0], 3)


	def test_step_before_start_starts (self) -> None:

		"""
		Stepping a fresh chain draws its starting state.
		"""

		chain = nimbus.markov_chain.MarkovChain(self.transitions, {2: 1}, rng=random.Random(10))

		self.assertEqual(chain.step(), 2)
		self.assertEqual(chain.state, 2)


	def test_missing_row_draws_from_other_states (self) -> None:

		"""
		A state without a row moves to some other known state.
		"""

		transitions = {1: {2: 1}, 2: {}}
		chain = nimbus.markov_chain.MarkovChain(transitions, {2: 1}, rng=random.Random(11))

		chain.start()

		self.assertEqual(chain.step(), 1)


	def test_walk_of_zero_is_empty (self) -> None:

		"""
		Non-positive lengths produce no states.
		"""

		chain = nimbus.markov_chain.MarkovChain(self.transitions, {1: 1}, rng=random.Random(12))

		self.assertEqual(chain.walk(0), [])


	def test_seeded_chains_agree (self) -> None:

		"""
		The same seed produces the same walk.
		"""

		first = nimbus.markov_chain.MarkovChain(self.transitions, {1: 1, 2: 1, 3: 1}, rng=random.Random(13))
		second = nimbus.markov_chain.MarkovChain(self.transitions, {1: 1, 2: 1, 3: 1}, rng=random.Random(13))

		self.assertEqual(first.walk(20), second.walk(20))
