import math
import unittest

import numpy as np

from tsp_grasp.construction import (
    build_initial_route,
    cheapest_insertion,
    greedy_randomized,
    nearest_neighbor,
    random_tour,
    restricted_candidate_list,
)
from tsp_grasp.errors import EmptyCandidateListError, NoFeasibleCityError
from tsp_grasp.matrix import route_cost
from tsp_grasp.random_source import RandomSource

DIST = [
    [0, 10, 15, 20],
    [10, 0, 35, 25],
    [15, 35, 0, 30],
    [20, 25, 30, 0],
]


def random_matrix(n, seed, high=50):
    rng = np.random.default_rng(seed)
    m = rng.integers(1, high, size=(n, n)).astype(float)
    np.fill_diagonal(m, 0)
    return m


class RouteAssertions:
    def assertValidTour(self, tour, n, start=0):
        self.assertEqual(len(tour), n + 1)
        self.assertEqual(tour[0], start)
        self.assertEqual(tour[-1], start)
        self.assertEqual(sorted(tour[:-1]), list(range(n)))


class TestNearestNeighbor(unittest.TestCase, RouteAssertions):
    def test_four_city_scenario(self):
        tour = nearest_neighbor(DIST, start=0)
        self.assertEqual(tour, [0, 1, 3, 2, 0])
        self.assertEqual(route_cost(tour, DIST), 80)

    def test_asymmetric_matrix(self):
        dist = [
            [0, 2, 9, 10],
            [1, 0, 6, 4],
            [15, 7, 0, 8],
            [6, 3, 12, 0],
        ]
        self.assertEqual(nearest_neighbor(dist), [0, 1, 3, 2, 0])

    def test_ties_pick_lowest_index(self):
        dist = [[0, 5, 5], [5, 0, 1], [5, 1, 0]]
        self.assertEqual(nearest_neighbor(dist), [0, 1, 2, 0])

    def test_other_start(self):
        tour = nearest_neighbor(DIST, start=2)
        self.assertValidTour(tour, 4, start=2)

    def test_disconnected_matrix(self):
        inf = math.inf
        dist = [[0, 1, inf], [inf, 0, inf], [inf, inf, 0]]
        with self.assertRaises(NoFeasibleCityError):
            nearest_neighbor(dist)

    def test_bad_start(self):
        with self.assertRaises(ValueError):
            nearest_neighbor(DIST, start=4)


class TestCheapestInsertion(unittest.TestCase, RouteAssertions):
    def test_four_city_scenario(self):
        tour = cheapest_insertion(DIST)
        self.assertEqual(tour, [0, 2, 3, 1, 0])
        self.assertEqual(route_cost(tour, DIST), 80)

    def test_deterministic_and_valid(self):
        m = random_matrix(12, seed=3)
        self.assertEqual(cheapest_insertion(m), cheapest_insertion(m))
        self.assertValidTour(cheapest_insertion(m), 12)

    def test_seed_pair(self):
        tour = cheapest_insertion(DIST, seed_pair=(3, 1))
        self.assertValidTour(tour, 4, start=3)
        with self.assertRaises(ValueError):
            cheapest_insertion(DIST, seed_pair=(1, 1))


class TestGreedyRandomized(unittest.TestCase, RouteAssertions):
    def test_alpha_zero_matches_nearest_neighbor(self):
        for seed in range(5):
            m = random_matrix(10, seed=seed, high=6)  # small range forces ties
            self.assertEqual(greedy_randomized(m, 0, 0.0, RandomSource(seed)), nearest_neighbor(m))

    def test_same_seed_same_tour(self):
        m = random_matrix(15, seed=11)
        a = greedy_randomized(m, 0, 0.5, RandomSource(42))
        b = greedy_randomized(m, 0, 0.5, RandomSource(42))
        self.assertEqual(a, b)
        self.assertValidTour(a, 15)

    def test_alpha_one_is_valid(self):
        m = random_matrix(9, seed=1)
        self.assertValidTour(greedy_randomized(m, 4, 1.0, RandomSource(0)), 9, start=4)

    def test_cardinality_mode(self):
        m = random_matrix(9, seed=2)
        tour = greedy_randomized(m, 0, 0.2, RandomSource(3), rcl_mode='cardinality')
        self.assertValidTour(tour, 9)

    def test_rcl_threshold(self):
        cands = [(1, 10.0), (2, 15.0), (3, 20.0)]
        self.assertEqual(restricted_candidate_list(cands, 0.5), [(1, 10.0), (2, 15.0)])
        self.assertEqual(restricted_candidate_list(cands, 1.0), cands)
        self.assertEqual(restricted_candidate_list(cands, 0.5, 'cardinality'), [(1, 10.0)])
        self.assertEqual(restricted_candidate_list([], 0.5), [])

    def test_empty_candidate_list(self):
        inf = math.inf
        dist = [[0, inf, inf], [1, 0, 1], [1, 1, 0]]
        with self.assertRaises(EmptyCandidateListError):
            greedy_randomized(dist, 0, 0.5, RandomSource(0))

    def test_bad_parameters(self):
        with self.assertRaises(ValueError):
            greedy_randomized(DIST, 0, 1.5, RandomSource(0))
        with self.assertRaises(ValueError):
            greedy_randomized(DIST, 0, 0.5, RandomSource(0), rcl_mode='top')


class TestBuildInitialRoute(unittest.TestCase, RouteAssertions):
    def test_all_strategies_valid(self):
        m = random_matrix(8, seed=5)
        for name in ('nearest_neighbor', 'cheapest_insertion', 'greedy_randomized', 'random'):
            with self.subTest(strategy=name):
                tour = build_initial_route(m, name, start=2, alpha=0.4, rng=RandomSource(1))
                self.assertValidTour(tour, 8, start=2)

    def test_random_tour_deterministic(self):
        self.assertEqual(random_tour(DIST, 0, RandomSource(9)), random_tour(DIST, 0, RandomSource(9)))

    def test_unknown_strategy(self):
        with self.assertRaises(ValueError):
            build_initial_route(DIST, 'christofides')


if __name__ == "__main__":
    unittest.main()
