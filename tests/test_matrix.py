import math
import unittest

import numpy as np

from tsp_grasp.errors import InvalidRouteError, MatrixFormatError
from tsp_grasp.matrix import CostMatrix, normalize_route, route_cost

DIST = [
    [0, 10, 15, 20],
    [10, 0, 35, 25],
    [15, 35, 0, 30],
    [20, 25, 30, 0],
]


class TestCostMatrix(unittest.TestCase):
    def test_basic_properties(self):
        cm = CostMatrix(DIST)
        self.assertEqual(cm.n, 4)
        self.assertEqual(len(cm), 4)
        self.assertTrue(cm.is_symmetric())
        self.assertEqual(cm.rows[1][3], 25.0)
        self.assertEqual(cm[2, 3], 30.0)

    def test_values_are_read_only(self):
        cm = CostMatrix(DIST)
        with self.assertRaises(ValueError):
            cm.values[0, 1] = 99

    def test_caller_array_not_shared(self):
        arr = np.array(DIST, dtype=float)
        cm = CostMatrix(arr)
        arr[0, 1] = 99
        self.assertEqual(cm.rows[0][1], 10.0)

    def test_rejects_non_square(self):
        with self.assertRaises(MatrixFormatError):
            CostMatrix([[0, 1, 2], [1, 0, 3]])

    def test_rejects_nan_and_negative(self):
        with self.assertRaises(MatrixFormatError):
            CostMatrix([[0, float('nan')], [1, 0]])
        with self.assertRaises(MatrixFormatError):
            CostMatrix([[0, -1], [1, 0]])

    def test_infinite_edges_allowed(self):
        cm = CostMatrix([[0, math.inf], [1, 0]])
        self.assertFalse(cm.is_symmetric())

    def test_empty_matrix(self):
        self.assertEqual(CostMatrix([]).n, 0)

    def test_names_must_match(self):
        with self.assertRaises(MatrixFormatError):
            CostMatrix(DIST, names=['a', 'b'])

    def test_head(self):
        cm = CostMatrix(DIST, names=['A', 'B', 'C', 'D'], filled_cells=[(0, 1), (3, 2)])
        sub = cm.head(3)
        self.assertEqual(sub.n, 3)
        self.assertEqual(sub.names, ['A', 'B', 'C'])
        self.assertEqual(sub.filled_cells, ((0, 1),))
        self.assertEqual(sub.rows[2][1], 35.0)
        with self.assertRaises(ValueError):
            cm.head(5)


class TestRouteCost(unittest.TestCase):
    def test_closed_and_open_forms_agree(self):
        self.assertEqual(route_cost([0, 1, 3, 2, 0], DIST), 80)
        self.assertEqual(route_cost([0, 1, 3, 2], DIST), 80)

    def test_raw_rows_read_once_per_edge(self):
        class CountingRows(list):
            reads = 0

            def __getitem__(self, i):
                self.reads += 1
                return super().__getitem__(i)

        rows = CountingRows(DIST)
        self.assertEqual(route_cost([0, 1, 3, 2, 0], rows), 80)
        self.assertEqual(rows.reads, 4)
        self.assertEqual(route_cost([0, 1, 3, 2], np.array(DIST)), 80)
        self.assertEqual(route_cost([0, 1, 3, 2], CostMatrix(DIST)), 80)

    def test_asymmetric_direction_matters(self):
        dist = [[0, 1, 9], [9, 0, 1], [1, 9, 0]]
        self.assertEqual(route_cost([0, 1, 2], dist), 3)
        self.assertEqual(route_cost([0, 2, 1], dist), 27)

    def test_invalid_routes(self):
        with self.assertRaises(InvalidRouteError):
            route_cost([0, 1, 4, 2], DIST)
        with self.assertRaises(InvalidRouteError):
            route_cost([0, 1, 3], DIST)
        with self.assertRaises(InvalidRouteError):
            route_cost([0, 1, 3, 2, 1], DIST)
        with self.assertRaises(InvalidRouteError):
            route_cost([0, 1, 1, 2], DIST)

    def test_normalize_route(self):
        self.assertEqual(normalize_route([2, 0, 1, 3], 4), [2, 0, 1, 3, 2])
        self.assertEqual(normalize_route((0, 1, 3, 2, 0), 4), [0, 1, 3, 2, 0])
        with self.assertRaises(InvalidRouteError):
            normalize_route([0, 1, 1, 2], 4)
        with self.assertRaises(InvalidRouteError):
            normalize_route([0, 1, 2, 5, 0], 4)


if __name__ == "__main__":
    unittest.main()
