import json
import os
import shutil
import tempfile
import unittest

import pandas as pd

from tsp_grasp.grasp import TSPSolution
from tsp_grasp.reporting import (
    RESULT_COLUMNS,
    ResultRecord,
    append_results,
    format_route,
    summary_line,
    to_json,
)


def make_solution():
    return TSPSolution(tour=[0, 1, 3, 2, 0], cost=80.0, runtime=0.0125,
                       method='greedy_randomized_2opt', iterations=3)


class TestReporting(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmp)

    def test_format_route(self):
        self.assertEqual(format_route([0, 2, 1, 0]), '0 2 1 0')
        self.assertEqual(format_route([0, 2, 1, 0], ['A', 'B', 'C']), 'A C B A')

    def test_record_from_solution(self):
        rec = ResultRecord.from_solution(make_solution(), problem=2, mode='Km')
        self.assertEqual(rec.n_cities, 4)
        self.assertEqual(rec.route, '0 1 3 2 0')
        self.assertEqual(rec.time_ms, 12.5)
        self.assertIn('Km', summary_line(rec))

    def test_append_writes_header_once(self):
        path = os.path.join(self.tmp, 'out', 'resultados.csv')
        rec = ResultRecord.from_solution(make_solution(), mode='Km')
        append_results(path, [rec])
        append_results(path, [rec, rec])
        with open(path) as f:
            lines = f.read().splitlines()
        self.assertEqual(lines[0], ','.join(RESULT_COLUMNS))
        self.assertEqual(sum(line.startswith('problem') for line in lines), 1)
        df = pd.read_csv(path)
        self.assertEqual(len(df), 3)
        self.assertEqual(df['cost'].tolist(), [80.0, 80.0, 80.0])

    def test_append_nothing(self):
        path = os.path.join(self.tmp, 'none.csv')
        append_results(path, [])
        self.assertFalse(os.path.exists(path))

    def test_json(self):
        rec = ResultRecord.from_solution(make_solution(), names=['a', 'b', 'c', 'd'])
        data = json.loads(to_json([rec]))
        self.assertEqual(data[0]['route'], 'a b d c a')
        self.assertEqual(set(data[0]), set(RESULT_COLUMNS))


if __name__ == "__main__":
    unittest.main()
