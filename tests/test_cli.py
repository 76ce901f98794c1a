import contextlib
import io
import json
import os
import shutil
import tempfile
import unittest

import pandas as pd

from tsp_grasp.cli import build_parser, main, parse_sizes

KM = "0,10,15,20\n10,0,35,25\n15,35,0,30\n20,25,30,0\n"
MIN = "0,12,18,25\n12,0,40,30\n18,40,0,33\n25,30,33,0\n"


class TestCli(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.mkdtemp()
        self.km = self.write('Km.csv', KM)
        self.min = self.write('Min.csv', MIN)

    def tearDown(self):
        shutil.rmtree(self.tmp)

    def write(self, name, text):
        path = os.path.join(self.tmp, name)
        with open(path, 'w') as f:
            f.write(text)
        return path

    def run_main(self, *argv):
        out, err = io.StringIO(), io.StringIO()
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            code = main(list(argv))
        return code, out.getvalue(), err.getvalue()

    def test_parse_sizes(self):
        self.assertEqual(parse_sizes('48,36, 24'), [48, 36, 24])
        self.assertEqual(parse_sizes(''), [])
        self.assertEqual(build_parser().parse_args(['m.csv']).iterations, 100)

    def test_json_output(self):
        code, out, _ = self.run_main(self.km, '--seed', '1', '--iterations', '5', '--json')
        self.assertEqual(code, 0)
        data = json.loads(out)
        self.assertEqual(len(data), 1)
        self.assertEqual(data[0]['mode'], 'Km')
        self.assertEqual(data[0]['cost'], 80.0)
        self.assertEqual(data[0]['n_cities'], 4)

    def test_modes_sizes_and_output(self):
        output = os.path.join(self.tmp, 'resultados.csv')
        code, out, _ = self.run_main(self.km, self.min, '--modes', 'km,min', '--sizes', '4,3',
                                     '--construction', 'nearest_neighbor', '--ls', 'none',
                                     '--output', output)
        self.assertEqual(code, 0)
        self.assertIn('route:', out)
        df = pd.read_csv(output)
        self.assertEqual(len(df), 4)
        self.assertEqual(sorted(df['mode'].unique()), ['km', 'min'])
        self.assertEqual(sorted(df['n_cities'].unique()), [3, 4])
        self.assertEqual(df['problem'].tolist(), [1, 1, 2, 2])

    def test_names(self):
        names = self.write('Cidades.csv', "Recife\nOlinda\nPaulista\nIgarassu\n")
        code, out, _ = self.run_main(self.km, '--names', names, '--construction', 'nearest_neighbor',
                                     '--ls', 'none', '--json')
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out)[0]['route'], 'Recife Olinda Igarassu Paulista Recife')

    def test_missing_file(self):
        code, _, err = self.run_main(os.path.join(self.tmp, 'nope.csv'))
        self.assertEqual(code, 2)
        self.assertIn('[error]', err)

    def test_bad_matrix(self):
        bad = self.write('bad.csv', "0,a,1\n1,0,1\n1,1,0\n")
        code, _, _ = self.run_main(bad)
        self.assertEqual(code, 2)

    def test_degenerate_instance(self):
        tiny = self.write('tiny.csv', "0,1\n1,0\n")
        code, _, err = self.run_main(tiny)
        self.assertEqual(code, 1)
        self.assertIn('at least 3', err)

    def test_benchmark(self):
        out_dir = os.path.join(self.tmp, 'bench')
        code, out, _ = self.run_main(self.km, self.min, '--benchmark', '--runs', '1',
                                     '--methods', 'nearest_neighbor,nearest_neighbor_2opt',
                                     '--out-dir', out_dir)
        self.assertEqual(code, 0)
        self.assertTrue(os.path.exists(os.path.join(out_dir, 'benchmark_summary.csv')))
        self.assertIn('nearest_neighbor_2opt', out)


if __name__ == "__main__":
    unittest.main()
