#!/usr/bin/env python3

# Copyright 2026    kaldi-nnet3 authors
# Apache 2.0

import io
import os
import pickle
import shutil
import unittest
from tempfile import mkdtemp
from unittest import mock

import numpy as np

from kaldi_nnet3.diagnostics import compute_derived_quantities
from kaldi_nnet3.nnet3_info import (get_args, main, model_to_dict,
                                    write_summary)
from kaldi_nnet3.parser import read_model

TDNN = os.path.join(os.path.dirname(__file__), 'test_data', 'tdnn.raw.txt')


class TestArgs(unittest.TestCase):

    def test_defaults(self):
        args = get_args(['final.mdl'])
        self.assertFalse(args.derived)
        self.assertIsNone(args.pickle_out)
        self.assertEqual(args.nnet3_copy, 'nnet3-copy')
        self.assertEqual(args.model, 'final.mdl')

    def test_derived(self):
        self.assertTrue(get_args(['--derived', 'true', '-']).derived)
        with mock.patch('sys.stderr', new_callable=io.StringIO):
            with self.assertRaises(SystemExit):
                get_args(['--derived', 'yes', '-'])


class TestSummary(unittest.TestCase):

    def setUp(self):
        self.model = read_model(TDNN)

    def test_write_summary(self):
        out = io.StringIO()
        write_summary(self.model, out)
        lines = out.getvalue().splitlines()
        self.assertEqual(lines[0], "input-node name=input dim=3")
        self.assertEqual(
            lines[1], "component-node name=affine1 component=affine1 "
            "input=Append(Offset(input, -1), input, Offset(input, 1))")
        self.assertEqual(lines[6], "output-node name=output "
                         "input=output.log-softmax objective=linear")
        self.assertEqual(lines[7], "num-components: 5")
        self.assertEqual(
            [line.split()[1] for line in lines[8:]],
            ['name=affine1', 'name=batchnorm1', 'name=output.affine',
             'name=output.log-softmax', 'name=relu1'])
        self.assertIn("LinearParams=[2x9], BiasParams=[2]", lines[8])
        self.assertIn("LearningRate=0.001", lines[8])
        self.assertTrue(lines[8].endswith("IsGradient=F"))
        self.assertEqual(
            lines[12], "component name=relu1 type=RectifiedLinearComponent, "
            "Dim=2, ValueAvg=[0], DerivAvg=[0], Count=0, "
            "NumDimsSelfRepaired=0, NumDimsProcessed=0")

    def test_write_summary_with_derived(self):
        out = io.StringIO()
        write_summary(self.model, out, compute_derived_quantities(self.model))
        text = out.getvalue()
        self.assertIn("  row-norms=[ 1.732 2 ]\n", text)
        self.assertIn("  col-norms-3=[ 2.236 1 1 ]\n", text)
        self.assertIn("  stats-stddev=[ 2 3 ]\n", text)

    def test_model_to_dict(self):
        d = model_to_dict(self.model)
        self.assertEqual(sorted(d), sorted(self.model.components))
        self.assertEqual(d['relu1']['type'], '<RectifiedLinearComponent>')
        self.assertEqual(d['relu1']['raw-type'], 'RectifiedLinear')
        self.assertEqual(d['affine1']['LinearParams'].shape, (2, 9))
        self.assertNotIn('row-norms', d['affine1'])
        derived = compute_derived_quantities(self.model)
        self.assertIn('row-norms', model_to_dict(self.model,
                                                 derived)['affine1'])


class TestMain(unittest.TestCase):

    def setUp(self):
        self.tmp_dir = mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmp_dir)

    def test_pickle_out(self):
        pickle_out = os.path.join(self.tmp_dir, 'tdnn.pkl')
        with mock.patch('sys.stdout', new_callable=io.StringIO) as out:
            main(['--derived', 'true', '--pickle-out', pickle_out, TDNN])
        self.assertIn("num-components: 5", out.getvalue())
        with open(pickle_out, 'rb') as f:
            d = pickle.load(f)
        self.assertEqual(d['output.affine']['type'],
                         '<NaturalGradientAffineComponent>')
        np.testing.assert_allclose(d['batchnorm1']['stats-stddev'], [2, 3],
                                   rtol=1e-6)

    def test_bad_model_exits_with_status_1(self):
        bad = os.path.join(self.tmp_dir, 'bad.txt')
        with open(bad, 'wb') as f:
            f.write(b"<Nnet3>\n<NumComponents> 1\n</Nnet3>\n")
        with mock.patch('sys.stdout', new_callable=io.StringIO):
            with self.assertLogs('kaldi_nnet3', 'ERROR'):
                with self.assertRaises(SystemExit) as cm:
                    main([bad])
        self.assertEqual(cm.exception.code, 1)


if __name__ == '__main__':
    unittest.main()
