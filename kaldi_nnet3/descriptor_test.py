#!/usr/bin/env python3

# Copyright 2026    kaldi-nnet3 authors
# Apache 2.0

import unittest

from kaldi_nnet3.descriptor import (Descriptor, is_valid_node_name,
                                    tokenize_descriptor)
from kaldi_nnet3.exceptions import ConfigLineError


class TestTokenize(unittest.TestCase):

    def test_tokenize(self):
        tokenize_test = lambda x: tokenize_descriptor(x)[:-1]
        self.assertEqual(tokenize_test("hi"), ['hi'])
        self.assertEqual(tokenize_test("hi there"), ['hi', 'there'])
        self.assertEqual(tokenize_test("hi,there"), ['hi', ',', 'there'])
        self.assertEqual(tokenize_test("hi@-1,there"),
                         ['hi', '@', '-1', ',', 'there'])
        self.assertEqual(tokenize_test("hi(there)"), ['hi', '(', 'there', ')'])
        self.assertEqual(tokenize_descriptor("x")[-1], 'end of string')


class TestDescriptor(unittest.TestCase):

    def test_round_trip(self):
        self.assertEqual(Descriptor('foo').str(), 'foo')
        self.assertEqual(Descriptor('Sum(foo,bar)').str(), 'Sum(foo, bar)')
        self.assertEqual(Descriptor('Sum(Offset(foo,1),Offset(foo,0))').str(),
                         'Sum(Offset(foo, 1), Offset(foo, 0))')
        for x in ['Append(foo, Sum(bar, Offset(baz, 1)))',
                  'Failover(foo, Offset(bar, -1))',
                  'IfDefined(Round(baz, 3))',
                  'Switch(foo1, Offset(foo2, 2), Offset(foo3, 3))',
                  'IfDefined(ReplaceIndex(ivector, t, 0))',
                  'ReplaceIndex(foo, x, 0)',
                  'Offset(foo, 1, 2)',
                  'Scale(0.5, tdnn1.relu)',
                  'Sum(Scale(-1.0, foo), Const(1.0, 40))']:
            self.assertEqual(Descriptor(x).str(), x)

    def test_at_sugar(self):
        self.assertEqual(
            Descriptor('Append(input@-3, input@0, input@3)').str(),
            'Append(Offset(input, -3), input, Offset(input, 3))')

    def test_structure(self):
        d = Descriptor('Append(Offset(input, -1), ReplaceIndex(ivector, t, 0))')
        self.assertEqual(d.operator, 'Append')
        self.assertEqual(len(d.items), 2)
        self.assertEqual(d.items[0].operator, 'Offset')
        self.assertEqual(d.items[0].items[1], -1)
        self.assertEqual(d.items[1].items[1:], ['t', 0])
        self.assertEqual(d.node_names(), {'input', 'ivector'})
        self.assertEqual(d, Descriptor('Append(input@-1, '
                                       'ReplaceIndex(ivector, t, 0))'))

    def test_dim(self):
        dims = {'input': 40, 'ivector': 100}
        self.assertEqual(
            Descriptor('Append(Offset(input, -1), input, ivector)').dim(
                dims.get), 180)
        self.assertEqual(Descriptor('Sum(input, Scale(2.0, input))').dim(
            dims.get), 40)
        self.assertEqual(Descriptor('Const(1.0, 7)').dim(dims.get), 7)
        with self.assertRaises(ConfigLineError):
            Descriptor('Sum(input, ivector)').dim(dims.get)

    def test_errors(self):
        for x in ['', 'Append(foo', 'Offset(foo, x)', 'Failover(foo)',
                  'IfDefined(foo, bar)', 'Round(foo, 0)',
                  'ReplaceIndex(foo, y, 0)', 'foo bar', '-3', 'Scale(foo)',
                  'Const(1.0, 2.5)', 'foo@']:
            with self.assertRaises(ConfigLineError):
                Descriptor(x)

    def test_is_valid_node_name(self):
        self.assertTrue(is_valid_node_name('tdnn1.affine'))
        self.assertTrue(is_valid_node_name('_foo-bar'))
        self.assertFalse(is_valid_node_name('1foo'))
        self.assertFalse(is_valid_node_name('foo bar'))
        self.assertFalse(is_valid_node_name(None))


if __name__ == '__main__':
    unittest.main()
