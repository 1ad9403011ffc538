#!/usr/bin/env python3

# Copyright 2026    kaldi-nnet3 authors
# Apache 2.0

import unittest

from kaldi_nnet3.exceptions import ParseError
from kaldi_nnet3.primitives import (close_tag, count, many0, multispaced,
                                    open_any, open_tag, read_integer,
                                    read_name, spaced, tag)


class TestTags(unittest.TestCase):

    def test_open_tag_skips_whitespace_and_newlines(self):
        s = b" \n\t<Nnet3>\n  input"
        (_, pos) = open_tag(s, 0, "Nnet3")
        self.assertEqual(s[pos:], b"input")

    def test_close_tag(self):
        s = b"</Nnet3>\n"
        (_, pos) = close_tag(s, 0, "Nnet3")
        self.assertEqual(pos, len(s))

    def test_tag_is_case_sensitive(self):
        with self.assertRaises(ParseError) as cm:
            open_tag(b"<nnet3>", 0, "Nnet3")
        self.assertIn("<Nnet3>", str(cm.exception))
        self.assertEqual(cm.exception.position, 0)

    def test_open_any(self):
        s = b"  <FixedAffineComponent> <LinearParams>"
        (name, pos) = open_any(s, 0)
        self.assertEqual(name, "FixedAffineComponent")
        (name, pos) = open_any(s, pos)
        self.assertEqual(name, "LinearParams")
        self.assertEqual(pos, len(s))

    def test_open_any_rejects_close_tag(self):
        with self.assertRaises(ParseError):
            open_any(b"</Foo>", 0)

    def test_error_reports_what_was_found(self):
        with self.assertRaises(ParseError) as cm:
            tag(b"abc <Bar>", 4, b"<Foo>")
        self.assertEqual(cm.exception.position, 4)
        self.assertEqual(cm.exception.found, repr("<Bar>"))

    def test_error_at_end_of_input(self):
        with self.assertRaises(ParseError) as cm:
            tag(b"", 0, b"<Foo>")
        self.assertEqual(cm.exception.found, "end of input")


class TestName(unittest.TestCase):

    def test_valid_names(self):
        for name in ["foo", "tdnn1.affine", "output.log-softmax", "lstm_1",
                     "T"]:
            self.assertEqual(read_name(name.encode(), 0),
                             (name, len(name)))

    def test_name_stops_at_other_characters(self):
        self.assertEqual(read_name(b"foo>", 0), ("foo", 3))
        self.assertEqual(read_name(b"foo bar", 0), ("foo", 3))

    def test_invalid_names(self):
        for s in [b"", b"1foo", b"_foo", b".foo", b"-foo", b" foo"]:
            with self.assertRaises(ParseError):
                read_name(s, 0)


class TestInteger(unittest.TestCase):

    def test_integers(self):
        self.assertEqual(read_integer(b"42", 0), (42, 2))
        self.assertEqual(read_integer(b"-7 ", 0), (-7, 2))
        self.assertEqual(read_integer(b"0012x", 0), (12, 4))

    def test_int32_limits(self):
        self.assertEqual(read_integer(b"2147483647", 0)[0], 2147483647)
        self.assertEqual(read_integer(b"-2147483648", 0)[0], -2147483648)
        with self.assertRaises(ParseError):
            read_integer(b"2147483648", 0)
        with self.assertRaises(ParseError):
            read_integer(b"-2147483649", 0)

    def test_empty_digit_run(self):
        for s in [b"", b"-", b"- 1", b"x1"]:
            with self.assertRaises(ParseError):
                read_integer(s, 0)


class TestCombinators(unittest.TestCase):

    def test_spaced_keeps_newlines(self):
        (value, pos) = spaced(read_integer)(b" \t5 \t\n6", 0)
        self.assertEqual(value, 5)
        self.assertEqual(pos, 5)

    def test_multispaced_eats_newlines(self):
        (value, pos) = multispaced(read_integer)(b"\n 5 \n6", 0)
        self.assertEqual(value, 5)
        self.assertEqual(pos, 5)

    def test_many0_stops_silently(self):
        s = b"1 2 3 x"
        (values, pos) = many0(multispaced(read_integer))(s, 0)
        self.assertEqual(values, [1, 2, 3])
        self.assertEqual(s[pos:], b"x")

    def test_many0_zero_matches(self):
        self.assertEqual(many0(read_integer)(b"x", 0), ([], 0))

    def test_count_exact(self):
        s = b"1 2 3 4"
        (values, pos) = count(multispaced(read_integer), 2)(s, 0)
        self.assertEqual(values, [1, 2])
        self.assertEqual(s[pos:], b"3 4")

    def test_count_failure_is_fatal(self):
        with self.assertRaises(ParseError) as cm:
            count(multispaced(read_integer), 3)(b"1 2 </Nnet3>", 0)
        self.assertEqual(cm.exception.position, 4)


if __name__ == '__main__':
    unittest.main()
