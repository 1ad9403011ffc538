# Copyright  2016  Johns Hopkins University (Author: Daniel Povey).
#            2026  kaldi-nnet3 authors
# License: Apache 2.0.

# This module parses the Descriptors that appear as the 'input' of
# component-nodes and output-nodes in the config section of an nnet3 model,
# e.g. Append(Offset(input, -1), input, Offset(input, 1)).
# For the full range of possible expressions, see the comment at the
# top of src/nnet3/nnet-descriptor.h.

import re

from kaldi_nnet3.exceptions import ConfigLineError

# operators whose arguments are all Descriptors.
_LIST_OPERATORS = ['Append', 'Sum', 'Switch', 'Failover', 'IfDefined']
OPERATORS = _LIST_OPERATORS + ['Offset', 'Round', 'ReplaceIndex', 'Scale',
                               'Const']


class Descriptor(object):
    def __init__(self, descriptor_string=None):
        # self.operator is a string that may be 'Offset', 'Append', 'Sum',
        # 'Failover', 'IfDefined', 'Switch', 'Round', 'ReplaceIndex', 'Scale'
        # or 'Const'; it also may be None, representing the base-case (where
        # it's just a node name).

        # self.items will be whatever items are inside the parentheses, e.g.
        # if this is Sum(foo, bar), then items will be [d1, d2], where d1 is a
        # Descriptor for 'foo' and d2 is a Descriptor for 'bar'.  Some items
        # are numbers or strings, e.g. for 'ReplaceIndex(ivector, t, 0)'
        # self.items would be [d, 't', 0], and for 'Scale(0.5, foo)' it would
        # be [0.5, d].  When self.operator is None, self.items contains the
        # node name as a string.
        self.operator = None
        self.items = None

        if descriptor_string is not None:
            try:
                tokens = tokenize_descriptor(descriptor_string)
                (d, pos) = parse_new_descriptor(tokens, 0)
                # note: 'pos' should point to the 'end of string' marker
                # that terminates 'tokens'.
                if pos != len(tokens) - 1:
                    raise ConfigLineError("Parsing Descriptor, saw junk at "
                                          "end: " + ' '.join(tokens[pos:-1]))
            except (ConfigLineError, IndexError) as e:
                raise ConfigLineError(
                    "Error parsing Descriptor '{0}', specific error was: "
                    "{1}".format(descriptor_string, e))
            self.operator = d.operator
            self.items = d.items

    def str(self):
        if self.operator is None:
            assert len(self.items) == 1 and isinstance(self.items[0], str)
            return self.items[0]
        else:
            assert isinstance(self.operator, str)
            return self.operator + '(' + ', '.join(
                [str(item) for item in self.items]) + ')'

    def __str__(self):
        return self.str()

    def __repr__(self):
        return "Descriptor('{0}')".format(self.str())

    def __eq__(self, other):
        if not isinstance(other, Descriptor):
            return NotImplemented
        return self.operator == other.operator and self.items == other.items

    def node_names(self):
        """Returns the set of node names this descriptor reads from."""
        if self.operator is None:
            return set(self.items)
        names = set()
        for item in self.items:
            if isinstance(item, Descriptor):
                names |= item.node_names()
        return names

    # This function returns the dimension (i.e. the feature dimension) of the
    # descriptor.  It takes 'node_to_dim' which is a function from node names
    # to dimensions, e.g. you might have node_to_dim('ivector') = 100.
    def dim(self, node_to_dim):
        if self.operator is None:
            return node_to_dim(self.items[0])
        elif self.operator in ['Sum', 'Failover', 'IfDefined', 'Switch']:
            # these are all operators for which all args are descriptors
            # and must have the same dim.
            dim = self.items[0].dim(node_to_dim)
            for desc in self.items[1:]:
                next_dim = desc.dim(node_to_dim)
                if next_dim != dim:
                    raise ConfigLineError(
                        "In descriptor {0}, different fields have different "
                        "dimensions: {1} != {2}".format(self.str(), dim,
                                                        next_dim))
            return dim
        elif self.operator in ['Offset', 'Round', 'ReplaceIndex']:
            # for these operators, only the 1st arg is relevant.
            return self.items[0].dim(node_to_dim)
        elif self.operator == 'Scale':
            return self.items[1].dim(node_to_dim)
        elif self.operator == 'Const':
            return self.items[1]
        elif self.operator == 'Append':
            return sum([x.dim(node_to_dim) for x in self.items])
        else:
            raise ConfigLineError("Unknown operator {0}".format(self.operator))


# This just checks that seen_item == expected_item, and raises an
# exception if not.
def expect_token(expected_item, seen_item, what_parsing):
    if seen_item != expected_item:
        raise ConfigLineError("parsing {0}, expected '{1}' but got "
                              "'{2}'".format(what_parsing, expected_item,
                                             seen_item))


# returns true if 'name' is valid as the name of a node;
# this is the same as IsValidName() in the nnet3 code.
def is_valid_node_name(name):
    return (isinstance(name, str) and
            re.match(r'^[a-zA-Z_][-a-zA-Z_0-9.]*$', name) is not None)


def _read_number(tokens, pos, convert, what_parsing):
    try:
        return (convert(tokens[pos]), pos + 1)
    except ValueError:
        raise ConfigLineError("Parsing {0}, expected number, got "
                              "{1}".format(what_parsing, tokens[pos]))


# This function parses a descriptor starting from position pos >= 0 of the
# array 'tokens' (as produced by tokenize_descriptor), and returns a pair
# (d, pos) where d is the newly parsed Descriptor and 'pos' is the new
# position after consuming the relevant input.
def parse_new_descriptor(tokens, pos):
    first_token = tokens[pos]
    pos += 1
    d = Descriptor()

    if first_token in OPERATORS:
        what = first_token + '()'
        expect_token('(', tokens[pos], what)
        pos += 1
        d.operator = first_token
        if first_token == 'Scale':
            (scale, pos) = _read_number(tokens, pos, float, what)
            expect_token(',', tokens[pos], what)
            (desc, pos) = parse_new_descriptor(tokens, pos + 1)
            d.items = [scale, desc]
            expect_token(')', tokens[pos], what)
            return (d, pos + 1)
        if first_token == 'Const':
            (value, pos) = _read_number(tokens, pos, float, what)
            expect_token(',', tokens[pos], what)
            (dim, pos) = _read_number(tokens, pos + 1, int, what)
            d.items = [value, dim]
            expect_token(')', tokens[pos], what)
            return (d, pos + 1)

        # the 1st argument of all the other operators is a Descriptor.
        (desc, pos) = parse_new_descriptor(tokens, pos)
        d.items = [desc]

        if first_token == 'Offset':
            expect_token(',', tokens[pos], what)
            (t_offset, pos) = _read_number(tokens, pos + 1, int, what)
            d.items.append(t_offset)
            if tokens[pos] == ')':
                return (d, pos + 1)
            expect_token(',', tokens[pos], what)
            (x_offset, pos) = _read_number(tokens, pos + 1, int, what)
            d.items.append(x_offset)
            expect_token(')', tokens[pos], what)
            pos += 1
        elif first_token in _LIST_OPERATORS:
            while True:
                if tokens[pos] == ')':
                    # check num-items is correct for some special cases.
                    if first_token == 'Failover' and len(d.items) != 2:
                        raise ConfigLineError(
                            "Parsing Failover(), expected 2 items but got "
                            "{0}".format(len(d.items)))
                    if first_token == 'IfDefined' and len(d.items) != 1:
                        raise ConfigLineError(
                            "Parsing IfDefined(), expected 1 item but got "
                            "{0}".format(len(d.items)))
                    pos += 1
                    break
                expect_token(',', tokens[pos], what)
                (desc, pos) = parse_new_descriptor(tokens, pos + 1)
                d.items.append(desc)
        elif first_token == 'Round':
            expect_token(',', tokens[pos], what)
            (t_modulus, pos) = _read_number(tokens, pos + 1, int, what)
            if t_modulus <= 0:
                raise ConfigLineError("Parsing Round(), modulus must be "
                                      "positive, got {0}".format(t_modulus))
            d.items.append(t_modulus)
            expect_token(')', tokens[pos], what)
            pos += 1
        elif first_token == 'ReplaceIndex':
            expect_token(',', tokens[pos], what)
            pos += 1
            if tokens[pos] not in ['x', 't']:
                raise ConfigLineError("Parsing ReplaceIndex(), expected 'x' "
                                      "or 't', got " + tokens[pos])
            d.items.append(tokens[pos])
            expect_token(',', tokens[pos + 1], what)
            (new_value, pos) = _read_number(tokens, pos + 2, int, what)
            d.items.append(new_value)
            expect_token(')', tokens[pos], what)
            pos += 1
    elif first_token in ['end of string', '(', ')', ',', '@']:
        raise ConfigLineError("Expected descriptor, got " + first_token)
    elif is_valid_node_name(first_token):
        d.operator = None
        d.items = [first_token]

        # If the node name is followed by '@', then we're parsing something
        # like 'affine1@-3' which is syntactic sugar for 'Offset(affine1, -3)'.
        if tokens[pos] == '@':
            (offset_t, pos) = _read_number(tokens, pos + 1, int, first_token + '@')
            if offset_t != 0:
                inner_d = d
                d = Descriptor()
                d.operator = 'Offset'
                d.items = [inner_d, offset_t]
    else:
        raise ConfigLineError("Parsing descriptor, expected descriptor but "
                              "got " + first_token)
    return (d, pos)


# tokenizes 'descriptor_string' into the tokens that may be part of
# Descriptors.  Note: for convenience in parsing, we add the token
# 'end of string' to this list.
def tokenize_descriptor(descriptor_string):
    # split on '(', ')', ',', '@', and space.  Note: the parenthesis () in the
    # regexp causes it to output the stuff inside the () as if it were a field,
    # which is how the call to re.split() keeps characters like '(' and ')' as
    # tokens.
    fields = re.split(r'(\(|\)|@|,|\s)\s*', descriptor_string)
    ans = []
    for f in fields:
        # don't include fields that are space, or are empty.
        if re.match(r'^\s*$', f) is None:
            ans.append(f)

    ans.append('end of string')
    return ans
