# Copyright 2026    kaldi-nnet3 authors
# Apache 2.0.

"""Classes holding a parsed text-format nnet3 model."""

import numpy as np


def _arrays_equal(a, b):
    return a.dtype == b.dtype and np.array_equal(a, b)


class Component(object):
    """One component of the network: its type (e.g. 'FixedAffineComponent')
    and a dict from attribute name (e.g. 'LinearParams') to a read-only
    numpy array."""

    def __init__(self, klass, attributes):
        self.klass = klass
        self.attributes = attributes

    def raw_type(self):
        """Returns the type without the 'Component' suffix, e.g. 'Sigmoid'
        for 'SigmoidComponent'."""
        if self.klass.endswith("Component"):
            return self.klass[:-len("Component")]
        return self.klass

    def __eq__(self, other):
        if not isinstance(other, Component):
            return NotImplemented
        if self.klass != other.klass:
            return False
        if set(self.attributes) != set(other.attributes):
            return False
        return all(_arrays_equal(v, other.attributes[k])
                   for k, v in self.attributes.items())

    def __repr__(self):
        return "Component({0}, {{{1}}})".format(
            self.klass, ", ".join("{0}: {1}".format(k, shape_string(v))
                                  for k, v in self.attributes.items()))


class Nnet3Model(object):
    """The result of parsing a text-format nnet3 model.

    'config_lines' is the config section (everything between <Nnet3> and
    <NumComponents>) exactly as it appeared in the file; 'graph' is the
    ConfigLines object produced from it; 'components' is a dict from
    component name to Component.
    """

    def __init__(self, config_lines, graph, components):
        self.config_lines = config_lines
        self.graph = graph
        self.components = components

    def num_components(self):
        return len(self.components)

    def __eq__(self, other):
        if not isinstance(other, Nnet3Model):
            return NotImplemented
        return (self.config_lines == other.config_lines and
                self.components == other.components)

    def __repr__(self):
        return "Nnet3Model(num-components={0}, nodes={1})".format(
            self.num_components(), self.graph.node_names())


def shape_string(array):
    """Describes an attribute value the way nnet3-info does: '[2x3]' for a
    matrix, '[2]' for a vector, and the value itself for a scalar."""
    if array.ndim == 0:
        value = array.item()
        if isinstance(value, bool):
            return "T" if value else "F"
        if isinstance(value, float):
            return "{0:g}".format(value)
        return str(value)
    return "[" + "x".join(str(d) for d in array.shape) + "]"
