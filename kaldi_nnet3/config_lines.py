# Copyright  2016  Johns Hopkins University (Author: Daniel Povey).
#            2026  kaldi-nnet3 authors
# License: Apache 2.0.

# This module interprets the config section of a text-format nnet3 model,
# i.e. the lines between <Nnet3> and <NumComponents> like
#   input-node name=input dim=40
#   component-node name=affine1 component=affine1 input=Append(-1, 0, 1)
#   output-node name=output input=affine1 objective=linear
# and turns them into a ConfigLines object describing how the nodes of the
# network are wired together.

import logging
import re
from collections import OrderedDict

from kaldi_nnet3.descriptor import Descriptor, is_valid_node_name
from kaldi_nnet3.exceptions import ConfigLineError, KeyNotUniqueError

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


# This function parses a line in a config file, something like
# component-node name=affine1 component=affine1 input=Append(foo, bar)
# and returns a pair,
# (first_token, fields), as (string, dict) e.g. in this case
# ('component-node', {'name':'affine1', 'component':'affine1',
#                     'input':'Append(foo, bar)'})
# Note: spaces are allowed in the field values but = signs are
# disallowed, except when quoted with double quotes,
# which is why it's possible to parse them.
# This function also removes comments (anything after '#').
# As a special case, this function will return None if the line
# is empty after removing spaces.
def parse_config_line(orig_config_line):
    # Remove comments.
    # note: splitting on '#' will always give at least one field...  python
    # treats splitting on space as a special case that may give zero fields.
    config_line = orig_config_line.split('#')[0]
    # Note: this set of allowed characters may have to be expanded in future.
    x = re.search(r'[^a-zA-Z0-9\.\-\(\)@_=,/+:\s"]', config_line)
    if x is not None:
        bad_char = x.group(0)
        if bad_char == "'":
            raise ConfigLineError("Config line has disallowed character ' "
                                  "(use double quotes for strings containing "
                                  "= signs)", orig_config_line)
        else:
            raise ConfigLineError("Config line has disallowed character: "
                                  "{0}".format(bad_char), orig_config_line)

    # Now split on space; later we may splice things back together.
    fields = config_line.split()
    if len(fields) == 0:
        return None   # Line was only whitespace after removing comments.
    first_token = fields[0]
    # if first_token does not look like 'foo-bar' or 'foo-bar2', then die.
    if re.match('^[a-z][-a-z0-9]+$', first_token) is None:
        raise ConfigLineError("Error parsing config line (first field doesn't "
                              "look right).", orig_config_line)

    # get rid of the first field which we put in 'first_token'.
    fields = fields[1:]

    rest_of_line = ' '.join(fields)
    # rest of the line can be of the form 'a=1 b=" x=1 y=2 " c=Append( i1, i2)'
    positions = [m.start() for m in re.finditer('"', rest_of_line)]
    if not len(positions) % 2 == 0:
        raise ConfigLineError("Double-quotes should occur in pairs",
                              orig_config_line)

    # add the " enclosed strings and corresponding keys to the dict
    # and remove them from the rest_of_line.  Go from the last pair to the
    # first so that the positions stay valid while we cut.
    fields = []
    for i in reversed(range(len(positions) // 2)):
        start = positions[i * 2]
        end = positions[i * 2 + 1]
        rest_of_line_after = rest_of_line[end + 1:]
        parts = rest_of_line[:start].split()
        if len(parts) == 0 or parts[-1][-1] != '=':
            raise ConfigLineError("Quoted string must follow 'name='",
                                  orig_config_line)
        rest_of_line_before = ' '.join(parts[:-1])
        fields = [parts[-1][:-1], rest_of_line[start + 1:end]] + fields
        rest_of_line = rest_of_line_before + ' ' + rest_of_line_after

    # suppose rest_of_line is: 'input=Append(foo, bar) foo=bar'
    # then after the below we'll get
    # fields = ['', 'input', 'Append(foo, bar)', 'foo', 'bar']
    ans_dict = dict()
    other_fields = re.split(r'\s*([-a-zA-Z0-9_]*)=', rest_of_line.strip())
    if not (other_fields[0] == '' and len(other_fields) % 2 == 1):
        raise ConfigLineError("Could not parse config line.",
                              orig_config_line)
    fields += [f.strip() for f in other_fields[1:]]
    for i in range(len(fields) // 2):
        var_name = fields[i * 2]
        var_value = fields[i * 2 + 1]
        if re.match(r'[a-zA-Z_]', var_name) is None:
            raise ConfigLineError("Expected variable name '{0}' to start with "
                                  "alphabetic character or _".format(var_name),
                                  orig_config_line)
        if var_name in ans_dict:
            raise ConfigLineError("Config line has multiply defined variable "
                                  "{0}".format(var_name), orig_config_line)
        ans_dict[var_name] = var_value
    return (first_token, ans_dict)


# This function, used in converting string values in config lines to
# typed values, attempts to convert 'string_value' to an instance of
# dest_type.  'key' is only needed for printing errors.
def convert_value_to_type(key, dest_type, string_value):
    if dest_type == bool:
        if string_value == "True" or string_value == "true":
            return True
        elif string_value == "False" or string_value == "false":
            return False
        else:
            raise ConfigLineError("Invalid configuration value {0}={1} "
                                  "(expected bool)".format(key, string_value))
    elif dest_type == int:
        try:
            return int(string_value)
        except ValueError:
            raise ConfigLineError("Invalid configuration value {0}={1} "
                                  "(expected int)".format(key, string_value))
    elif dest_type == float:
        try:
            return float(string_value)
        except ValueError:
            raise ConfigLineError("Invalid configuration value {0}={1} "
                                  "(expected float)".format(key, string_value))
    elif dest_type == Descriptor:
        return Descriptor(string_value)
    elif dest_type == str:
        return string_value


class InputNode(object):
    def __init__(self, name, dim):
        self.name = name
        self.dim = dim


class ComponentNode(object):
    def __init__(self, name, component, input):
        self.name = name
        self.component = component
        self.input = input


class DimRangeNode(object):
    def __init__(self, name, input_node, dim_offset, dim):
        self.name = name
        self.input_node = input_node
        self.dim_offset = dim_offset
        self.dim = dim


class OutputNode(object):
    def __init__(self, name, input, objective='linear'):
        self.name = name
        self.input = input
        self.objective = objective


# For each statement type: the node class, and the (key, type, required)
# fields it takes, in the order of the class's constructor arguments.
_NODE_TYPES = {
    'input-node': (InputNode, [('name', str, True), ('dim', int, True)]),
    'component-node': (ComponentNode, [('name', str, True),
                                       ('component', str, True),
                                       ('input', Descriptor, True)]),
    'dim-range-node': (DimRangeNode, [('name', str, True),
                                      ('input-node', str, True),
                                      ('dim-offset', int, True),
                                      ('dim', int, True)]),
    'output-node': (OutputNode, [('name', str, True),
                                 ('input', Descriptor, True),
                                 ('objective', str, False)]),
}


def config_line_to_node(config_line):
    """Returns the node object described by 'config_line', or None if the
    line is blank after removing comments."""
    x = parse_config_line(config_line)
    if x is None:
        return None
    (first_token, key_to_value) = x
    if first_token not in _NODE_TYPES:
        raise ConfigLineError("No such node type '{0}'".format(first_token),
                              config_line)
    (node_class, fields) = _NODE_TYPES[first_token]
    known_keys = set(key for (key, _, _) in fields)
    for key in key_to_value:
        if key not in known_keys:
            raise ConfigLineError("Unknown key '{0}' for {1}".format(
                key, first_token), config_line)
    args = []
    for (key, dest_type, required) in fields:
        if key not in key_to_value:
            if required:
                raise ConfigLineError("Missing '{0}=' for {1}".format(
                    key, first_token), config_line)
            continue
        try:
            args.append(convert_value_to_type(key, dest_type,
                                              key_to_value[key]))
        except ConfigLineError as e:
            raise ConfigLineError(str(e), config_line)
    node = node_class(*args)
    if not is_valid_node_name(node.name):
        raise ConfigLineError("Invalid node name '{0}'".format(node.name),
                              config_line)
    if isinstance(node, OutputNode) and node.objective not in ['linear',
                                                               'quadratic']:
        raise ConfigLineError("Invalid objective type '{0}'".format(
            node.objective), config_line)
    return node


class ConfigLines(object):
    """The wiring of an nnet3 network, as described by its config section.
    Each of the dicts is from node name to node object, in the order the
    nodes appeared."""

    def __init__(self):
        self.input_nodes = OrderedDict()
        self.component_nodes = OrderedDict()
        self.dim_range_nodes = OrderedDict()
        self.output_nodes = OrderedDict()

    def add_node(self, node, config_line):
        if node.name in self.node_names():
            raise KeyNotUniqueError(node.name, "config line '{0}'".format(
                config_line.strip()))
        if isinstance(node, InputNode):
            self.input_nodes[node.name] = node
        elif isinstance(node, ComponentNode):
            self.component_nodes[node.name] = node
        elif isinstance(node, DimRangeNode):
            self.dim_range_nodes[node.name] = node
        else:
            self.output_nodes[node.name] = node

    def node_names(self):
        return (list(self.input_nodes) + list(self.component_nodes) +
                list(self.dim_range_nodes) + list(self.output_nodes))

    def component_names(self):
        """Returns the names of the components used by component-nodes."""
        return [node.component for node in self.component_nodes.values()]


def parse_config(config_text):
    """Parses the whole config section and returns a ConfigLines object."""
    config_lines = ConfigLines()
    for line in config_text.split('\n'):
        node = config_line_to_node(line)
        if node is None:
            continue  # line was blank after removing comments.
        config_lines.add_node(node, line)
    logger.debug("Config section has {0} nodes".format(
        len(config_lines.node_names())))
    return config_lines
