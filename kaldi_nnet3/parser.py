# Copyright 2017-2018    Daniel Povey
#           2026         kaldi-nnet3 authors
# Apache 2.0.

"""Reads text-format nnet3 models, i.e. the output of
'nnet3-copy --binary=false', which look like:

    <Nnet3>
    input-node name=input dim=3
    component-node name=fixed1 component=fixed1 input=input
    output-node name=output input=fixed1

    <NumComponents> 1
    <ComponentName> fixed1 <FixedAffineComponent> <LinearParams>  [
      1.0 2.0 3.0
      4.0 5.0 6.0 ]
    <BiasParams>  [ 7.0 8.0 ]
    </FixedAffineComponent>
    </Nnet3>

The entry point is nnet3(), which takes the bytes of such a file and
returns an Nnet3Model; read_model() does the same for a filename.
"""

import logging

from kaldi_nnet3 import common
from kaldi_nnet3.config_lines import parse_config
from kaldi_nnet3.exceptions import (EncodingError, EnvelopeError, InputError,
                                    ParseError)
from kaldi_nnet3.model import Component, Nnet3Model
from kaldi_nnet3.primitives import (close_tag, count, many0, multispaced,
                                    open_any, open_tag, read_integer,
                                    read_name, skip, MULTISPACE)
from kaldi_nnet3.tensor import read_tensor

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

_BINARY_HEADER = b"\0B"
_NUM_COMPONENTS = b"<NumComponents>"


def nnet3(data):
    """Parses a complete text-format nnet3 model and returns an Nnet3Model.

    'data' is normally bytes; a str is encoded as UTF-8 first.  Raises
    EnvelopeError if the text does not follow the nnet3 grammar (the error
    says where matching stopped), EncodingError if the config section is not
    UTF-8, and ConfigLineError/KeyNotUniqueError if the config section
    cannot be interpreted.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    s = bytes(data)
    logger.debug("Parsing nnet3 model of {0} bytes".format(len(s)))
    try:
        ((config, components), _) = read_top_level(s, 0)
    except ParseError as e:
        raise EnvelopeError(e, s)
    graph = parse_config(config)
    logger.debug("Parsed {0} components".format(len(components)))
    return Nnet3Model(config, graph, components)


def read_top_level(s, pos):
    """Reads "<Nnet3> config <NumComponents> N (components) </Nnet3>" and
    returns the pair ((config_text, components_dict), new_pos)."""
    (_, pos) = open_tag(s, pos, "Nnet3")
    end = s.find(_NUM_COMPONENTS, pos)
    if end == -1:
        raise ParseError("'<NumComponents>'", s, pos)
    try:
        config = s[pos:end].decode("utf-8")
    except UnicodeDecodeError as e:
        raise EncodingError(e, pos)
    pos = end
    (num_components, pos) = read_num_components(s, pos)
    (entries, pos) = count(read_component_entry, num_components)(s, pos)
    components = dict()
    for (name, component) in entries:
        if name in components:
            logger.warning("Component name {0} appears more than once; "
                           "keeping the last one".format(name))
        components[name] = component
    (_, pos) = close_tag(s, pos, "Nnet3")
    return ((config, components), pos)


def read_num_components(s, pos):
    (_, pos) = open_tag(s, pos, "NumComponents")
    num_pos = pos
    (n, pos) = multispaced(read_integer)(s, pos)
    if n < 0:
        raise ParseError("non-negative component count", s, num_pos)
    return (n, pos)


def read_component_name(s, pos):
    """Reads "<ComponentName> name" and returns the name."""
    (_, pos) = open_tag(s, pos, "ComponentName")
    (name, pos) = read_name(s, pos)
    return (name, skip(s, pos, MULTISPACE))


def read_component_entry(s, pos):
    (name, pos) = read_component_name(s, pos)
    (component, pos) = read_component(s, pos)
    return ((name, component), pos)


def _read_attribute(s, pos):
    (key, pos) = open_any(s, pos)
    (value, pos) = read_tensor(s, pos)
    return ((key, value), pos)


def read_component(s, pos):
    """Reads a component starting at position 'pos', something like
    "<SigmoidComponent> <Dim> 10 <ValueAvg> [ ] ... </SigmoidComponent>".
    The attribute list ends at the first thing that is not "<Name> value";
    that has to be the closing tag matching the opening one.

    Returns the pair (component, new_pos).
    """
    (klass, pos) = open_any(s, pos)
    (pairs, pos) = many0(_read_attribute)(s, pos)
    attributes = dict()
    for (key, value) in pairs:
        if key in attributes:
            logger.warning("Attribute {0} appears more than once in {1}; "
                           "keeping the last one".format(key, klass))
        # values are shared with whoever holds the component, so freeze them.
        value.flags.writeable = False
        attributes[key] = value
    (_, pos) = close_tag(s, pos, klass)
    return (Component(klass, attributes), pos)


def read_model(filename, nnet3_copy="nnet3-copy"):
    """Reads an nnet3 model from 'filename' and returns an Nnet3Model.
    'filename' may be "-" for stdin or end in ".gz".  Binary models are
    converted to text by running 'nnet3_copy --binary=false'."""
    with common.smart_open(filename) as f:
        data = f.read()
    if data.startswith(_BINARY_HEADER):
        if filename == "-":
            raise InputError("Binary nnet3 models cannot be read from stdin; "
                             "convert with '{0} --binary=false' first".format(
                                 nnet3_copy))
        command = "{0} --binary=false {1} -".format(nnet3_copy, filename)
        logger.info("Converting binary model: {0}".format(command))
        data = common.get_command_stdout(command)
    return nnet3(data)
