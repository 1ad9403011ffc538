#!/usr/bin/env python3

# Copyright 2016    Vijayaditya Peddinti.
#           2017-2018    Daniel Povey
#           2026    kaldi-nnet3 authors
# Apache 2.0.

""" This script prints a summary of a text-format (or, with nnet3-copy on
the path, binary) nnet3 model, similar to the output of nnet3-info, and can
dump the parameters of its components as a pickled python dict.
"""

import argparse
import logging
import pickle
import sys
import traceback

from kaldi_nnet3 import common
from kaldi_nnet3.config_lines import (ComponentNode, DimRangeNode, InputNode,
                                      OutputNode)
from kaldi_nnet3.diagnostics import compute_derived_quantities
from kaldi_nnet3.model import shape_string
from kaldi_nnet3.parser import read_model

logger = logging.getLogger('kaldi_nnet3')


def setup_logging(verbose):
    level = logging.DEBUG if verbose else logging.INFO
    logger.setLevel(level)
    handler = logging.StreamHandler()
    handler.setLevel(level)
    formatter = logging.Formatter("%(asctime)s [%(pathname)s:%(lineno)s - "
                                  "%(funcName)s - %(levelname)s ] %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    return handler


def get_args(argv=None):
    parser = argparse.ArgumentParser(
        description="""Prints the nodes and components of an nnet3 model,
        one line each, with the shapes of the component parameters.""",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    parser.add_argument("--derived", type=str, action=common.StrToBoolAction,
                        choices=["true", "false"], default=False,
                        help="If true, also print row and column norms of "
                        "parameter matrices and other derived quantities")
    parser.add_argument("--pickle-out", type=str, dest='pickle_out',
                        default=None,
                        help="If given, write the component parameters as a "
                        "pickled dict to this file")
    parser.add_argument("--nnet3-copy", type=str, dest='nnet3_copy',
                        default="nnet3-copy",
                        help="Command used to convert binary models to text")
    parser.add_argument("--verbose", action="store_true",
                        help="Print debugging output")
    parser.add_argument("model",
                        help="nnet3 model in text or binary format; "
                        "'-' for stdin")
    return parser.parse_args(argv)


def node_to_string(node):
    if isinstance(node, InputNode):
        return "input-node name={0} dim={1}".format(node.name, node.dim)
    elif isinstance(node, ComponentNode):
        return "component-node name={0} component={1} input={2}".format(
            node.name, node.component, node.input)
    elif isinstance(node, DimRangeNode):
        return ("dim-range-node name={0} input-node={1} dim-offset={2} "
                "dim={3}".format(node.name, node.input_node, node.dim_offset,
                                 node.dim))
    else:
        assert isinstance(node, OutputNode)
        return "output-node name={0} input={1} objective={2}".format(
            node.name, node.input, node.objective)


def vector_to_string(v):
    return "[ " + " ".join("{0:.4g}".format(x) for x in v) + " ]"


def write_summary(model, out, derived=None):
    graph = model.graph
    for nodes in [graph.input_nodes, graph.component_nodes,
                  graph.dim_range_nodes, graph.output_nodes]:
        for node in nodes.values():
            print(node_to_string(node), file=out)
    print("num-components: {0}".format(model.num_components()), file=out)
    for name in sorted(model.components):
        c = model.components[name]
        fields = ["{0}={1}".format(k, shape_string(v))
                  for (k, v) in c.attributes.items()]
        print("component name={0} type={1}{2}".format(
            name, c.klass, "".join(", " + f for f in fields)), file=out)
        if derived is not None and name in derived:
            for (key, value) in sorted(derived[name].items()):
                print("  {0}={1}".format(key, vector_to_string(value)),
                      file=out)


def model_to_dict(model, derived=None):
    """Returns a dict from component name to a dict holding 'type' (e.g.
    '<LinearComponent>'), 'raw-type' (e.g. 'Linear'), the attribute arrays
    under their own names, and the derived quantities if given."""
    d = dict()
    for (name, c) in model.components.items():
        entry = dict(c.attributes)
        entry['type'] = '<' + c.klass + '>'
        entry['raw-type'] = c.raw_type()
        if derived is not None and name in derived:
            entry.update(derived[name])
        d[name] = entry
    return d


def run(args):
    model = read_model(args.model, nnet3_copy=args.nnet3_copy)
    derived = compute_derived_quantities(model) if args.derived else None
    write_summary(model, sys.stdout, derived)
    if args.pickle_out is not None:
        with common.smart_open(args.pickle_out, "w") as f:
            pickle.dump(model_to_dict(model, derived), f)
        logger.info("Wrote {0} components to {1}".format(
            model.num_components(), args.pickle_out))


def main(argv=None):
    args = get_args(argv)
    handler = setup_logging(args.verbose)
    try:
        run(args)
    except Exception as e:
        if args.verbose:
            traceback.print_exc()
        logger.error("{0}: {1}".format(args.model, e))
        sys.exit(1)
    finally:
        logger.removeHandler(handler)


if __name__ == "__main__":
    main()
