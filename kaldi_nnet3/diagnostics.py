# Copyright 2017-2018    Daniel Povey
#           2026         kaldi-nnet3 authors
# Apache 2.0.

"""Derived per-component quantities (parameter norms, rates of change)
that are useful when inspecting a trained nnet3 model.  Nothing here
modifies the model; results are returned as new dicts.
"""

import numpy as np

# Maps the raw component type (the type without 'Component') to the name of
# the attribute holding its parameter matrix.
PARAMS_ATTRIBUTE = {
    'Affine': 'LinearParams',
    'NaturalGradientAffine': 'LinearParams',
    'FixedAffine': 'LinearParams',
    'Linear': 'Params',
}


def get_params(component):
    """Returns the parameter matrix of an affine or linear component, or None
    for other component types."""
    name = PARAMS_ATTRIBUTE.get(component.raw_type())
    if name is None or name not in component.attributes:
        return None
    params = component.attributes[name]
    if params.ndim != 2:
        return None
    return params


def compute_derived_quantities(model):
    """This function, given an Nnet3Model, computes certain potentially-useful
    derived quantities for its components: row and column norms of parameter
    matrices, standard deviations of accumulated batch-norm stats.

    Returns a dict from component name to a dict of numpy arrays; components
    with nothing to report are left out.
    """
    ans = dict()
    for (name, c) in model.components.items():
        d = dict()
        params = get_params(c)
        if params is not None:
            d['row-norms'] = np.sqrt(np.sum(params * params, axis=1))
            d['col-norms'] = np.sqrt(np.sum(params * params, axis=0))
            size = d['col-norms'].size
            if size > 0 and size % 3 == 0:
                # if the input-dim of this layer is divisible by 3, then
                # compute the column-norms after reshaping... this is a kind
                # of pooled column-norm that makes sense for TDNNs or wherever
                # we have used Append().
                d['col-norms-3'] = np.sqrt(np.sum(np.power(
                    d['col-norms'], 2).reshape(3, size // 3), axis=0))
        if c.raw_type() == 'BatchNorm' and 'StatsVar' in c.attributes:
            d['stats-stddev'] = np.sqrt(c.attributes['StatsVar'])
        if len(d) > 0:
            ans[name] = d
    return ans


def compute_progress(model1, model2, derived1=None):
    """This function, given two models assumed to come from two successive
    iterations of training, computes certain component-level quantities that
    relate to the rate of change of parameters.  'derived1' is the output of
    compute_derived_quantities(model1); it is computed if not given.

    Returns a dict from component name to a dict of numpy arrays.
    """
    if derived1 is None:
        derived1 = compute_derived_quantities(model1)
    epsilon = 1.0e-20
    ans = dict()
    for component_name in model1.components:
        if component_name not in model2.components:
            continue
        params1 = get_params(model1.components[component_name])
        params2 = get_params(model2.components[component_name])
        if params1 is None or params2 is None:
            continue
        if params1.shape != params2.shape:
            continue  # can't compare them if sizes differ.
        norms = derived1[component_name]
        params_diff = params1 - params2
        d = dict()
        d['row-change'] = np.sqrt(np.sum(params_diff * params_diff, axis=1))
        d['col-change'] = np.sqrt(np.sum(params_diff * params_diff, axis=0))
        # compute relative change in rows and columns.
        d['rel-row-change'] = d['row-change'] / (norms['row-norms'] + epsilon)
        d['rel-col-change'] = d['col-change'] / (norms['col-norms'] + epsilon)

        if 'col-norms-3' in norms:
            # average the column changes over 3 blocks... this makes sense for
            # TDNNs or wherever we have used Append().
            size = d['col-change'].size
            d['col-change-3'] = np.sum(
                d['col-change'].reshape(3, size // 3), axis=0)
            d['rel-col-change-3'] = (d['col-change-3'] /
                                     (norms['col-norms-3'] + epsilon))
        ans[component_name] = d
    return ans
