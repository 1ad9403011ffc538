# Copyright 2026    kaldi-nnet3 authors
# Apache 2.0.

"""Reader for Kaldi nnet3 models in text format."""

from kaldi_nnet3.config_lines import ConfigLines, parse_config
from kaldi_nnet3.descriptor import Descriptor
from kaldi_nnet3.exceptions import (CommandError, ConfigLineError,
                                    EncodingError, EnvelopeError, InputError,
                                    KeyNotUniqueError, ParseError)
from kaldi_nnet3.model import Component, Nnet3Model
from kaldi_nnet3.parser import nnet3, read_model

__version__ = '0.1.0'
