# Copyright 2016 Vijayaditya Peddinti.
#           2016 Vimal Manohar
#           2026 kaldi-nnet3 authors
# Apache 2.0

""" This module contains utility functions and classes that are shared by
the nnet3 text-model reader and its command-line tool.
"""

import argparse
import gzip
import logging
import subprocess
import sys

from kaldi_nnet3.exceptions import CommandError

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def str_to_bool(value):
    if value == "true":
        return True
    elif value == "false":
        return False
    else:
        raise ValueError


class StrToBoolAction(argparse.Action):
    """ A custom action to convert bools from shell format i.e., true/false
        to python format i.e., True/False """

    def __call__(self, parser, namespace, values, option_string=None):
        try:
            setattr(namespace, self.dest, str_to_bool(values))
        except ValueError:
            raise argparse.ArgumentError(
                self, "Unknown value {0} for --{1}".format(values, self.dest))


class smart_open(object):
    """
    This class is designed to be used with the "with" construct in python
    to open files for reading or writing bytes.  It treats the filename "-"
    specially to return the binary buffer of sys.stdin or sys.stdout
    depending on whether the mode is "w" or "r", and reads or writes
    gzipped data when the filename ends in ".gz".

    e.g.: with smart_open(filename) as fh:
            data = fh.read()
    """
    def __init__(self, filename, mode="r"):
        self.filename = filename
        self.mode = mode
        assert self.mode == "w" or self.mode == "r"

    def __enter__(self):
        if self.filename == "-" and self.mode == "w":
            self.file_handle = sys.stdout.buffer
        elif self.filename == "-" and self.mode == "r":
            self.file_handle = sys.stdin.buffer
        elif self.filename.split('.')[-1] == 'gz':
            self.file_handle = gzip.open(self.filename, self.mode + "b")
        else:
            self.file_handle = open(self.filename, self.mode + "b")
        return self.file_handle

    def __exit__(self, *args):
        if self.filename != "-":
            self.file_handle.close()


def get_command_stdout(command, require_zero_status=True):
    """ Executes a command and returns its stdout output as bytes.  The
        command is executed with shell=True, so it may contain pipes and
        other shell constructs.

        If require_zero_status is True, this function will raise CommandError
        if the command has nonzero exit status.  If False, it just logs a
        warning if the exit status is nonzero.
    """
    p = subprocess.Popen(command, shell=True,
                         stdout=subprocess.PIPE)

    stdout = p.communicate()[0]
    if p.returncode != 0:
        if require_zero_status:
            raise CommandError(p.returncode, command)
        else:
            logger.warning("Command exited with status {0}: {1}".format(
                p.returncode, command))
    return stdout
