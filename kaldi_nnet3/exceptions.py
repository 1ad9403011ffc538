# Copyright 2016    Vimal Manohar
#           2026    kaldi-nnet3 authors
# Apache 2.0.

"""This module contains the exceptions and errors that are raised while
reading text-format nnet3 models.
"""


def _context(s, pos, length=24):
    """Returns a printable excerpt of the bytes 's' starting at 'pos'."""
    if pos >= len(s):
        return "end of input"
    excerpt = bytes(s[pos:pos + length]).decode("utf-8", "replace")
    return repr(excerpt)


class KeyNotUniqueError(Exception):
    """Exception raised when a duplicate key is found.
    """
    def __init__(self, key, location):
        Exception.__init__(self, "Duplicate entry found for key {0} "
                                 "in {1}".format(key, location))
        self.key = key


class InputError(Exception):
    """Exception raised when an invalid input is read.
    """
    def __init__(self, err, line=None, input_file=""):
        if line is None:
            Exception.__init__(self, err)
        else:
            Exception.__init__(self, "{err}\nInvalid line {line} in file "
                                     "{f}".format(err=err, line=line,
                                                  f=input_file))


class ParseError(InputError):
    """Raised by the grammar rules when the text at 'position' does not
    match what was expected.  'found' is a short excerpt of the input.
    """
    def __init__(self, expected, s, position):
        self.expected = expected
        self.position = position
        self.found = _context(s, position)
        InputError.__init__(self, "expected {0}, found {1} at position "
                                  "{2}".format(expected, self.found, position))


class EnvelopeError(InputError):
    """A ParseError translated for the caller of nnet3(): it carries the
    byte offset plus the line and column where matching stopped.
    """
    def __init__(self, parse_error, s):
        self.offset = parse_error.position
        self.expected = parse_error.expected
        self.found = parse_error.found
        prefix = bytes(s[:self.offset])
        self.line_number = prefix.count(b"\n") + 1
        self.column = self.offset - (prefix.rfind(b"\n") + 1) + 1
        InputError.__init__(
            self, "Parsing kaldi envelope at byte {0} (line {1}, column {2}): "
                  "expected {3}, found {4}".format(
                      self.offset, self.line_number, self.column,
                      self.expected, self.found))


class EncodingError(InputError):
    """Raised when the config section of the model is not valid UTF-8."""
    def __init__(self, err, offset):
        self.offset = offset
        InputError.__init__(self, "Config section starting at byte {0} is "
                                  "not valid UTF-8: {1}".format(offset, err))


class ConfigLineError(InputError):
    """Raised when a line of the config section cannot be interpreted."""
    def __init__(self, err, line=None):
        self.config_line = line
        if line is None:
            InputError.__init__(self, err)
        else:
            InputError.__init__(self, "{0}\nIn config line: {1}".format(
                err, line.strip()))


class CommandError(Exception):
    """Exception raised when an external Kaldi binary exits with nonzero
    status.
    """
    def __init__(self, returncode, command):
        Exception.__init__(self, "Command exited with status {0}: {1}".format(
            returncode, command))
        self.returncode = returncode
