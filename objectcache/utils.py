"""Common routines."""

import errno
import os
import shutil


def mkdir(name):
    try:
        os.makedirs(name, 0o700)
    except OSError as e:
        if e.errno != errno.EEXIST:
            raise


def rmtree(name):
    """Removes the directory ``name`` recursively.

    A directory which does not exist is not an error.
    """
    try:
        shutil.rmtree(name)
    except OSError as e:
        if e.errno != errno.ENOENT:
            raise


def remove_file(name):
    """Removes the file ``name``, ignoring a missing file."""
    try:
        os.remove(name)
    except OSError as e:
        if e.errno != errno.ENOENT:
            raise


_size_units = dict(B=1, K=2**10, M=2**20, G=2**30, T=2**40)


def parse_size(text):
    """Parses a size like ``512M`` or ``1G512M`` into a number of bytes.

    A plain number is a number of bytes. Note: K=2**10.
    """
    text = str(text).strip()
    if text.isdigit():
        return int(text)
    return parse_units(text, _size_units)


def format_size_with_unit(number):
    return format_with_unit(number, _size_units)


def parse_units(text, units):
    result = 0
    value = ''
    for ch in list(str(text).strip()):
        if ch.isdigit():
            value += ch
        elif ch not in units:
            raise ValueError('Unknown unit "{}" in: {}'.format(ch, text))
        else:
            unit = units[ch]
            if not value:
                raise ValueError('Unit without numeric value: {}'.format(
                    text))
            result += unit * int(value)
            value = ''
    if value:
        raise ValueError('Numeric value without unit: {}'.format(text))
    return result


def format_with_unit(number, size_units):
    units = sorted(size_units.items(), key=lambda x: -x[1])
    for unit, size in units:
        if number >= size:
            return "{amount:.3f}{unit}".format(amount=float(number) / size,
                                               unit=unit)
    return "{amount:.3f}{unit}".format(amount=number, unit=units[-1][0])
