import sys


def print_info(message):
    print(message)


def print_warning(message):
    print('Warning: {}'.format(message), file=sys.stderr)


def print_error(message):
    print(message, file=sys.stderr)
