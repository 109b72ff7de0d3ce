"""
Options controlling how handler modules are discovered and bound.

The options are an immutable record. A caller supplies an overlay of the fields it
wants to change and the remaining fields take their defaults.
"""
import logging
import os
from collections import namedtuple

# the default logger receiving the loader's messages when verbose
default_logger = logging.getLogger('hookloader')

default_extensions = ('py',)

LoaderOptions = namedtuple('LoaderOptions', ['cwd', 'verbose', 'logger', 'extensions', 'with_namespace',
                                             'isolate_errors'])
LoaderOptions.__doc__ = """
    :param cwd: the absolute directory that scanned directory names are relative to
    :param verbose: when False, the loader's log messages are discarded
    :param logger: a logging.Logger compatible object that receives the loader's messages
    :param extensions: the file extensions (without the leading '.') of handler modules
    :param with_namespace: qualifies handler names with the module's relative location
    :param isolate_errors: when True, a failing handler does not prevent the remaining handlers
        from running for the same connection
"""


def default_options():
    return LoaderOptions(cwd=os.getcwd(), verbose=False, logger=default_logger,
                         extensions=default_extensions, with_namespace=True, isolate_errors=False)


def merge_options(overlay=None, base: LoaderOptions=None) -> LoaderOptions:
    """
    Merges the given overlay over the base options.
    :param overlay: a mapping of option name to value. Values that are None are ignored.
    :param base: the options to merge over. When not given, the default options are used.
    :raises TypeError: when the overlay names an unknown option

    >>> merge_options({'verbose': True}, default_options()).verbose
    True
    >>> merge_options({'extensions': ['py', 'pyw']}).extensions
    ('py', 'pyw')
    """
    options = base or default_options()
    overlay = {k: v for k, v in (overlay or {}).items() if v is not None}
    unknown = sorted(set(overlay) - set(LoaderOptions._fields))
    if unknown:
        raise TypeError("unknown loader options: %s" % ", ".join(unknown))
    if 'extensions' in overlay:
        overlay['extensions'] = normalize_extensions(overlay['extensions'])
    if 'cwd' in overlay:
        overlay['cwd'] = os.path.abspath(overlay['cwd'])
    return options._replace(**overlay)


def normalize_extensions(extensions):
    """
    Converts the extensions to an ordered tuple without duplicates or leading periods.
    A single string is treated as a single extension.

    >>> normalize_extensions(['.py', 'pyw', 'py'])
    ('py', 'pyw')
    >>> normalize_extensions('py')
    ('py',)
    """
    if isinstance(extensions, str):
        extensions = [extensions]
    result = []
    for e in extensions:
        e = e.lstrip('.')
        if e not in result:
            result.append(e)
    return tuple(result)
