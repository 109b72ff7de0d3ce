"""
Loads a handler file as a python module and lists the values it exports.

Each handler directory is loaded as a package, so handler modules can import their siblings
with relative imports (`from . import util`). The package and everything loaded into it are
removed from sys.modules once the handler module has run.
"""
import hashlib
import importlib.machinery
import importlib.util
import inspect
import logging
import os
import sys
import types
from collections import OrderedDict

logger = logging.getLogger(__name__)

# the prefix of the packages that handler directories are loaded as
module_namespace = 'hookloader_handlers'


class LoaderError(Exception):
    """ Raised when handlers cannot be loaded. """


class ModuleLoadError(LoaderError):
    """ A handler file could not be loaded as a module. """
    def __init__(self, file, cause):
        super().__init__("Failed to load %s because: %s" % (file, cause))
        self.file = file
        self.cause = cause


def _identifier(text):
    return ''.join(c if c.isalnum() else '_' for c in text)


def package_name_for(directory):
    """
    A package name unique to the directory, so that directories with the same name in different
    locations are loaded as distinct packages.

    >>> package_name_for('/srv/handlers').startswith('hookloader_handlers_handlers_')
    True
    """
    directory = os.path.abspath(directory)
    digest = hashlib.sha1(directory.encode('utf-8')).hexdigest()[:8]
    return "%s_%s_%s" % (module_namespace, _identifier(os.path.basename(directory)), digest)


def module_name_for(path):
    """
    The name a handler file is loaded as: its stem within the package for its directory.

    >>> module_name_for('/srv/handlers/chat.py').endswith('.chat')
    True
    """
    stem = os.path.splitext(os.path.basename(path))[0]
    return package_name_for(os.path.dirname(os.path.abspath(path))) + '.' + _identifier(stem)


def directory_package(name, directory):
    """ A package whose submodules are the files in the directory. """
    package = types.ModuleType(name)
    spec = importlib.machinery.ModuleSpec(name, None, is_package=True)
    spec.submodule_search_locations = [directory]
    package.__spec__ = spec
    package.__path__ = [directory]
    package.__package__ = name
    return package


def exported_values(module) -> OrderedDict:
    """
    Determines the values a module exports, in definition order.
    When the module declares __all__, those names are the exports. Otherwise the exports are
    the public functions and classes defined in the module itself; imported names are not exported.
    """
    names = getattr(module, '__all__', None)
    if names is not None:
        return OrderedDict((name, getattr(module, name)) for name in names)

    exports = OrderedDict()
    for name, value in vars(module).items():
        if name.startswith('_'):
            continue
        if not (inspect.isfunction(value) or inspect.isclass(value)):
            continue
        if getattr(value, '__module__', None) != module.__name__:
            continue
        exports[name] = value
    return exports


class ModuleLoader:
    """
    Loads files into modules. Each call loads the file afresh; modules are not cached
    between calls.
    """

    def load_module(self, path):
        name = module_name_for(path)
        package_name = name.rpartition('.')[0]
        try:
            spec = importlib.util.spec_from_file_location(name, path)
            if spec is None or spec.loader is None:
                raise ImportError("no module loader for %s" % path)
            module = importlib.util.module_from_spec(spec)
            # registered while executing so that relative imports resolve, and the module
            # can refer to itself (e.g. dataclasses, pickle)
            sys.modules[package_name] = directory_package(package_name, os.path.dirname(os.path.abspath(path)))
            sys.modules[name] = module
            try:
                spec.loader.exec_module(module)
            finally:
                self._unload_package(package_name)
        except Exception as e:
            raise ModuleLoadError(path, e) from e
        logger.debug("loaded module %s from %s" % (name, path))
        return module

    @staticmethod
    def _unload_package(package_name):
        prefix = package_name + '.'
        for loaded in [n for n in sys.modules if n == package_name or n.startswith(prefix)]:
            sys.modules.pop(loaded, None)

    def load(self, path) -> OrderedDict:
        """
        Loads the file and returns the values it exports.
        :raises ModuleLoadError: when the file cannot be loaded, including when the module
            itself raises an exception
        """
        module = self.load_module(path)
        try:
            return exported_values(module)
        except AttributeError as e:
            # __all__ names a value the module doesn't define
            raise ModuleLoadError(path, e) from e
