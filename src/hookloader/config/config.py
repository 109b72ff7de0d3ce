"""
Loads loader options from configuration files.

A named configuration is assembled from several files, each optional, merged in this order:

- <name>.default.cfg in the configuration directory
- <name>.<os>.cfg in the configuration directory, e.g. loader.linux.cfg
- ~/<name>.cfg, the user's override
- <name>.cfg in the configuration directory

The merged configuration is validated against `options_spec`.
"""
import logging
import os
import platform

from configobj import ConfigObj, ConfigObjError
from validate import Validator

from hookloader.loader import Loader

# The default extension for configuration files
config_extension = '.cfg'

# validation schema for the loader options
options_spec = [
    "cwd = string(default=None)",
    "verbose = boolean(default=False)",
    "extensions = force_list(default=list('py'))",
    "with_namespace = boolean(default=True)",
    "isolate_errors = boolean(default=False)",
    "logger = string(default=None)",
]


def config_flavor(name, flavor=None):
    """
    >>> config_flavor('loader', 'default')
    'loader.default'
    >>> config_flavor('loader')
    'loader'
    """
    return name if not flavor else name + '.' + flavor


def config_filename(name, directory):
    return os.path.join(directory, name + config_extension)


def load_config_file_base(file, must_exist=True):
    """
    Loads a configuration file
    :param file:        The configuration file to load
    :param must_exist:  when True, the file must exist or an exception is thrown.
    :return: The ConfigObj instance for the file.
    """
    try:
        return ConfigObj(file, file_error=must_exist) \
            if must_exist or os.path.exists(file) else ConfigObj()
    except ConfigObjError as e:
        raise type(e)(str(e) + ' at ' + file)


def config_flavor_file(name, directory, flavor=None) -> ConfigObj:
    return load_config_file_base(config_filename(config_flavor(name, flavor), directory), False)


def map_os_name(name):
    """
    >>> map_os_name('Windows')
    'windows'
    >>> map_os_name("Darwin")
    'osx'
    """
    name = name.lower()
    if name == 'darwin':
        name = 'osx'
    return name


def os_name():
    return map_os_name(platform.system())


def load_config(name, directory) -> ConfigObj:
    """
    Loads and validates all the configuration files for the given name.
    :param name: the base name of the configuration files
    :param directory: the location of the configuration files
    :raises ConfigObjError: when a file is malformed or the configuration fails validation
    """
    config = ConfigObj(configspec=options_spec)
    config.merge(config_flavor_file(name, directory, 'default'))
    config.merge(config_flavor_file(name, directory, os_name()))
    config.merge(load_config_file_base(os.path.expanduser('~/' + name + config_extension), must_exist=False))
    config.merge(config_flavor_file(name, directory))

    result = config.validate(Validator(), preserve_errors=True)
    if result is not True:
        raise ConfigObjError("the config file %s failed validation %s" % (name, result))
    return config


def options_overlay(config) -> dict:
    """
    Converts a validated configuration to keyword options for Loader.
    A relative cwd is taken relative to the configuration directory, given as config['_directory'].
    """
    overlay = {k: config[k] for k in ('verbose', 'with_namespace', 'isolate_errors')}
    overlay['extensions'] = tuple(config['extensions'])
    if config['cwd'] is not None:
        overlay['cwd'] = os.path.join(config.get('_directory', ''), config['cwd'])
    if config['logger'] is not None:
        overlay['logger'] = logging.getLogger(config['logger'])
    return overlay


def load_options(name, directory) -> dict:
    """
    Loads the named configuration and returns it as keyword options for Loader.
    """
    config = load_config(name, directory)
    config['_directory'] = directory
    return options_overlay(config)


def configure_loader(name, directory, **overrides) -> Loader:
    """
    Creates a Loader from the named configuration. Keyword arguments take precedence over the
    configured values.
    """
    options = load_options(name, directory)
    options.update(overrides)
    return Loader(**options)
