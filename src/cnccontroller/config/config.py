"""
Layered configuration files for the controller client.

Configurations are read with configobj and validated against a schema file that
also supplies the defaults. See load_config for the files consulted.
"""
import logging
import os
import platform

from configobj import ConfigObj, ConfigObjError, Section
from configobj.validate import Validator

from cnccontroller.constants import ConnectionKind, ControllerFamily
from cnccontroller.session import SerialOptions, SocketOptions
from cnccontroller.transport.base import ConnectOptions

logger = logging.getLogger(__name__)

# The default extension for configuration files
config_extension = '.cfg'

# The name of the configuration shipped with the package
package_config_name = 'cnccontroller'


def config_flavor(name, flavor=None):
    """
    >>> config_flavor('cnccontroller', 'default')
    'cnccontroller.default'
    >>> config_flavor('cnccontroller')
    'cnccontroller'
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
        return ConfigObj(file, interpolation='Template', file_error=must_exist) \
            if must_exist or os.path.exists(file) else ConfigObj()
    except ConfigObjError as e:
        raise type(e)(str(e) + ' at ' + file)


def config_flavor_file(name, directory, flavor=None) -> ConfigObj:
    """
    Loads a specialization of a config file, named after the base followed by a period and the
    specialization. A missing file gives an empty configuration.
    """
    file = config_filename(config_flavor(name, flavor), directory)
    return load_config_file_base(file, False)


def load_schema(name, directory) -> ConfigObj:
    """ Loads the schema that validates the named configuration. The schema must exist. """
    file = config_filename(config_flavor(name, 'schema'), directory)
    return ConfigObj(file, list_values=False, _inspec=True, file_error=True)


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


def user_config_file(name):
    return os.path.expanduser('~/' + name + config_extension)


def load_config(name, directory):
    """
        Loads all the configuration files that relate to the given name.
        Configurations are merged in this order, later files overriding earlier ones:
        - the default specialization
        - the platform specialization
        - the user override in the home directory
        - the local configuration
        The merged configuration is validated against the schema specialization, which
        fills in defaults for values not given.
    :param directory: the location of the configuration files
    :return: the validated ConfigObj
    """
    config = ConfigObj()
    config.merge(config_flavor_file(name, directory, 'default'))
    config.merge(config_flavor_file(name, directory, os_name()))
    config.merge(load_config_file_base(user_config_file(name), must_exist=False))
    config.merge(config_flavor_file(name, directory))

    config.configspec = load_schema(name, directory)
    result = config.validate(Validator())
    if result is not True:
        raise ConfigObjError("the config file %s failed validation %s" % (name, result))
    return config


def fetch_conf_path(conf: Section, path):
    """
    Retrieves the named configuration section
    :param conf:   The root configuration
    :param path:   An iterable that lists the names of the sections to resolve
    :return: The section identified by the path, or None if it does not exist.
    """
    for p in path:
        conf = conf.get(p, None)
        if conf is None:
            return
    return conf


def load_controller_config(directory=None, name=package_config_name):
    """
    Loads the client configuration.
    :param directory: the directory holding the configuration files. Defaults to the package directory,
        which holds the shipped defaults and schema.
    """
    directory = directory or os.path.dirname(__file__)
    config = load_config(name, directory)
    logger.debug("loaded configuration %s from %s" % (name, directory))
    return config


def connect_options(config) -> ConnectOptions:
    """
    Builds the options for the connection to the service from the [server] section.
    """
    server = fetch_conf_path(config, ['server']) or {}
    return ConnectOptions(reconnection=server.get('reconnection', True),
                          reconnection_attempts=server.get('reconnection_attempts', 0),
                          reconnection_delay=server.get('reconnection_delay', 1),
                          reconnection_delay_max=server.get('reconnection_delay_max', 5),
                          token=server.get('token') or None,
                          socketio_path=server.get('socketio_path', 'socket.io'))


def server_url(config):
    server = fetch_conf_path(config, ['server']) or {}
    return server.get('host', '')


def open_options(config):
    """
    Builds the arguments to open a machine connection from the [connection] section.
    :return: a tuple of the ControllerFamily, ConnectionKind and the SerialOptions or SocketOptions.
    """
    connection = fetch_conf_path(config, ['connection']) or {}
    family = ControllerFamily.lookup(connection.get('controller')) or ControllerFamily.GRBL
    kind = ConnectionKind.lookup(connection.get('type')) or ConnectionKind.SERIAL
    if kind is ConnectionKind.SOCKET:
        options = SocketOptions(connection.get('host', ''), connection.get('port', 23))
    else:
        options = SerialOptions(connection.get('path', ''), connection.get('baud_rate', 115200))
    return family, kind, options
