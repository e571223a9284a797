import logging
import threading

from importlib import import_module
from os import path


logger = logging.getLogger(__name__)

version = '0.1 alpha'
release = '0.1.0a1'

basedir = path.dirname(path.realpath(__file__))
"""
Base directory for the module.

This can be used by modules looking for configuration and data files to be
referenced or copied with a known path relative to the package root.

:rtype: str
"""

class Env:
    """
    rdfldp environment.

    Instances of this class contain the environment necessary to run a
    self-standing instance of the LDP resource model in a Python environment.
    """

    def setup(self, config_dir=None, config=None):
        """
        Set the environment up.

        This must be done before using the API layer or the admin tool. The
        resource model itself does not read the environment: stores are
        passed to resources explicitly.

        This method will warn and not do anything if it has already been
        called in the same runtime environment,

        :param str config_dir: Path to a directory containing the
            configuration ``.yml`` files. If this and ``config`` are omitted,
            the configuration files are read from the default directory defined
            in :py:meth:`~rdfldp.config_parser.parse_config()`.

        :param dict config: Fully-formed configuration as a dictionary. If
            this is provided, ``config_dir`` is ignored. This is useful to
            call ``parse_config()`` separately and modify the configuration
            manually before passing it to the setup.
        """
        if hasattr(self, 'app_globals'):
            logger.warning('The environment is already set up.')
            return

        if not config:
            from .config_parser import parse_config
            config = parse_config(config_dir)

        self.app_globals = _AppGlobals(config)


    def teardown(self):
        """
        Discard the application globals.

        Mostly useful for test suites that need to set up the environment
        with different configurations.
        """
        if hasattr(self, 'app_globals'):
            delattr(self, 'app_globals')


env = Env()
"""
Object for storing global variables. Different environments
(e.g. admin tool, test suite) put the appropriate value in it.

e.g.::

    >>> from rdfldp import env
    >>> env.setup()

Or, with a custom configuration directory::

    >>> from rdfldp import env
    >>> env.setup('/my/config/dir')

Or, to load a configuration and modify it before setting up the environment::

    >>> from rdfldp import env
    >>> from rdfldp.config_parser import parse_config
    >>> config = parse_config(config_dir)
    >>> config['application']['store']['ldp_nr']['location'] = '/data/bin'
    >>> env.setup(config=config)

:rtype: Object
"""


## Private members. Nothing interesting here.

class _AppGlobals:
    """
    Application Globals.

    This class is instantiated and used as a carrier for the graph store and
    the storage adapter settings.

    The variables are set on initialization by passing a configuration dict.
    The instance with the loaded variables is then assigned to the
    :data:`rdfldp.env` global variable.

    :see_also: rdfldp.env.setup()
    """
    def __init__(self, config):
        """
        Generate global variables from configuration.
        """
        self._config = config
        self._lock = threading.Lock()


    @property
    def config(self):
        """
        Global configuration.
        """
        return self._config


    @property
    def rdf_store(self):
        """
        Current graph store.

        Lazy loaded because it needs the config to be set up.

        This is an instance of
        :class:`~rdfldp.store.ldp_rs.graph_store.GraphStore`.
        """
        with self._lock:
            if not hasattr(self, '_rdf_store'):
                from rdfldp.store.ldp_rs.graph_store import GraphStore
                self._rdf_store = GraphStore(
                        self.config['application']['store']['ldp_rs'])

        return self._rdf_store


    @property
    def storage_adapter_cls(self):
        """
        Storage adapter class for binary contents.

        The module name is read from the ``store.ldp_nr.adapter``
        configuration option. The class must have the camel-cased module
        name, e.g. ``file_adapter`` resolves to
        :class:`~rdfldp.store.ldp_nr.file_adapter.FileAdapter`.
        """
        if not hasattr(self, '_storage_adapter_cls'):
            adapter_mod_name = (
                    self.config['application']['store']['ldp_nr']['adapter'])
            adapter_mod = import_module('rdfldp.store.ldp_nr.{}'.format(
                    adapter_mod_name))
            self._storage_adapter_cls = getattr(
                    adapter_mod, self.camelcase(adapter_mod_name))
            logger.info('Storage adapter: {}'.format(adapter_mod_name))

        return self._storage_adapter_cls


    @property
    def root_uri(self):
        """
        URI of the root container.

        :rtype: str
        """
        return self.config['application']['root_uri']


    @staticmethod
    def camelcase(word):
        """
        Convert a string with underscores to a camel-cased one.

        Ripped from https://stackoverflow.com/a/6425628
        """
        return ''.join(x.capitalize() or '_' for x in word.split('_'))
