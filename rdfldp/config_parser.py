import logging

from os import environ, path

import yaml

import rdfldp

logger = logging.getLogger(__name__)

default_config_dir = environ.get(
        'RDFLDP_CONFIG_DIR', path.join(rdfldp.basedir, 'etc.defaults'))
"""
Default configuration directory.

This value falls back to the provided ``etc.defaults`` directory if the
``RDFLDP_CONFIG_DIR`` environment variable is not set.

This value can still be overridden by custom applications by passing the
``config_dir`` value to :func:`parse_config` explicitly.
"""


def parse_config(config_dir=None):
    """
    Parse configuration from a directory.

    This is normally called by the admin tool or by a Python client through
    :py:meth:`rdfldp.env.setup()` but an application using a non-default
    configuration may specify an alternative configuration directory.

    The directory must have the same structure as the one provided in
    ``etc.defaults``.

    :param config_dir: Location on the filesystem of the configuration
        directory. The default is set by the ``RDFLDP_CONFIG_DIR`` environment
        variable or, if this is not set, the ``etc.defaults`` stock directory.

    :rtype: dict
    """
    configs = (
        'application',
        'logging',
        'namespaces',
    )

    if not config_dir:
        config_dir = default_config_dir

    # This will hold a dict of all configuration values.
    _config = {}

    logger.debug(f'Reading configuration at {config_dir}')

    for cname in configs:
        fname = path.join(config_dir, f'{cname}.yml')
        with open(fname, 'r') as fh:
            _config[cname] = yaml.load(fh, yaml.SafeLoader)

    # An empty namespaces file loads as None.
    _config['namespaces'] = _config['namespaces'] or {}

    ldp_nr_conf = _config['application']['store']['ldp_nr']
    if not ldp_nr_conf.get('location'):
        ldp_nr_conf['location'] = path.join(
                rdfldp.basedir, 'data', 'ldpnr_store')

    logger.info('Graph store plugin: {}'.format(
        _config['application']['store']['ldp_rs']['plugin']))
    logger.info('Binary store location: {}'.format(ldp_nr_conf['location']))

    return _config
