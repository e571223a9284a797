import json
import logging
import sys

from logging.config import dictConfig

import click
import click_log

from rdfldp import env
from rdfldp.api import admin as admin_api
from rdfldp.api import resource as rsrc_api
from rdfldp.config_parser import parse_config
from rdfldp.exceptions import ChecksumValidationError, RequestError

__doc__="""
Utility to perform core maintenance tasks via console command-line.

The command-line tool is self-documented. Type::

    ldp-admin --help

for a list of tools and options.
"""

logger = logging.getLogger(__name__)
click_log.basic_config(logger)


def _setup_env(config_dir=None):
    """
    Set the environment up from a configuration directory, unless this has
    already been done in the current process.
    """
    if hasattr(env, 'app_globals'):
        return
    config = parse_config(config_dir)
    dictConfig(config['logging'])
    env.setup(config=config)


@click.group()
@click.option(
    '--config-folder', '-c', default=None, help='Alternative configuration '
    'folder to look up. If not set, the location set in the environment or '
    'the default configuration is used.')
@click_log.simple_verbosity_option(logger)
def admin(config_folder=None):
    _setup_env(config_folder)


@click.command()
def bootstrap():
    """
    Create the root container.

    The root container is a basic container at the ``root_uri`` set in the
    application configuration. If it exists already, nothing is changed.
    """
    if admin_api.bootstrap():
        click.echo('Root container created at {}.'.format(
            env.app_globals.root_uri))
    else:
        click.echo('Root container exists already.')


@click.command()
@click.option(
    '--human', '-h', is_flag=True, flag_value=True,
    help='Print a human-readable string. By default, JSON is printed.')
def stats(human=False):
    """
    Print repository statistics.

    @param human (bool) Whether to output the data in human-readable
    format.
    """
    stat_data = admin_api.stats()
    if human:
        click.echo('Resources: {}'.format(stat_data['total']))
        for rdf_type, ct in sorted(stat_data['rsrc_stats'].items()):
            click.echo('  {}: {}'.format(rdf_type, ct))
        click.echo('Destroyed: {}'.format(stat_data['destroyed']))
    else:
        click.echo(json.dumps(stat_data))


@click.command()
@click.argument('uid')
@click.option(
    '--meta', '-m', is_flag=True, flag_value=True,
    help='Print the server-managed metadata instead of the content graph.')
@click.option(
    '--format', '-f', 'rdf_format', default='turtle',
    help='RDF serialization format. Default: turtle.')
def show(uid, meta=False, rdf_format='turtle'):
    """
    Print the graph of a resource.

    UID is a path relative to the root URI or a full URI.
    """
    try:
        rsrc = rsrc_api.get(uid)
    except RequestError as e:
        click.echo(click.style(str(e), fg='red'), err=True)
        sys.exit(1)

    if meta:
        gr = rsrc.metagraph
    elif rsrc.is_non_rdf_source:
        gr = rsrc.description.graph
    else:
        gr = rsrc.to_response()
    click.echo(gr.serialize(format=rdf_format))


@click.command()
@click.argument('uid')
def check_fixity(uid):
    """
    Check fixity of a resource.

    The content digest is recalculated and compared with the stored one.
    """
    try:
        admin_api.fixity_check(uid)
    except (ChecksumValidationError, RequestError) as e:
        click.echo(click.style(str(e), fg='red', bold=True), err=True)
        sys.exit(1)
    click.echo('Fixity check passed for {}.'.format(uid))


admin.add_command(bootstrap)
admin.add_command(check_fixity)
admin.add_command(show)
admin.add_command(stats)

if __name__ == '__main__':
    admin()
