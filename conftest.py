import logging
import pytest

from os import path
from tempfile import gettempdir

from rdfldp import env
from rdfldp.config_parser import parse_config


# Override data directory locations.
config = parse_config()
data_dir = path.join(gettempdir(), 'rdfldp_test', 'data')
config['application']['store']['ldp_nr']['adapter'] = 'memory_adapter'
config['application']['store']['ldp_nr']['location'] = (
        path.join(data_dir, 'ldpnr_store'))

env.setup(config=config)

from rdfldp.store.ldp_nr.memory_adapter import MemoryAdapter
from rdfldp.store.ldp_rs.graph_store import GraphStore


@pytest.fixture
def store():
    '''
    Empty in-memory graph store.
    '''
    return GraphStore({'plugin': 'Memory'})


@pytest.fixture
def storage():
    '''
    In-memory storage adapter class, emptied before and after each test.
    '''
    MemoryAdapter.clear()

    yield MemoryAdapter

    MemoryAdapter.clear()


@pytest.fixture
def app_env(storage):
    '''
    Environment with a fresh graph store, for tests of the API and of the
    admin tool.
    '''
    env.teardown()
    env.setup(config=config)

    yield env

    env.teardown()
    env.setup(config=config)


@pytest.fixture(autouse=True)
def disable_logging():
    """Disable logging in all tests."""
    logging.disable(logging.INFO)
