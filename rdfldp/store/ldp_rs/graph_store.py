import logging

from contextlib import contextmanager
from threading import RLock

from rdflib import Dataset, Graph, URIRef

from rdfldp.dictionaries.namespaces import ns_mgr as nsm


logger = logging.getLogger(__name__)


class GraphStore:
    """
    Graph store holding the named graphs of all LDP resources.

    This wraps a :class:`rdflib.Dataset` backed by any RDFLib store plugin
    (``Memory`` by default). Each resource is made of two named graphs: its
    content graph, named after the resource URI, and its metadata graph,
    named ``<resource URI>#meta``.

    All write operations go through :meth:`add` and :meth:`remove`. Within a
    write transaction (see :meth:`txn_ctx`) these are journaled, so that a
    failed transaction leaves the store in the state it was found in.

    Transactions are serialized by a store-wide re-entrant lock, held for
    the whole read-check-write sequence of an operation. Read-only
    transactions take the same lock, since the in-memory store does not
    tolerate concurrent iteration and modification.
    """

    def __init__(self, config=None):
        """
        Initialize the dataset.

        :param dict config: The ``store.ldp_rs`` section of the application
            configuration. ``plugin`` is the RDFLib store plugin name and
            ``location`` is an optional path or connection string passed to
            the store when opening it.
        """
        self.config = config or {}
        plugin_name = self.config.get('plugin') or 'Memory'
        self.ds = Dataset(store=plugin_name, default_union=False)
        self.ds.namespace_manager = nsm
        if self.config.get('location'):
            logger.info('Opening graph store at {}'.format(
                self.config['location']))
            self.ds.open(self.config['location'], create=True)

        self._lock = RLock()
        self._journal = None
        self._compensations = None


    ## TRANSACTIONS ##

    @contextmanager
    def txn_ctx(self, write=False):
        """
        Transaction context manager.

        Transactions can be nested: only the outermost write transaction
        keeps the journal and rolls it back if an exception is raised in its
        context. The exception is always re-raised.

        :param bool write: Whether changes made in this context must be
            journaled.
        """
        with self._lock:
            is_outer_write = write and self._journal is None
            if is_outer_write:
                self._journal = []
                self._compensations = []
            try:
                yield self
            except Exception:
                if is_outer_write:
                    self._rollback()
                raise
            finally:
                if is_outer_write:
                    self._journal = None
                    self._compensations = None


    @property
    def is_txn_rw(self):
        """
        Whether a write transaction is open.

        :rtype: bool
        """
        return self._journal is not None


    def on_rollback(self, fn):
        """
        Register a compensating action for the current write transaction.

        The action is run, after the graph changes have been undone, if the
        transaction fails. This is used for changes happening outside of the
        graph store, e.g. binary contents written to a storage adapter.

        Outside of a write transaction this does nothing.

        :param callable fn: Function called without arguments.
        """
        if self._compensations is not None:
            self._compensations.append(fn)


    def _rollback(self):
        """
        Undo all journaled changes in reverse order.
        """
        logger.info('Rolling back {} changes.'.format(len(self._journal)))
        for op, trp, ctx in reversed(self._journal):
            gr = self._ctx_graph(ctx)
            if op == 'add':
                gr.remove(trp)
            else:
                gr.add(trp)
        for fn in reversed(self._compensations):
            fn()


    ## READ METHODS ##

    def get_graph(self, ctx):
        """
        Get a copy of a named graph.

        Modifying the returned graph has no effect on the store.

        :param ctx: Name of the graph.
        :type ctx: rdflib.URIRef or str

        :rtype: rdflib.Graph
        """
        with self._lock:
            gr = Graph(identifier=URIRef(ctx))
            gr.namespace_manager = nsm
            for trp in self._ctx_graph(ctx):
                gr.add(trp)

        return gr


    def triples(self, pattern, ctx):
        """
        Triples matching a pattern in a named graph.

        :param tuple pattern: 3-tuple of terms or ``None`` as wildcard.
        :param ctx: Name of the graph.

        :rtype: list(tuple)
        """
        with self._lock:
            return list(self._ctx_graph(ctx).triples(pattern))


    def value(self, s, p, ctx):
        """
        Single object of a subject and predicate in a named graph.

        :rtype: rdflib.term.Identifier or None
        """
        with self._lock:
            return self._ctx_graph(ctx).value(s, p)


    def contains(self, pattern, ctx):
        """
        Whether any triple matching a pattern is in a named graph.

        :rtype: bool
        """
        with self._lock:
            for _ in self._ctx_graph(ctx).triples(pattern):
                return True

        return False


    def contexts(self, pattern):
        """
        Names of the graphs containing triples matching a pattern.

        :param tuple pattern: 3-tuple of terms or ``None`` as wildcard.

        :rtype: set(rdflib.URIRef)
        """
        with self._lock:
            return {
                getattr(ctx, 'identifier', ctx)
                for ctx in self.ds.contexts(pattern)}


    ## WRITE METHODS ##

    def add(self, trp, ctx):
        """
        Add a triple to a named graph.

        :param tuple trp: 3-tuple of terms.
        :param ctx: Name of the graph.
        """
        with self._lock:
            gr = self._ctx_graph(ctx)
            if trp in gr:
                return
            gr.add(trp)
            if self._journal is not None:
                self._journal.append(('add', trp, ctx))


    def remove(self, pattern, ctx):
        """
        Remove triples matching a pattern from a named graph.

        :param tuple pattern: 3-tuple of terms or ``None`` as wildcard.
        :param ctx: Name of the graph.

        :rtype: int
        :return: Number of triples removed.
        """
        with self._lock:
            gr = self._ctx_graph(ctx)
            removed = list(gr.triples(pattern))
            for trp in removed:
                gr.remove(trp)
                if self._journal is not None:
                    self._journal.append(('remove', trp, ctx))

        return len(removed)


    def replace_graph(self, ctx, triples):
        """
        Replace the whole content of a named graph.

        :param ctx: Name of the graph.
        :param triples: Iterable of 3-tuples.
        """
        with self._lock:
            self.remove((None, None, None), ctx)
            for trp in triples:
                self.add(trp, ctx)


    def _ctx_graph(self, ctx):
        return self.ds.get_context(URIRef(ctx))
