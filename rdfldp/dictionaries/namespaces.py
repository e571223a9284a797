import rdflib

from rdflib import Graph
from rdflib.namespace import Namespace, NamespaceManager

from rdfldp import env

# Core namespace prefixes. These add to and override any user-defined prefixes.
core_namespaces = {
    'dc' : rdflib.namespace.DC,
    'dcterms' : rdflib.namespace.DCTERMS,
    'iana' : Namespace('http://www.iana.org/assignments/relation/'),
    'ldp' : Namespace('http://www.w3.org/ns/ldp#'),
    'owl' : rdflib.namespace.OWL,
    'premis' : Namespace('http://www.loc.gov/premis/rdf/v1#'),
    'prov' : rdflib.namespace.PROV,
    'rdf' : rdflib.namespace.RDF,
    'rdfs' : rdflib.namespace.RDFS,
    'srv' : Namespace('urn:rdfldp:srv#'),
    'xsd' : rdflib.namespace.XSD,
}

ns_collection = {}
# Custom prefixes are only available once the environment is set up.
if hasattr(env, 'app_globals'):
    ns_collection.update({
        pfx: Namespace(ns)
        for pfx, ns in env.app_globals.config['namespaces'].items()})
ns_collection.update(core_namespaces)

ns_mgr = NamespaceManager(Graph())

# Collection of prefixes in a dict.
for ns,uri in ns_collection.items():
    ns_mgr.bind(ns, uri, override=False)
