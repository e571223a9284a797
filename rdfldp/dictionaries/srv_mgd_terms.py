from rdfldp.dictionaries.namespaces import ns_collection as nsc

srv_mgd_predicates = {
    nsc['dcterms'].modified,
    nsc['iana'].describedBy,
    nsc['ldp'].contains,
    nsc['premis'].hasMessageDigest,
    nsc['prov'].invalidatedAtTime,
    nsc['srv'].membershipValue,
}
"""
Predicates managed by the server. A client payload containing any of these
is rejected.
"""
