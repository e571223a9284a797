from rdfldp.dictionaries.namespaces import ns_collection as nsc

META_GR_SUFFIX = '#meta'
"""
Suffix appended to a resource URI to name its metadata graph.

This is part of the persisted layout and must not change.
"""

DESC_PATH = '.well-known/desc'
"""
Path, relative to a LDP-NR URI, of the RDF source describing it.

This is part of the persisted layout and must not change.
"""

RES_CREATED = '_create_'
"""A resource was created."""
RES_DELETED = '_delete_'
"""A resource was deleted."""
RES_UPDATED = '_update_'
"""A resource was updated."""

LDP_MEMBER = nsc['ldp'].member
"""Default membership predicate."""
LDP_MEMBER_SUBJECT = nsc['ldp'].MemberSubject
"""Inserted content relation indicating the member's own URI."""

DEFAULT_RDF_MIMETYPE = 'text/turtle'
"""Serialization used when no format is requested."""
