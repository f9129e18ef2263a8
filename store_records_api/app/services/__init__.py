"""
Service layer.

Each service encapsulates one step of the store synchronisation:
resolving a store name, reading the aggregate document and writing it
back.  Services receive their collaborators (the record service
client, the resolver) through their constructors; none of them holds
state between calls.
"""
