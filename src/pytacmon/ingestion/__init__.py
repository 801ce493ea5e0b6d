"""Ingestion layer.

Turns untrusted snapshot records into validated :class:`pytacmon.models.RawEntity`
values. Only the state layer is allowed to apply them.
"""
