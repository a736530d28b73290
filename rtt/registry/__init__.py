"""Registry layer: discover configured registries and load snapshot indexes.

- Discovery: which registries the local depots know about
- Loading: parse a snapshot directory into a ``RegistryIndex``
"""
