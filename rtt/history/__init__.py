"""History layer: mirror registry histories and search them by message and date.

- Cloning: blob-less, checkout-less mirrors of each registry
- Release search: find the commit that published a package version
- Date projection: find the latest commit at or before a timestamp
"""
