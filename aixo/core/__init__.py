"""Core dispatch package.

Composition:
    - `dispatcher`: request resolution, default merging, provider invocation,
      and usage accounting.
    - `registry`: fixed provider table keyed by lowercase provider key.
    - `options`: task vocabulary and option coercion helpers.

Package import itself is side-effect free.
"""
