"""
Descriptor configuration — loading, validation policy, and writing.

Import from the submodules directly:

    from shellenv.core.config.loader import load
    from shellenv.core.config.options import LoaderOptions
"""
