"""Adapter package for external I/O implementations.

Purpose:
    Collect concrete implementations for domain ports (the tax service REST
    API and local settings storage) used by use cases.

Dependencies:
    ``tax_rest`` and ``http_client`` depend on ``requests``; ``storage_local``
    uses the filesystem only.

Call context:
    Imported by ``taxcalc/web_ui/runtime.py`` for runtime wiring and by tests
    for transport-level behavior verification.
"""
