"""ViewModel package for UI state and display projections.

Call context:
    ``taxcalc/web_ui/runtime.py`` and ``taxcalc/web_ui/main.py`` import
    concrete viewmodels from this package to render session state.

Dependencies:
    Modules in this package depend on domain types and the formatting helpers
    only. I/O adapters and use-case orchestration remain outside.
"""
