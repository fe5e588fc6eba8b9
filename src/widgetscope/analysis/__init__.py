"""
Static Analysis Package.

The passes that turn a validated tree into descriptors, graphs and a score.

Modules:
    - ``widgets``: Role classification, members and entry point detection.
    - ``inference``: Literal and structural initializer typing.
    - ``state``: State class linking, update calls, lifecycle and handlers.
    - ``catalog``: The versioned table of render-time usage patterns.
    - ``context``: Value providers, observables, DI wrappers and their graphs.
    - ``ssr``: Hydration, lazy loading, validation and the bounded score.
    - ``migration``: The ordered remediation checklist.
"""
