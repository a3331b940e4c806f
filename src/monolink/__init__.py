"""monolink - monorepo-aware node_modules symlinker.

Mirrors a service's dependency graph into its own node_modules directory as
relative symlinks, preferring pnpm workspace members over nested copies, and
removes those links again when packaging is done.

Package entry point. Exports the version string only; all functional
modules are imported lazily by main.py to keep startup fast.
"""

__version__ = "0.1.0"
