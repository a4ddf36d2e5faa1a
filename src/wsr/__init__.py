"""wsr - task runner for mixed npm/pnpm/yarn/deno monorepos."""

__version__ = "0.4.0"
