"""
CLI (Command Line Interface) for the SEO baseline checker.

This is a thin wrapper around the core engine. All business logic lives
in the engine package so test suites can reuse it directly.
"""
