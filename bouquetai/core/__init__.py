"""Core orchestration package.

Architectural role:
    Exposes the generation pipeline that sits between API/CLI entrypoints and the
    provider adapters, transport and structured-output recovery.

Composition:
    - `engine`: `generate_suggestions` and `generate_bouquet`.
"""
