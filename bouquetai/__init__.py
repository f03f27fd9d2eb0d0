"""BouquetAI: AI-assisted bouquet design.

Package layout:
    - `config`: environment-driven endpoints, budgets and credential lookup.
    - `transport`: HTTP calls with bounded retry.
    - `providers`: synchronous (OpenAI) and asynchronous (Yandex) adapters.
    - `recovery`: suggestion JSON recovery from free-form model text.
    - `core.engine`: the generation orchestrator.
    - `api`: credential relay and CLI.
"""

__version__ = "0.1.0"
