"""API surface package.

Module split:
    - `http_api`: FastAPI credential relay in front of the providers.
    - `cli`: terminal entrypoint over `bouquetai.core.engine`.
"""
