"""autotime Test Suite

Test organization:
- unit/: Unit tests for individual modules
  - generation/: aggregator, weighted pool, daily allocator
  - submission/: rate-limited fail-fast scheduler
  - bigtime/: HTTP client (httpx.MockTransport)
  - core/: config, results, CLI
- integration/: The full autofill run against a fake BigTime client

Running tests:
    # All tests
    pytest

    # Specific module
    pytest tests/unit/generation/
"""
