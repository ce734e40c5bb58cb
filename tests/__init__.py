"""
Commercial core test suite

Test Categories:
- unit: Fast, isolated tests
- integration: Tests that interact with the database or the HTTP layer
- slow: Long-running tests

Run tests with:
    pytest                          # Run all tests
    pytest -m unit                  # Run only unit tests
    pytest -m integration           # Run only integration tests
    pytest -m "not slow"            # Skip slow tests
"""
