# Tests Package
"""
Test suite for the Rakshak decision service.

- unit/: Component-level tests (validator, rules, engine, dispatcher, clients)
- test_server_api.py: HTTP end-to-end scenarios
- test_config.py: Environment configuration
"""
