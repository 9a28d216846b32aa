"""
Unit Tests - Testing Individual Components in Isolation.

Each component is tested in isolation with mocked dependencies.
Storage tests run against tmp_path and a frozen clock.

Test Files:
    - test_eligibility.py: Cacheability rules
    - test_key_builder.py: Discriminators and cache paths
    - test_cache_store.py: Freshness, atomic writes, removal
    - test_invalidation_coordinator.py: Expiry modes and cascades
    - test_render_orchestrator.py: Hit/miss, options, nesting
    - test_config_loader.py: Configuration loading/validation
"""
