"""
Integration Tests - End-to-End Cache Flows.

These tests verify that all components work together correctly:
an assembled PageCache renders through a real file store and is
invalidated through the content event bus.

Test Files:
    - test_page_cache_flow.py: Render, invalidate, flush
"""
