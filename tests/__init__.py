"""
Test suite for photomap.

- Unit tests for models, host abstractions and services
- Integration tests for share-to-presentation and export workflows
"""
