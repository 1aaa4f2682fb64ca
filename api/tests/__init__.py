"""
Test suite for the Replicate runner.

Provides:
- Schema translation and version listing tests
- Prediction submission and polling tests
- Batch orchestration tests
- HTTP API tests
"""
