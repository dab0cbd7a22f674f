"""
Test suite for ACCREDIT

Unit tests for matching, validation, caching, storage, the directory client
and the extractors, plus end-to-end EMCC/ICF verification, API and CLI tests.
Directory responses are mocked by patching ``httpx.get``; no real HTTP calls.
"""
