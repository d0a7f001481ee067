"""Unit tests for individual components in isolation.

Coverage:
    - assistant/: registry, uploader, run polling, conversation, history, config
    - parsing/: PDF validation
"""
