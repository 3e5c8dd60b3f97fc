"""Core context-window management: messages, tokens, pruning, caching."""
