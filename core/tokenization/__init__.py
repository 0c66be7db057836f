"""
Package core.tokenization - Token counting cho digest.

Modules:
- counter: TokenCounter protocol, tiktoken va estimate implementations
"""
