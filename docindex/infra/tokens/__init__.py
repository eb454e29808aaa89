from .counters import TiktokenCounter, WhitespaceTokenCounter, build_token_counter

__all__ = ["TiktokenCounter", "WhitespaceTokenCounter", "build_token_counter"]
