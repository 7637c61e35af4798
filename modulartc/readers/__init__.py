from .linewise_reader import LinewiseTextReader, tokenize

__all__ = ["LinewiseTextReader", "tokenize"]
