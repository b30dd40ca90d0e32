"""riskscan — LLM-assisted dependency and source-code risk scanner."""

__version__ = "0.1.0"
