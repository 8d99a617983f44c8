"""PromptDesk: browse prompt templates, fill in variables, generate prompts."""

__version__ = "0.1.0"
