"""PromptForge: prompt-engineering workbench."""

__version__ = "0.1.0"
