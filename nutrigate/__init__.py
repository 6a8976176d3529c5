"""NutriGate - authenticated gateway between the mobile client and the AI model provider."""

__version__ = "0.1.0"
