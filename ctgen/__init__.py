"""ctgen — cache-aware, two-phase client code generation for builds."""

__version__ = "0.1.0"
