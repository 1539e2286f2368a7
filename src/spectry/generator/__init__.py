"""Example value generation for request bodies.

:func:`~spectry.generator.synthesizer.synthesize` turns a schema fragment
into a placeholder value; :func:`~spectry.generator.synthesizer.example_body`
wraps it for a whole operation and returns editable JSON text.
"""

from spectry.generator.synthesizer import example_body, synthesize

__all__ = ["example_body", "synthesize"]
