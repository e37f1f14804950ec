"""
Recommendation engine: fuses the ML forecast and technical features into a
Buy/Sell/Hold recommendation with confidence and human-readable reasoning.

Modules
-------
fusion   : fuse_signals() — the ordered rule cascade; pure, no I/O.
analyzer : analyze() — input guard, feature extraction, forecast, fusion,
           and translation of failures into ``Unavailable``.
"""
