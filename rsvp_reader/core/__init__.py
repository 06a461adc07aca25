"""Core playback, reconciliation, and speed-mapping modules.

WHY: The core package is the part of the reader that must behave the same
no matter what drives it — a phone overlay, the HTTP service, the CLI, or
a test. It has no I/O and no knowledge of where text or gestures come from.

HOW: models.py defines the data structures, tokenizer.py and orp.py turn
text into display strings, speed.py maps gestures to speeds, reconciler.py
finds resume points in new buffers, observable.py publishes latest values,
and engine.py ties them together in the playback state machine.

RULES:
- Pure functions everywhere except engine.py and observable.py
- No module-level mutable state; the engine is constructed per session
- Failure outcomes are return values (None), not exceptions
"""
