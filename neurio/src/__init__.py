"""
Neurio edge daemon package.

Polls a Neurio CT sensor over HTTP, extracts per-line power, reactive
power, voltage and imported energy from its ``/current-sample`` payload,
and republishes the values into a local variable store.

CHANGELOG:
- 2026-03-02: Initial creation (STORY-101)

TODO:
- None
"""
