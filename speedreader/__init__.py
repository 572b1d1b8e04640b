"""Speedreader — terminal speed reading with live pacing controls.

WHY: Reading one word at a time at a fixed pace (rapid serial visual
presentation) trains reading speed. The reader needs to pause, adjust
the pace and quit at any moment without the pacing drifting, and may
want feedback on how much was actually understood.

HOW: Three stages: tokenize the text (core.tokenizer), pace it on an
interactive terminal (core.pacer, terminal.*), then optionally send the
reader's summary to a language model for assessment (api.client).

RULES:
- The pacing core never owns the terminal mode; the CLI acquires it
- Only configuration persists between runs
- All network access goes through api.client
"""

__version__ = "0.1.0"
